"""Core modules for chunkup."""

from chunkup.core.client import Outcome, TransportClient, TransportResult
from chunkup.core.config import CONFIG_DIR, CONFIG_FILE, Config, Credentials, Profile
from chunkup.core.exceptions import (
    AuthenticationError,
    ChunkupError,
    ConfigurationError,
    ConnectionError,
    InvalidURLError,
    OperationError,
    ProfileNotFoundError,
    ProtocolInvariantError,
    RetryExhaustedError,
    SourceFileError,
    TransientRemoteError,
    UploadCancelledError,
    UploadError,
    ValidationError,
)
from chunkup.core.logging import LogContext, get_logger, setup_logging
from chunkup.core.retry import RetryPolicy, call_with_retry

__all__ = [
    # Exceptions
    "ChunkupError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "InvalidURLError",
    "OperationError",
    "ProfileNotFoundError",
    "ProtocolInvariantError",
    "RetryExhaustedError",
    "SourceFileError",
    "TransientRemoteError",
    "UploadCancelledError",
    "UploadError",
    "ValidationError",
    # Config
    "Config",
    "Credentials",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Transport
    "Outcome",
    "TransportClient",
    "TransportResult",
    "RetryPolicy",
    "call_with_retry",
    # Logging
    "get_logger",
    "setup_logging",
    "LogContext",
]
