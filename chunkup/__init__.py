"""chunkup - Chunked, content-addressed uploads of large files.

This package uploads a single large file to a service that only accepts
bounded-size parts:
- Adaptive chunk sizing by file size
- Content-addressed chunks, probed before upload for deduplication and resume
- Bounded-parallel transfer with fail-fast error handling
- Index-ordered manifest committed in one finalize call
"""

__version__ = "0.1.0"

from chunkup.core.client import TransportClient
from chunkup.core.config import Config, Credentials, Profile
from chunkup.core.exceptions import (
    AuthenticationError,
    ChunkupError,
    ConfigurationError,
    ProtocolInvariantError,
    RetryExhaustedError,
    SourceFileError,
    TransientRemoteError,
    ValidationError,
)
from chunkup.services.uploads import UploadService

__all__ = [
    "__version__",
    "TransportClient",
    "UploadService",
    "Config",
    "Credentials",
    "Profile",
    "ChunkupError",
    "AuthenticationError",
    "ConfigurationError",
    "ProtocolInvariantError",
    "RetryExhaustedError",
    "SourceFileError",
    "TransientRemoteError",
    "ValidationError",
]
