"""Data models for chunkup.

Provides Pydantic models for API payloads and dataclasses for upload progress.
"""

from __future__ import annotations

from .base import BaseModel
from .progress import OperationPhase, UploadProgress, UploadSummary
from .upload import (
    ChunkRef,
    CreateUploadResponse,
    FinalizeRequest,
    ProbeRequest,
    ProbeResponse,
)

__all__ = [
    # Base
    "BaseModel",
    # Wire payloads
    "ChunkRef",
    "CreateUploadResponse",
    "ProbeRequest",
    "ProbeResponse",
    "FinalizeRequest",
    # Progress
    "OperationPhase",
    "UploadProgress",
    "UploadSummary",
]
