"""Service layer for chunkup.

Provides the remote upload session and the whole-file upload service.
"""

from __future__ import annotations

from .base import BaseService
from .session import UploadSession
from .uploads import UploadService, guess_mime_type

__all__ = [
    "BaseService",
    "UploadSession",
    "UploadService",
    "guess_mime_type",
]
