"""Progress models for tracking upload status.

Provides dataclasses for progress callbacks and the final upload summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class OperationPhase(Enum):
    """Operation phases for progress tracking."""

    PREPARING = "preparing"
    UPLOADING = "uploading"
    FINALIZING = "finalizing"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class UploadProgress:
    """Progress information for upload callbacks."""

    phase: OperationPhase
    current: int = 0
    total: int = 0
    message: str = ""
    chunk_index: int | None = None
    uploaded: bool = True
    bytes_sent: int = 0
    total_bytes: int = 0
    success: bool = True
    errors: List[str] = field(default_factory=list)

    @property
    def percent(self) -> float:
        """Calculate completion percentage."""
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100

    @property
    def is_complete(self) -> bool:
        """Check if operation is complete."""
        return self.phase == OperationPhase.COMPLETE


@dataclass
class UploadSummary:
    """Summary of a completed upload."""

    success: bool
    file_name: str
    resource_key: str
    upload_id: str
    total_bytes: int
    chunk_size: int
    chunks_total: int
    chunks_uploaded: int
    chunks_skipped: int
    duration: float
    manifest: List[str] = field(default_factory=list)

    @property
    def total_mb(self) -> float:
        """Return total megabytes."""
        return self.total_bytes / (1024 * 1024)

    @property
    def throughput_mbps(self) -> float:
        """Calculate upload throughput in MB/s."""
        if self.duration == 0:
            return 0.0
        return self.total_mb / self.duration

    def to_dict(self) -> dict[str, object]:
        """Convert to a dictionary for display."""
        return {
            "file": self.file_name,
            "resource_key": self.resource_key,
            "upload_id": self.upload_id,
            "size_mb": round(self.total_mb, 2),
            "chunk_size_mb": round(self.chunk_size / (1024 * 1024), 2),
            "chunks": self.chunks_total,
            "uploaded": self.chunks_uploaded,
            "deduplicated": self.chunks_skipped,
            "duration": f"{self.duration:.2f}s",
        }
