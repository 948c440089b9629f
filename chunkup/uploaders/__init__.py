"""Chunk pipeline for chunkup.

This package provides the pieces the upload service composes:
- Chunk planner (chunk size tiers and file spans)
- Content addresser (sha256 + length identifiers)
- Dispatcher (sequential reader feeding a bounded worker pool)
- Result aggregator (fail-fast collection and index ordering)

These are internal implementation details. Use `UploadService` from
`chunkup.services.uploads` as the public API.
"""

from chunkup.uploaders.addressing import ContentIdentifier, compute_identifier
from chunkup.uploaders.aggregator import ChunkResult, ResultAggregator
from chunkup.uploaders.constants import (
    DEFAULT_MAX_IN_FLIGHT,
    IDENTIFIER_SEPARATOR,
    MB,
)
from chunkup.uploaders.dispatcher import ChunkDispatcher
from chunkup.uploaders.planner import (
    ChunkSpan,
    estimate_chunk_count,
    get_chunk_size,
    plan_chunks,
)

__all__ = [
    # Constants
    "DEFAULT_MAX_IN_FLIGHT",
    "IDENTIFIER_SEPARATOR",
    "MB",
    # Planner
    "ChunkSpan",
    "get_chunk_size",
    "estimate_chunk_count",
    "plan_chunks",
    # Addressing
    "ContentIdentifier",
    "compute_identifier",
    # Dispatch
    "ChunkDispatcher",
    "ChunkResult",
    "ResultAggregator",
]
