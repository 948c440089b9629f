"""Chunk geometry for a file of known size.

Pure functions: no I/O, deterministic.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from chunkup.core.exceptions import ValidationError
from chunkup.uploaders.constants import (
    CHUNK_SIZE_TIERS_MB,
    GROUP_SIZE_MB,
    MAX_CHUNK_SIZE_MB,
    MB,
)


@dataclass(frozen=True)
class ChunkSpan:
    """A contiguous byte range of the source file."""

    index: int
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def part_number(self) -> int:
        """1-based part number used on the wire."""
        return self.index + 1


def _check_size(file_size: int) -> None:
    if file_size < 0:
        raise ValidationError("File size cannot be negative", field="file_size", value=file_size)


def get_chunk_size(file_size: int) -> int:
    """Pick the chunk size for a file.

    The file is measured in 10000 MB groups; fewer than 5 groups gives 5 MB
    chunks, fewer than 50 gives 50 MB, fewer than 100 gives 100 MB, anything
    larger 210 MB.

    Args:
        file_size: File size in bytes.

    Returns:
        Chunk size in bytes.
    """
    _check_size(file_size)
    groups = math.ceil((file_size / MB) / GROUP_SIZE_MB)
    for threshold, size_mb in CHUNK_SIZE_TIERS_MB:
        if groups < threshold:
            return size_mb * MB
    return MAX_CHUNK_SIZE_MB * MB


def estimate_chunk_count(file_size: int, chunk_size: int) -> int:
    """Upper bound on chunks for a file: ``file_size // chunk_size + 1``.

    Never zero. Overcounts by one when the size is an exact multiple of
    the chunk size; use plan_chunks() for the exact layout.
    """
    _check_size(file_size)
    if chunk_size <= 0:
        raise ValidationError("Chunk size must be positive", field="chunk_size", value=chunk_size)
    return file_size // chunk_size + 1


def plan_chunks(file_size: int, chunk_size: int | None = None) -> list[ChunkSpan]:
    """Enumerate the spans a sequential reader will produce.

    Spans are indexed from 0 in file order, do not overlap, and cover the
    file exactly. The last span may be short. An empty file yields a
    single zero-length span.

    Args:
        file_size: File size in bytes.
        chunk_size: Chunk size in bytes (default: get_chunk_size(file_size)).

    Returns:
        Ordered list of spans.
    """
    if chunk_size is None:
        chunk_size = get_chunk_size(file_size)
    bound = estimate_chunk_count(file_size, chunk_size)

    spans: list[ChunkSpan] = []
    for index in range(bound):
        offset = index * chunk_size
        length = min(chunk_size, file_size - offset)
        if length <= 0 and spans:
            break
        spans.append(ChunkSpan(index=index, offset=offset, length=max(length, 0)))
    return spans
