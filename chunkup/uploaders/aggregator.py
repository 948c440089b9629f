"""Collect per-chunk outcomes and build the finalize manifest."""

from __future__ import annotations

import logging
import queue
import threading
from collections import Counter
from dataclasses import dataclass

from chunkup.core.exceptions import ProtocolInvariantError
from chunkup.uploaders.addressing import ContentIdentifier

logger = logging.getLogger(__name__)


@dataclass
class ChunkResult:
    """Outcome of processing one chunk."""

    index: int
    identifier: ContentIdentifier | None = None
    uploaded: bool = False
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class ResultAggregator:
    """Thread-safe sink for ChunkResults.

    Workers call submit() from any thread. The first failed result is
    latched and sets ``abort_event`` so the reader and in-flight workers can
    stop early. collect() is called once, by the orchestrating thread.
    """

    def __init__(self) -> None:
        self.abort_event = threading.Event()
        self._queue: queue.Queue[ChunkResult] = queue.Queue()
        self._lock = threading.Lock()
        self._failure: ChunkResult | None = None
        self.uploaded_count = 0
        self.skipped_count = 0

    @property
    def failed(self) -> bool:
        """Whether a failure has been latched."""
        return self.abort_event.is_set()

    @property
    def first_failure(self) -> ChunkResult | None:
        return self._failure

    def submit(self, result: ChunkResult) -> None:
        """Record one chunk outcome."""
        if result.error is not None:
            with self._lock:
                if self._failure is None:
                    self._failure = result
                    logger.error("Chunk %d failed, aborting run: %s", result.index, result.error)
            self.abort_event.set()
        self._queue.put(result)

    def abort(self, error: Exception) -> None:
        """Latch a failure that does not belong to a single chunk."""
        self.submit(ChunkResult(index=-1, error=error))

    def collect(self, expected_count: int) -> list[ContentIdentifier]:
        """Drain results and return identifiers ordered by chunk index.

        Args:
            expected_count: Number of chunks the dispatcher enumerated.

        Returns:
            Identifiers sorted by index, one per chunk.

        Raises:
            Exception: The first latched chunk failure, unchanged.
            ProtocolInvariantError: If results do not cover 0..N-1 exactly once.
        """
        results: list[ChunkResult] = []
        while True:
            try:
                results.append(self._queue.get_nowait())
            except queue.Empty:
                break

        if self._failure is not None and self._failure.error is not None:
            raise self._failure.error

        if len(results) != expected_count:
            raise ProtocolInvariantError(
                f"Expected {expected_count} chunk results, got {len(results)}",
                {"expected": expected_count, "received": len(results)},
            )

        results.sort(key=lambda r: r.index)
        indices = [r.index for r in results]
        if indices != list(range(expected_count)):
            counts = Counter(indices)
            duplicates = sorted(i for i, n in counts.items() if n > 1)
            missing = sorted(set(range(expected_count)) - set(counts))
            raise ProtocolInvariantError(
                "Chunk indices are not contiguous",
                {"missing": missing, "duplicates": duplicates},
            )

        manifest: list[ContentIdentifier] = []
        for r in results:
            if r.identifier is None:
                raise ProtocolInvariantError(
                    f"Chunk {r.index} reported success without an identifier",
                    {"chunk": r.index},
                )
            manifest.append(r.identifier)

        self.uploaded_count = sum(1 for r in results if r.uploaded)
        self.skipped_count = len(results) - self.uploaded_count
        return manifest
