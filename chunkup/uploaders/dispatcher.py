"""Bounded-concurrency chunk dispatch.

The calling thread reads the source strictly sequentially and assigns
indices in file order. Each chunk is handed to a worker thread only after a
permit is taken from a shared semaphore, so at most ``max_in_flight`` chunk
buffers and network operations exist at once and the reader blocks when the
pool is saturated.

This is an internal implementation detail. Use `UploadService` from
`chunkup.services.uploads` as the public API.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, BinaryIO

from chunkup.core.exceptions import (
    ChunkupError,
    SourceFileError,
    UploadCancelledError,
)
from chunkup.core.validation import validate_workers
from chunkup.uploaders.addressing import compute_identifier
from chunkup.uploaders.aggregator import ChunkResult, ResultAggregator
from chunkup.uploaders.constants import DEFAULT_MAX_IN_FLIGHT

if TYPE_CHECKING:
    from chunkup.services.session import UploadSession

logger = logging.getLogger(__name__)

# How often a blocked reader re-checks the abort flag, in seconds
PERMIT_POLL_INTERVAL = 0.1


class ChunkDispatcher:
    """Drive every chunk of one file through probe and conditional upload."""

    def __init__(
        self,
        session: UploadSession,
        chunk_size: int,
        *,
        file_name: str,
        max_in_flight: int = DEFAULT_MAX_IN_FLIGHT,
        on_chunk_done: Callable[[ChunkResult], None] | None = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.session = session
        self.chunk_size = chunk_size
        self.file_name = file_name
        self.max_in_flight = validate_workers(max_in_flight)
        self.on_chunk_done = on_chunk_done
        self._permits = threading.BoundedSemaphore(max_in_flight)

    # =========================================================================
    # Worker
    # =========================================================================

    def _process_chunk(self, index: int, data: bytes, cancel_event: threading.Event) -> ChunkResult:
        """Address, probe, and upload one chunk if the service lacks it."""
        identifier = compute_identifier(data)
        operation = "probe"
        try:
            exists = self.session.probe(identifier, cancel_event=cancel_event)
            if exists:
                logger.debug("Chunk %d already stored (%s), skipping upload", index, identifier)
                return ChunkResult(index=index, identifier=identifier, uploaded=False)

            operation = "upload"
            self.session.upload(
                identifier,
                data,
                index + 1,
                file_name=self.file_name,
                cancel_event=cancel_event,
            )
            logger.debug("Chunk %d uploaded (%s)", index, identifier)
            return ChunkResult(index=index, identifier=identifier, uploaded=True)
        except ChunkupError as e:
            e.details.setdefault("chunk", index)
            e.details.setdefault("operation", operation)
            return ChunkResult(index=index, identifier=identifier, error=e)

    def _run_worker(
        self,
        index: int,
        data: bytes,
        aggregator: ResultAggregator,
    ) -> None:
        # The result is submitted before the permit is returned, so a failure
        # is visible to the reader before it can take another permit.
        try:
            try:
                result = self._process_chunk(index, data, aggregator.abort_event)
            except Exception as e:
                logger.exception("Unexpected error processing chunk %d", index)
                result = ChunkResult(index=index, error=e)

            if isinstance(result.error, UploadCancelledError):
                # The run already failed; collect() reports that first failure.
                logger.debug("Chunk %d cancelled", index)
            aggregator.submit(result)
            if result.success and self.on_chunk_done:
                try:
                    self.on_chunk_done(result)
                except Exception as e:
                    logger.exception("Chunk %d completion callback failed", index)
                    aggregator.abort(e)
        finally:
            self._permits.release()

    # =========================================================================
    # Reader
    # =========================================================================

    def _read_chunk(self, stream: BinaryIO) -> bytes:
        """Read up to chunk_size bytes; a short result means EOF."""
        data = stream.read(self.chunk_size)
        if not data or len(data) == self.chunk_size:
            return data

        buf = bytearray(data)
        while len(buf) < self.chunk_size:
            piece = stream.read(self.chunk_size - len(buf))
            if not piece:
                break
            buf += piece
        return bytes(buf)

    def _acquire_permit(self, abort_event: threading.Event) -> bool:
        """Block for a permit; give up if the run aborts meanwhile."""
        while not self._permits.acquire(timeout=PERMIT_POLL_INTERVAL):
            if abort_event.is_set():
                return False
        if abort_event.is_set():
            self._permits.release()
            return False
        return True

    def dispatch(self, stream: BinaryIO, aggregator: ResultAggregator) -> int:
        """Read ``stream`` to EOF, processing every chunk under the cap.

        Returns only after every submitted worker has finished.

        Args:
            stream: Binary stream positioned at the start of the file.
            aggregator: Sink for chunk results; its abort event stops reading.

        Returns:
            Number of chunks enumerated. An empty stream counts as one
            zero-length chunk.

        Raises:
            SourceFileError: If reading the stream fails.
        """
        abort_event = aggregator.abort_event
        index = 0
        read_error: OSError | None = None
        futures: list[Future[None]] = []

        with ThreadPoolExecutor(
            max_workers=self.max_in_flight,
            thread_name_prefix="chunkup-worker",
        ) as executor:
            try:
                while True:
                    if not self._acquire_permit(abort_event):
                        logger.debug("Run aborted, stopping reader at chunk %d", index)
                        break

                    try:
                        data = self._read_chunk(stream)
                    except OSError as e:
                        self._permits.release()
                        read_error = e
                        aggregator.abort(SourceFileError(self.file_name, str(e)))
                        break

                    if not data and index > 0:
                        self._permits.release()
                        break

                    futures.append(executor.submit(self._run_worker, index, data, aggregator))
                    index += 1

                    if len(data) < self.chunk_size:
                        break
            except BaseException:
                # Stop workers' retry waits before the pool shutdown joins them.
                abort_event.set()
                raise

        # Re-raise anything that escaped a worker's own error handling.
        for future in futures:
            future.result()

        if read_error is not None:
            raise SourceFileError(self.file_name, str(read_error)) from read_error

        return index
