"""Upload service: one file, end to end.

Stats the source, plans chunk geometry, opens a remote session, dispatches
chunks through the bounded worker pool, orders the results, and finalizes.
The run either commits the whole file or raises a single terminal error.
"""

from __future__ import annotations

import logging
import mimetypes
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from chunkup.core.exceptions import SourceFileError
from chunkup.core.logging import LogContext
from chunkup.core.retry import RetryPolicy
from chunkup.core.validation import validate_source_file, validate_workers
from chunkup.models.progress import OperationPhase, UploadProgress, UploadSummary
from chunkup.uploaders.aggregator import ChunkResult, ResultAggregator
from chunkup.uploaders.constants import DEFAULT_MAX_IN_FLIGHT
from chunkup.uploaders.dispatcher import ChunkDispatcher
from chunkup.uploaders.planner import get_chunk_size, plan_chunks

from .base import BaseService
from .session import UploadSession

logger = logging.getLogger(__name__)


def guess_mime_type(path: Path) -> str:
    """MIME type from the file extension, or "" when unknown."""
    mime_type, _encoding = mimetypes.guess_type(path.name)
    return mime_type or ""


class UploadService(BaseService):
    """Service for chunked single-file uploads."""

    def upload_file(
        self,
        file_path: Path,
        resource_key: str,
        *,
        chunk_size: int | None = None,
        workers: int = DEFAULT_MAX_IN_FLIGHT,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        progress_callback: Callable[[UploadProgress], None] | None = None,
    ) -> UploadSummary:
        """Upload a file in content-addressed chunks.

        Chunks the service already holds (same bytes, same length) are
        probed and skipped, so re-running an interrupted upload only sends
        what is missing.

        Args:
            file_path: Source file.
            resource_key: Target resource (e.g. an issue key).
            chunk_size: Chunk size override in bytes (default: size tier).
            workers: Maximum chunks in flight at once (default: 8).
            retry_policy: Backoff schedule for every remote call.
            sleep: Sleep used between retries outside the worker pool.
            progress_callback: Optional callback for progress updates.

        Returns:
            UploadSummary for the committed file.

        Raises:
            SourceFileError: If the file cannot be stat'ed, opened, or read.
            AuthenticationError: If any call is rejected as unauthorized.
            RetryExhaustedError: If a call keeps failing transiently.
            ProtocolInvariantError: If chunk results do not cover the file.
        """
        start_time = time.time()
        file_path = Path(file_path)
        workers = validate_workers(workers)

        def report(phase: OperationPhase, **kwargs: Any) -> None:
            if progress_callback:
                progress_callback(UploadProgress(phase=phase, **kwargs))

        file_size = validate_source_file(file_path)
        if chunk_size is None:
            chunk_size = get_chunk_size(file_size)
        planned = len(plan_chunks(file_size, chunk_size))
        file_name = file_path.name

        report(
            OperationPhase.PREPARING,
            total=planned,
            total_bytes=file_size,
            message=f"{file_name}: {file_size} bytes in {planned} chunk(s) of {chunk_size} bytes",
        )

        session = UploadSession(
            self.client,
            resource_key,
            retry_policy=retry_policy,
            sleep=sleep,
        )

        with LogContext(
            "upload",
            logger,
            file=file_name,
            resource_key=resource_key,
            size=file_size,
        ) as ctx:
            try:
                upload_id = session.create()

                aggregator = ResultAggregator()
                done_lock = threading.Lock()
                done = {"chunks": 0, "bytes": 0}

                def on_chunk_done(result: ChunkResult) -> None:
                    size = result.identifier.size if result.identifier else 0
                    with done_lock:
                        done["chunks"] += 1
                        done["bytes"] += size
                        current, sent = done["chunks"], done["bytes"]
                    report(
                        OperationPhase.UPLOADING,
                        current=current,
                        total=planned,
                        chunk_index=result.index,
                        uploaded=result.uploaded,
                        bytes_sent=sent,
                        total_bytes=file_size,
                        message=f"Chunk {result.index + 1}/{planned}"
                        + ("" if result.uploaded else " (already stored)"),
                    )

                dispatcher = ChunkDispatcher(
                    session,
                    chunk_size,
                    file_name=file_name,
                    max_in_flight=workers,
                    on_chunk_done=on_chunk_done,
                )

                try:
                    with file_path.open("rb") as stream:
                        enumerated = dispatcher.dispatch(stream, aggregator)
                except OSError as e:
                    raise SourceFileError(str(file_path), e.strerror or str(e)) from e

                manifest = aggregator.collect(enumerated)
                ctx.debug(
                    "%d chunks collected (%d uploaded, %d already stored)",
                    len(manifest),
                    aggregator.uploaded_count,
                    aggregator.skipped_count,
                )

                report(
                    OperationPhase.FINALIZING,
                    current=len(manifest),
                    total=len(manifest),
                    message="Committing upload...",
                )
                session.finalize(manifest, file_name, guess_mime_type(file_path))
            except Exception as e:
                report(OperationPhase.ERROR, success=False, message=str(e), errors=[str(e)])
                raise

        summary = UploadSummary(
            success=True,
            file_name=file_name,
            resource_key=resource_key,
            upload_id=upload_id,
            total_bytes=file_size,
            chunk_size=chunk_size,
            chunks_total=len(manifest),
            chunks_uploaded=aggregator.uploaded_count,
            chunks_skipped=aggregator.skipped_count,
            duration=time.time() - start_time,
            manifest=[str(i) for i in manifest],
        )

        report(
            OperationPhase.COMPLETE,
            current=len(manifest),
            total=len(manifest),
            bytes_sent=file_size,
            total_bytes=file_size,
            message=f"Uploaded {file_name} to {resource_key}",
        )
        return summary
