"""Remote upload session: create, probe, upload, finalize.

Each call is one classified transport request wrapped in its own
exponential-backoff retry loop. Transient failures are retried; an
authorization failure aborts immediately.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from chunkup.core.client import Outcome, TransportResult
from chunkup.core.exceptions import TransientRemoteError, UploadError, ValidationError
from chunkup.core.retry import RetryPolicy, call_with_retry
from chunkup.core.validation import validate_resource_key
from chunkup.models.upload import (
    ChunkRef,
    CreateUploadResponse,
    FinalizeRequest,
    ProbeRequest,
    ProbeResponse,
)
from chunkup.uploaders.addressing import ContentIdentifier
from chunkup.uploaders.constants import CHUNK_FORM_FIELD

from .base import BaseService

if TYPE_CHECKING:
    from chunkup.core.client import TransportClient

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def _chunk_refs(identifiers: Sequence[ContentIdentifier]) -> list[ChunkRef]:
    return [ChunkRef(hash=i.digest, size=i.size) for i in identifiers]


class UploadSession(BaseService):
    """One logical transfer of a file to a resource."""

    def __init__(
        self,
        client: TransportClient,
        resource_key: str,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the session.

        Args:
            client: Authenticated transport.
            resource_key: Target resource (e.g. an issue key).
            retry_policy: Backoff schedule shared by all calls.
            sleep: Sleep used between retries of calls made without a
                cancel event.
        """
        super().__init__(client)
        self.resource_key = validate_resource_key(resource_key)
        self.retry_policy = retry_policy or RetryPolicy()
        self.sleep = sleep
        self.upload_id: str | None = None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _path(self, *parts: str) -> str:
        return self._build_path("api", "upload", self.resource_key, *parts)

    def _require_upload_id(self, operation: str) -> str:
        if not self.upload_id:
            raise UploadError(
                f"Cannot {operation} before the upload session is created",
                details={"resource_key": self.resource_key},
            )
        return self.upload_id

    def _call(
        self,
        operation: str,
        attempt: Callable[[], TransportResult],
        cancel_event: threading.Event | None = None,
    ) -> TransportResult:
        return call_with_retry(
            attempt,
            operation=operation,
            policy=self.retry_policy,
            cancel_event=cancel_event,
            sleep=self.sleep,
        )

    def _parse(
        self,
        result: TransportResult,
        model: Any,
        path: str,
    ) -> TransportResult:
        """Validate a decoded body; schema mismatches count as transient."""
        if result.outcome is not Outcome.SUCCESS:
            return result
        try:
            result.payload = model.model_validate(result.payload)
        except PydanticValidationError as e:
            return TransportResult(
                Outcome.TRANSIENT,
                status_code=result.status_code,
                error=TransientRemoteError(
                    f"{self.client.base_url}{path}",
                    f"Unexpected response body: {e.error_count()} validation error(s)",
                    result.status_code,
                ),
            )
        return result

    # =========================================================================
    # Operations
    # =========================================================================

    def create(self) -> str:
        """Open a remote upload session scoped to the resource.

        Returns:
            Upload id issued by the service.

        Raises:
            AuthenticationError: If credentials are rejected.
            RetryExhaustedError: If the service never answers 201.
        """
        path = self._path("create")

        def attempt() -> TransportResult:
            result = self.client.request(
                "POST",
                path,
                expected=(201,),
                headers=JSON_HEADERS,
                decode_json=True,
            )
            return self._parse(result, CreateUploadResponse, path)

        result = self._call("create", attempt)
        self.upload_id = result.payload.upload_id
        logger.info("Created upload session %s for %s", self.upload_id, self.resource_key)
        return self.upload_id

    def probe(
        self,
        identifier: ContentIdentifier,
        *,
        cancel_event: threading.Event | None = None,
    ) -> bool:
        """Ask whether a chunk with this identifier is already stored.

        Args:
            identifier: Content identifier of the chunk.
            cancel_event: Stops retrying when set.

        Returns:
            True if the service already has the chunk.
        """
        upload_id = self._require_upload_id("probe")
        path = self._path("chunk", "probe")
        body = ProbeRequest(chunks=_chunk_refs([identifier])).to_dict()

        def attempt() -> TransportResult:
            result = self.client.request(
                "POST",
                path,
                expected=(200,),
                params={"uploadId": upload_id},
                json=body,
                headers=JSON_HEADERS,
                decode_json=True,
            )
            return self._parse(result, ProbeResponse, path)

        result = self._call("probe", attempt, cancel_event)
        return result.payload.exists(identifier.probe_key)

    def upload(
        self,
        identifier: ContentIdentifier,
        data: bytes,
        part_number: int,
        *,
        file_name: str,
        cancel_event: threading.Event | None = None,
    ) -> None:
        """Send one chunk as a multipart body.

        Args:
            identifier: Content identifier of ``data``.
            data: Chunk bytes.
            part_number: 1-based part number.
            file_name: Base name of the source file.
            cancel_event: Stops retrying when set.
        """
        if part_number < 1:
            raise ValidationError(
                "Part numbers start at 1", field="part_number", value=part_number
            )
        upload_id = self._require_upload_id("upload")
        path = self._path("chunk", identifier.value)
        params = {"uploadId": upload_id, "partNumber": part_number}

        def attempt() -> TransportResult:
            return self.client.request(
                "POST",
                path,
                expected=(200, 201),
                params=params,
                files={CHUNK_FORM_FIELD: (file_name, data, "application/octet-stream")},
            )

        self._call(f"upload part {part_number}", attempt, cancel_event)

    def finalize(
        self,
        identifiers: Sequence[ContentIdentifier],
        file_name: str,
        mime_type: str,
    ) -> None:
        """Commit the session with the ordered chunk manifest.

        Args:
            identifiers: Identifiers ordered by chunk index.
            file_name: Name the file is stored under.
            mime_type: MIME type, or "" to let the service decide.
        """
        upload_id = self._require_upload_id("finalize")
        path = self._path("file", "chunked")
        body = FinalizeRequest(
            chunks=_chunk_refs(identifiers),
            name=file_name,
            mime_type=mime_type,
        ).to_dict()

        def attempt() -> TransportResult:
            return self.client.request(
                "POST",
                path,
                expected=(200, 201),
                params={"uploadId": upload_id},
                json=body,
                headers=JSON_HEADERS,
            )

        self._call("finalize", attempt)
        logger.info(
            "Finalized upload %s: %s (%d chunks)", upload_id, file_name, len(identifiers)
        )
