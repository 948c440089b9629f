"""HTTP transport for the chunked upload API.

Every call carries basic credentials and a fixed timeout. Responses are
classified into success, fatal authentication failure, or transient failure;
retry decisions are made by callers from that classification alone.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from chunkup.core.exceptions import (
    AuthenticationError,
    ChunkupError,
    ConfigurationError,
    TransientRemoteError,
)
from chunkup.core.validation import validate_server_url, validate_timeout

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

DEFAULT_BASE_URL = "https://transfer.atlassian.com"
DEFAULT_TIMEOUT = 30
AUTH_FAILURE_STATUS_CODES = {401, 403}


# =============================================================================
# Classification
# =============================================================================


class Outcome(Enum):
    """Classification of a single transport call."""

    SUCCESS = "success"
    FATAL_AUTH = "fatal_auth"
    TRANSIENT = "transient"


@dataclass
class TransportResult:
    """Classified result of one request attempt."""

    outcome: Outcome
    status_code: int | None = None
    payload: Any = None
    error: ChunkupError | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


# =============================================================================
# TransportClient
# =============================================================================


@dataclass
class TransportClient:
    """Authenticated request/response primitive for the upload API."""

    base_url: str
    username: str | None
    token: str | None = field(repr=False)
    timeout: int = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate credentials and normalize URL before any network activity."""
        if not self.username or not self.token:
            raise ConfigurationError(
                "Missing user or token for the upload API",
                field="username" if not self.username else "token",
            )
        self.base_url = validate_server_url(self.base_url)
        validate_timeout(self.timeout)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create the shared HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> TransportClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Requests
    # =========================================================================

    def _get_auth(self) -> tuple[str, str]:
        """Basic auth tuple sent with every request."""
        return (str(self.username), str(self.token))

    def request(
        self,
        method: str,
        path: str,
        *,
        expected: Collection[int] = (200,),
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        files: Any | None = None,
        headers: dict[str, str] | None = None,
        decode_json: bool = False,
    ) -> TransportResult:
        """Execute one request attempt and classify the result.

        Args:
            method: HTTP method.
            path: API path relative to the base URL.
            expected: Status codes that count as success.
            params: Query parameters.
            json: JSON body.
            files: Multipart files.
            headers: Additional headers.
            decode_json: Whether a successful body must decode as JSON.

        Returns:
            TransportResult with the outcome and, on success, the decoded
            payload (or the raw response when ``decode_json`` is False).
        """
        client = self._get_client()
        url = f"{self.base_url}{path}"

        try:
            resp = client.request(
                method,
                path,
                params=params,
                json=json,
                files=files,
                headers=headers,
                auth=self._get_auth(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            return TransportResult(
                Outcome.TRANSIENT,
                error=TransientRemoteError(url, f"Timeout after {self.timeout}s: {e}"),
            )
        except httpx.TransportError as e:
            return TransportResult(
                Outcome.TRANSIENT,
                error=TransientRemoteError(url, f"{type(e).__name__}: {e}"),
            )

        logger.debug("%s %s -> HTTP %d", method, path, resp.status_code)
        return self.classify(resp, url=url, expected=expected, decode_json=decode_json)

    @staticmethod
    def classify(
        resp: httpx.Response,
        *,
        url: str,
        expected: Collection[int],
        decode_json: bool = False,
    ) -> TransportResult:
        """Classify an HTTP response into success, fatal-auth, or transient."""
        status = resp.status_code

        if status in AUTH_FAILURE_STATUS_CODES:
            return TransportResult(
                Outcome.FATAL_AUTH,
                status_code=status,
                error=AuthenticationError(url, f"HTTP {status}"),
            )

        if status not in expected:
            return TransportResult(
                Outcome.TRANSIENT,
                status_code=status,
                error=TransientRemoteError(url, f"HTTP {status}: {resp.text[:200]}", status),
            )

        if not decode_json:
            return TransportResult(Outcome.SUCCESS, status_code=status, payload=resp)

        try:
            payload = resp.json()
        except ValueError as e:
            return TransportResult(
                Outcome.TRANSIENT,
                status_code=status,
                error=TransientRemoteError(url, f"Malformed response body: {e}", status),
            )
        return TransportResult(Outcome.SUCCESS, status_code=status, payload=payload)
