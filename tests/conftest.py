"""Pytest configuration and fixtures for chunkup tests."""

from __future__ import annotations

import hashlib
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock

import httpx
import pytest

from chunkup.core.client import TransportClient
from chunkup.core.retry import RetryPolicy

BASE_URL = "https://transfer.example.com"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CHUNKUP_* variables from the host out of every test."""
    for name in (
        "CHUNKUP_URL",
        "CHUNKUP_USER",
        "CHUNKUP_TOKEN",
        "CHUNKUP_PROFILE",
        "CHUNKUP_VERIFY_SSL",
        "CHUNKUP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test

profiles:
  test:
    url: https://transfer-test.example.com
    username: alice
    token: s3cret
    verify_ssl: false
    timeout: 30
    workers: 4

  production:
    url: https://transfer.example.com
    verify_ssl: true
    timeout: 60
"""


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Retry policy with no delay and no jitter."""
    return RetryPolicy(
        initial_interval=0.0,
        randomization_factor=0.0,
        max_elapsed_time=None,
        max_attempts=3,
    )


# =============================================================================
# Fake Transfer Service
# =============================================================================


class FakeTransferService:
    """In-memory stand-in for the chunked upload API.

    Installed as the side effect of ``httpx.Client.request`` so requests
    still go through TransportClient classification. Chunks stored by one
    run stay stored for the next.
    """

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.upload_id = "upload-1"
        self.stored: dict[str, bytes] = {}
        self.parts: dict[str, int] = {}
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.finalized: list[dict[str, Any]] = []
        self.create_failures = 0
        # Optional override: (method, path, kwargs) -> status code or None
        self.status_hook: Callable[[str, str, dict[str, Any]], int | None] | None = None

    def __call__(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        request = httpx.Request(method, f"{BASE_URL}{path}")
        with self.lock:
            self.calls.append((method, path, kwargs))

        if self.status_hook is not None:
            status = self.status_hook(method, path, kwargs)
            if status is not None:
                return httpx.Response(status, request=request, json={})

        if path.endswith("/create"):
            with self.lock:
                if self.create_failures > 0:
                    self.create_failures -= 1
                    return httpx.Response(503, request=request, text="busy")
            return httpx.Response(201, request=request, json={"uploadId": self.upload_id})

        if path.endswith("/chunk/probe"):
            chunk = kwargs["json"]["chunks"][0]
            key = f"sha256-{chunk['hash']}"
            with self.lock:
                exists = f"{chunk['hash']}-{chunk['size']}" in self.stored
            return httpx.Response(
                200, request=request, json={"data": {"results": {key: {"exists": exists}}}}
            )

        if "/chunk/" in path:
            identifier = path.rsplit("/", 1)[1]
            _name, data, _content_type = kwargs["files"]["chunk"]
            digest = hashlib.sha256(data).hexdigest()
            if identifier != f"{digest}-{len(data)}":
                return httpx.Response(400, request=request, text="identifier mismatch")
            with self.lock:
                self.stored[identifier] = data
                self.parts[identifier] = kwargs["params"]["partNumber"]
            return httpx.Response(201, request=request)

        if path.endswith("/file/chunked"):
            with self.lock:
                self.finalized.append(kwargs["json"])
            return httpx.Response(201, request=request, json={"id": "file-1"})

        return httpx.Response(404, request=request)

    def calls_to(self, suffix: str) -> list[tuple[str, str, dict[str, Any]]]:
        with self.lock:
            return [c for c in self.calls if c[1].endswith(suffix)]

    def upload_calls(self) -> list[tuple[str, str, dict[str, Any]]]:
        with self.lock:
            return [c for c in self.calls if c[2].get("files")]


@pytest.fixture
def fake_service() -> FakeTransferService:
    return FakeTransferService()


@pytest.fixture
def transport(fake_service: FakeTransferService) -> Generator[TransportClient, None, None]:
    """TransportClient whose HTTP layer is the fake service."""
    client = TransportClient(base_url=BASE_URL, username="alice", token="s3cret")
    http = MagicMock()
    http.request.side_effect = fake_service
    client._client = http
    yield client
