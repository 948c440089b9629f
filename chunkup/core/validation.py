"""Input validation helpers for chunkup."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import urlparse

from chunkup.core.exceptions import InvalidURLError, SourceFileError, ValidationError

# Resource keys look like issue keys (ABC-123) but the service accepts any
# path-safe token.
RESOURCE_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

MAX_WORKERS = 64
MAX_TIMEOUT = 86400


def validate_server_url(url: str) -> str:
    """Validate and normalize a server base URL.

    Args:
        url: URL to validate.

    Returns:
        URL with surrounding whitespace and trailing slashes removed.

    Raises:
        InvalidURLError: If the URL has no http(s) scheme or host.
    """
    if not url or not url.strip():
        raise InvalidURLError(url or "", "URL is empty")

    url = url.strip().rstrip("/")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")
    return url


def validate_resource_key(key: str) -> str:
    """Validate the target resource key (e.g. an issue key)."""
    if not key or not RESOURCE_KEY_PATTERN.match(key):
        raise ValidationError(f"Invalid resource key: {key!r}", field="resource_key", value=key)
    return key


def validate_workers(workers: int) -> int:
    """Validate an in-flight worker count."""
    if workers < 1 or workers > MAX_WORKERS:
        raise ValidationError(
            f"Workers must be between 1 and {MAX_WORKERS}",
            field="workers",
            value=workers,
        )
    return workers


def validate_timeout(timeout: int | float) -> int | float:
    """Validate a per-request timeout in seconds."""
    if timeout <= 0 or timeout > MAX_TIMEOUT:
        raise ValidationError(
            f"Timeout must be between 1 and {MAX_TIMEOUT} seconds",
            field="timeout",
            value=timeout,
        )
    return timeout


def validate_source_file(path: Path) -> int:
    """Check that a path is a readable regular file.

    Args:
        path: Source file path.

    Returns:
        File size in bytes.

    Raises:
        SourceFileError: If the file is missing, not a regular file, or
            cannot be stat'ed.
    """
    try:
        stat = path.stat()
    except OSError as e:
        raise SourceFileError(str(path), e.strerror or str(e)) from e

    if not path.is_file():
        raise SourceFileError(str(path), "not a regular file")
    return stat.st_size
