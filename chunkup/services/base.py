"""Base service with common helpers for upload API services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chunkup.core.client import TransportClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "TransportClient") -> None:
        """Initialize service with a transport client.

        Args:
            client: Authenticated TransportClient instance
        """
        self.client = client

    def _build_path(self, *parts: str) -> str:
        """Build API path from parts.

        Args:
            *parts: Path segments

        Returns:
            Joined path string
        """
        return "/" + "/".join(p.strip("/") for p in parts if p)
