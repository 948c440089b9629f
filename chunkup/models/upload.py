"""Request and response payloads of the chunked upload API."""

from __future__ import annotations

from pydantic import Field, field_serializer

from .base import BaseModel


class ChunkRef(BaseModel):
    """A chunk as the API names it: digest plus byte size."""

    hash: str = Field(..., description="Lowercase hex SHA-256 of the chunk")
    size: int = Field(..., ge=0, description="Chunk length in bytes")

    @field_serializer("size")
    def _size_as_decimal_string(self, size: int) -> str:
        # The service expects sizes as decimal strings.
        return str(size)


class CreateUploadResponse(BaseModel):
    """Body of a 201 reply to the create call."""

    upload_id: str = Field(..., alias="uploadId", min_length=1)


class ProbeRequest(BaseModel):
    """Body of the probe call."""

    chunks: list[ChunkRef]


class ProbeResult(BaseModel):
    exists: bool = False


class ProbeData(BaseModel):
    results: dict[str, ProbeResult] = Field(default_factory=dict)


class ProbeResponse(BaseModel):
    """Body of a 200 reply to the probe call."""

    data: ProbeData = Field(default_factory=ProbeData)

    def exists(self, key: str) -> bool:
        """Whether the chunk under ``key`` ("sha256-<hash>") is stored."""
        result = self.data.results.get(key)
        return bool(result and result.exists)


class FinalizeRequest(BaseModel):
    """Body of the finalize call: ordered manifest plus file metadata."""

    chunks: list[ChunkRef]
    name: str
    mime_type: str = Field("", alias="mimeType")
