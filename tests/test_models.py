"""Tests for wire and progress models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from chunkup.models.progress import OperationPhase, UploadProgress, UploadSummary
from chunkup.models.upload import (
    ChunkRef,
    CreateUploadResponse,
    FinalizeRequest,
    ProbeRequest,
    ProbeResponse,
)


class TestWireModels:
    """Tests for request and response payloads."""

    def test_chunk_size_serialized_as_string(self) -> None:
        body = ProbeRequest(chunks=[ChunkRef(hash="ab", size=12)]).to_dict()
        assert body == {"chunks": [{"hash": "ab", "size": "12"}]}

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ChunkRef(hash="ab", size=-1)

    def test_finalize_uses_camel_case(self) -> None:
        body = FinalizeRequest(chunks=[], name="a.txt", mime_type="text/plain").to_dict()
        assert body == {"chunks": [], "name": "a.txt", "mimeType": "text/plain"}

    def test_create_response_requires_upload_id(self) -> None:
        assert CreateUploadResponse.model_validate({"uploadId": "u1"}).upload_id == "u1"
        with pytest.raises(ValidationError):
            CreateUploadResponse.model_validate({})
        with pytest.raises(ValidationError):
            CreateUploadResponse.model_validate({"uploadId": ""})

    def test_probe_response_lookup(self) -> None:
        resp = ProbeResponse.model_validate(
            {"data": {"results": {"sha256-ab": {"exists": True}, "sha256-cd": {}}}}
        )
        assert resp.exists("sha256-ab") is True
        assert resp.exists("sha256-cd") is False
        assert resp.exists("sha256-ef") is False
        assert ProbeResponse.model_validate({}).exists("sha256-ab") is False


class TestProgressModels:
    """Tests for progress and summary models."""

    def test_progress_percent(self) -> None:
        assert UploadProgress(phase=OperationPhase.UPLOADING, current=1, total=4).percent == 25.0
        assert UploadProgress(phase=OperationPhase.PREPARING).percent == 0.0

    def test_summary_to_dict(self) -> None:
        summary = UploadSummary(
            success=True,
            file_name="a.bin",
            resource_key="PROJ-1",
            upload_id="u1",
            total_bytes=12 * 1024 * 1024,
            chunk_size=5 * 1024 * 1024,
            chunks_total=3,
            chunks_uploaded=2,
            chunks_skipped=1,
            duration=2.0,
        )
        data = summary.to_dict()
        assert data["size_mb"] == 12.0
        assert data["chunks"] == 3
        assert data["deduplicated"] == 1
        assert summary.throughput_mbps == 6.0
