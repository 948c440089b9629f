"""Tests for ChunkDispatcher."""

from __future__ import annotations

import io
import threading
import time

import pytest

from chunkup.core.exceptions import (
    AuthenticationError,
    SourceFileError,
    UploadCancelledError,
)
from chunkup.uploaders.addressing import ContentIdentifier, compute_identifier
from chunkup.uploaders.aggregator import ResultAggregator
from chunkup.uploaders.dispatcher import ChunkDispatcher


class FakeSession:
    """Records probe and upload calls without any HTTP."""

    def __init__(self, stored: set[str] | None = None, delay=None, fail_on=None) -> None:
        self.stored = stored or set()
        self.delay = delay
        self.fail_on = fail_on
        self.lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0
        self.probed: list[ContentIdentifier] = []
        self.uploads: list[tuple[int, bytes, str]] = []

    def probe(self, identifier, *, cancel_event=None) -> bool:
        if cancel_event is not None and cancel_event.is_set():
            raise UploadCancelledError("probe")
        with self.lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            self.probed.append(identifier)
        try:
            if self.delay:
                time.sleep(self.delay(identifier))
            if self.fail_on and self.fail_on(identifier):
                raise AuthenticationError(reason="HTTP 401")
            return identifier.value in self.stored
        finally:
            with self.lock:
                self.in_flight -= 1

    def upload(self, identifier, data, part_number, *, file_name, cancel_event=None) -> None:
        with self.lock:
            self.uploads.append((part_number, data, file_name))


def _dispatch(session: FakeSession, data: bytes, chunk_size: int, **kwargs):
    aggregator = ResultAggregator()
    dispatcher = ChunkDispatcher(session, chunk_size, file_name="data.bin", **kwargs)
    count = dispatcher.dispatch(io.BytesIO(data), aggregator)
    return count, aggregator


class TestDispatch:
    """Tests for enumeration and ordering."""

    def test_short_tail(self) -> None:
        session = FakeSession()
        count, agg = _dispatch(session, b"abcdefghij", 4)

        manifest = agg.collect(count)

        assert count == 3
        assert [i.size for i in manifest] == [4, 4, 2]
        assert manifest == [
            compute_identifier(b"abcd"),
            compute_identifier(b"efgh"),
            compute_identifier(b"ij"),
        ]
        assert sorted((p, d) for p, d, _ in session.uploads) == [
            (1, b"abcd"),
            (2, b"efgh"),
            (3, b"ij"),
        ]
        assert all(name == "data.bin" for _, _, name in session.uploads)

    def test_exact_multiple(self) -> None:
        count, agg = _dispatch(FakeSession(), b"abcdefgh", 4)

        assert count == 2
        assert [i.size for i in agg.collect(count)] == [4, 4]

    def test_empty_stream_is_one_empty_chunk(self) -> None:
        session = FakeSession()
        count, agg = _dispatch(session, b"", 4)

        assert count == 1
        assert agg.collect(count) == [compute_identifier(b"")]
        assert session.uploads == [(1, b"", "data.bin")]

    def test_stored_chunks_are_not_uploaded(self) -> None:
        session = FakeSession(stored={compute_identifier(b"efgh").value})
        count, agg = _dispatch(session, b"abcdefghij", 4)

        agg.collect(count)

        assert sorted(p for p, _, _ in session.uploads) == [1, 3]
        assert agg.uploaded_count == 2
        assert agg.skipped_count == 1

    def test_reverse_completion_keeps_file_order(self) -> None:
        data = bytes(range(200))
        chunks = [data[i : i + 10] for i in range(0, 200, 10)]
        order = {compute_identifier(c).value: n for n, c in enumerate(chunks)}
        session = FakeSession(delay=lambda ident: (20 - order[ident.value]) * 0.005)

        count, agg = _dispatch(session, data, 10, max_in_flight=8)

        assert agg.collect(count) == [compute_identifier(c) for c in chunks]

    def test_in_flight_cap(self) -> None:
        session = FakeSession(delay=lambda ident: 0.01)

        count, agg = _dispatch(session, bytes(range(100)) * 3, 10, max_in_flight=3)

        assert len(agg.collect(count)) == 30
        assert session.max_in_flight <= 3


class TestFailFast:
    """Tests for short-circuit on failure."""

    def test_fatal_error_stops_reader(self) -> None:
        data = bytes(range(100))
        third = compute_identifier(data[20:30])
        session = FakeSession(fail_on=lambda ident: ident == third)

        count, agg = _dispatch(session, data, 10, max_in_flight=1)

        assert count == 3
        with pytest.raises(AuthenticationError) as exc_info:
            agg.collect(count)
        assert exc_info.value.details["chunk"] == 2
        assert exc_info.value.details["operation"] == "probe"
        assert len(session.probed) == 3

    def test_read_error(self) -> None:
        class BrokenStream(io.BytesIO):
            def __init__(self) -> None:
                super().__init__(b"x" * 8)
                self.reads = 0

            def read(self, size=-1):
                self.reads += 1
                if self.reads > 1:
                    raise OSError("disk gone")
                return super().read(size)

        aggregator = ResultAggregator()
        dispatcher = ChunkDispatcher(FakeSession(), 4, file_name="data.bin")

        with pytest.raises(SourceFileError):
            dispatcher.dispatch(BrokenStream(), aggregator)
        assert aggregator.failed

    def test_invalid_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            ChunkDispatcher(FakeSession(), 0, file_name="data.bin")

    def test_completion_callback_error_is_latched(self) -> None:
        def on_chunk_done(result) -> None:
            if result.index == 1:
                raise RuntimeError("display closed")

        count, agg = _dispatch(FakeSession(), b"abcdefghij", 4, on_chunk_done=on_chunk_done)

        assert agg.failed
        with pytest.raises(RuntimeError, match="display closed"):
            agg.collect(count)

    def test_worker_error_outside_chunk_handling_is_raised(self) -> None:
        class BrokenAggregator(ResultAggregator):
            def submit(self, result) -> None:
                if result.index == 1:
                    raise RuntimeError("sink broken")
                super().submit(result)

        dispatcher = ChunkDispatcher(FakeSession(), 4, file_name="data.bin")

        with pytest.raises(RuntimeError, match="sink broken"):
            dispatcher.dispatch(io.BytesIO(b"abcdefghij"), BrokenAggregator())

    def test_interrupt_sets_abort(self) -> None:
        class InterruptedStream(io.BytesIO):
            def __init__(self) -> None:
                super().__init__(b"x" * 8)
                self.reads = 0

            def read(self, size=-1):
                self.reads += 1
                if self.reads > 1:
                    raise KeyboardInterrupt
                return super().read(size)

        aggregator = ResultAggregator()
        dispatcher = ChunkDispatcher(FakeSession(), 4, file_name="data.bin")

        with pytest.raises(KeyboardInterrupt):
            dispatcher.dispatch(InterruptedStream(), aggregator)
        assert aggregator.abort_event.is_set()
