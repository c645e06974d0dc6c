"""Unit tests for the incremental console reader.

Uses an in-memory fake storage so tests can count state lookups and check
that the per-poll connection is always closed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from jobconsole.core.reader import (
    ReadResult,
    StreamEnd,
    describe_end,
    is_terminal,
    read_lines,
)
from jobconsole.config import config
from jobconsole.core.timestamps import serialize_datetime
from jobconsole.models.console import ConsoleDecodeError, ConsoleId, ConsoleLine
from jobconsole.models.state import STARTED_AT_KEY, StateData

T0 = datetime(2026, 2, 27, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fake storage
# ---------------------------------------------------------------------------


class FakeConnection:
    def __init__(self, storage: FakeStorage) -> None:
        self._storage = storage
        self.closed = False

    def __enter__(self) -> FakeConnection:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def count(self, key: str) -> int:
        if self._storage.fail_on_count:
            raise ConnectionError("storage down")
        return len(self._storage.records.get(key, []))

    def range_read(self, key: str, start: int, end: int) -> list[str]:
        records = self._storage.records.get(key, [])[start:end]
        if self._storage.read_limit is not None:
            records = records[: self._storage.read_limit]
        return records

    def get_state(self, job_id: str) -> StateData | None:
        self._storage.state_lookups += 1
        return self._storage.states.get(job_id)


class FakeStorage:
    def __init__(self) -> None:
        self.records: dict[str, list[str]] = {}
        self.states: dict[str, StateData] = {}
        self.connections: list[FakeConnection] = []
        self.state_lookups = 0
        self.fail_on_count = False
        self.read_limit: int | None = None

    def connect(self) -> FakeConnection:
        conn = FakeConnection(self)
        self.connections.append(conn)
        return conn

    def add_lines(self, cid: ConsoleId, n: int) -> None:
        records = self.records.setdefault(cid.key, [])
        for i in range(n):
            records.append(ConsoleLine(time_offset=i, message=f"m{i}").encode())

    def set_processing(self, job_id: str, started_at: datetime) -> None:
        self.states[job_id] = StateData(
            name="Processing",
            data={STARTED_AT_KEY: serialize_datetime(started_at)},
        )


@pytest.fixture
def fake() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def cid() -> ConsoleId:
    return ConsoleId(job_id="j1", timestamp=T0)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestTerminalCursor:
    @pytest.mark.parametrize("start", [StreamEnd.STATE_CHANGED, StreamEnd.JOB_NOT_FOUND, -7])
    def test_negative_start_is_noop(self, fake: FakeStorage, cid: ConsoleId, start: int):
        fake.add_lines(cid, 3)
        result = read_lines(fake, cid, start)
        assert result == ReadResult((), start)
        assert fake.connections == []

    def test_is_terminal(self):
        assert is_terminal(-1)
        assert is_terminal(-2)
        assert not is_terminal(0)
        assert not is_terminal(5)

    def test_describe_end(self):
        assert "not found" in describe_end(StreamEnd.JOB_NOT_FOUND).lower()
        assert describe_end(StreamEnd.STATE_CHANGED)
        with pytest.raises(ValueError):
            describe_end(3)


class TestReadLines:
    def test_result_unpacks_as_pair(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 2)
        fake.set_processing("j1", T0)
        lines, next_start = read_lines(fake, cid, 0)
        assert [line.message for line in lines] == ["m0", "m1"]
        assert next_start == 2

    def test_reads_only_unseen_lines(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 5)
        fake.set_processing("j1", T0)
        result = read_lines(fake, cid, 3)
        assert [line.message for line in result.lines] == ["m3", "m4"]
        assert result.next_start == 5
        assert not result.is_terminal

    def test_state_not_checked_when_new_lines_after_first_poll(
        self, fake: FakeStorage, cid: ConsoleId
    ):
        fake.add_lines(cid, 5)
        read_lines(fake, cid, 2)
        assert fake.state_lookups == 0

    def test_new_lines_returned_even_if_job_finished(self, fake: FakeStorage, cid: ConsoleId):
        # Termination is only noticed once the stream goes quiet.
        fake.add_lines(cid, 4)
        fake.states["j1"] = StateData(name="Succeeded")
        first = read_lines(fake, cid, 2)
        assert first.next_start == 4
        second = read_lines(fake, cid, first.next_start)
        assert second == ReadResult((), StreamEnd.STATE_CHANGED)

    def test_first_poll_always_checks_state(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 5)
        fake.states["j1"] = StateData(name="Succeeded")
        result = read_lines(fake, cid, 0)
        assert len(result.lines) == 5
        assert result.next_start == StreamEnd.STATE_CHANGED
        assert fake.state_lookups == 1

    def test_quiet_stream_keeps_count(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 3)
        fake.set_processing("j1", T0)
        assert read_lines(fake, cid, 3) == ReadResult((), 3)

    def test_empty_console_first_poll_processing(self, fake: FakeStorage, cid: ConsoleId):
        fake.set_processing("j1", T0)
        assert read_lines(fake, cid, 0) == ReadResult((), 0)

    def test_missing_job(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 2)
        assert read_lines(fake, cid, 2).next_start == StreamEnd.JOB_NOT_FOUND

    def test_other_run_of_same_job(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 2)
        fake.set_processing("j1", T0 + timedelta(minutes=5))
        assert read_lines(fake, cid, 2).next_start == StreamEnd.STATE_CHANGED

    def test_processing_without_started_at(self, fake: FakeStorage, cid: ConsoleId):
        fake.states["j1"] = StateData(name="Processing")
        assert read_lines(fake, cid, 0).next_start == StreamEnd.STATE_CHANGED

    def test_state_name_case_insensitive(self, fake: FakeStorage, cid: ConsoleId):
        fake.states["j1"] = StateData(
            name="PROCESSING", data={STARTED_AT_KEY: serialize_datetime(T0)}
        )
        assert read_lines(fake, cid, 0).next_start == 0

    def test_custom_processing_state(self, fake: FakeStorage, cid: ConsoleId):
        fake.states["j1"] = StateData(
            name="Running", data={STARTED_AT_KEY: serialize_datetime(T0)}
        )
        assert read_lines(fake, cid, 0).next_start == StreamEnd.STATE_CHANGED
        assert read_lines(fake, cid, 0, processing_state="running").next_start == 0

    def test_cursor_only_advances_past_lines_read(self, fake: FakeStorage, cid: ConsoleId):
        fake.add_lines(cid, 5)
        fake.set_processing("j1", T0)
        fake.read_limit = 2
        first = read_lines(fake, cid, 1)
        assert [line.message for line in first.lines] == ["m1", "m2"]
        assert first.next_start == 3
        fake.read_limit = None
        second = read_lines(fake, cid, first.next_start)
        assert [line.message for line in second.lines] == ["m3", "m4"]

    def test_processing_state_defaults_to_config(self, fake: FakeStorage, cid: ConsoleId, monkeypatch):
        fake.states["j1"] = StateData(
            name="Running", data={STARTED_AT_KEY: serialize_datetime(T0)}
        )
        monkeypatch.setattr(config, "processing_state_name", "Running")
        assert read_lines(fake, cid, 0).next_start == 0

    def test_next_start_is_plain_int(self, fake: FakeStorage, cid: ConsoleId):
        result = read_lines(fake, cid, 0)
        assert result.next_start == -2
        assert type(result.next_start) is int


class TestErrors:
    def test_missing_storage(self, cid: ConsoleId):
        with pytest.raises(ValueError):
            read_lines(None, cid, 0)  # type: ignore[arg-type]

    def test_missing_console_id(self, fake: FakeStorage):
        with pytest.raises(ValueError):
            read_lines(fake, None, 0)  # type: ignore[arg-type]
        assert fake.connections == []

    def test_decode_failure_aborts_poll(self, fake: FakeStorage, cid: ConsoleId):
        fake.set_processing("j1", T0)
        fake.add_lines(cid, 1)
        fake.records[cid.key].append("{broken")
        with pytest.raises(ConsoleDecodeError):
            read_lines(fake, cid, 0)

    def test_connection_closed_on_success(self, fake: FakeStorage, cid: ConsoleId):
        fake.set_processing("j1", T0)
        fake.add_lines(cid, 2)
        read_lines(fake, cid, 0)
        assert len(fake.connections) == 1
        assert fake.connections[0].closed

    def test_connection_closed_on_decode_failure(self, fake: FakeStorage, cid: ConsoleId):
        fake.records[cid.key] = ["nope"]
        with pytest.raises(ConsoleDecodeError):
            read_lines(fake, cid, 0)
        assert fake.connections[0].closed

    def test_storage_error_propagates(self, fake: FakeStorage, cid: ConsoleId):
        fake.fail_on_count = True
        with pytest.raises(ConnectionError):
            read_lines(fake, cid, 0)
        assert fake.connections[0].closed
