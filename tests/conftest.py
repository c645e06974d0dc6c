"""Shared test fixtures for jobconsole."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from jobconsole.models.console import ConsoleId, ConsoleLine
from jobconsole.storage.sqlite import SqliteConsoleStorage


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def storage(tmp_dir: Path) -> SqliteConsoleStorage:
    """Provide a fresh SqliteConsoleStorage backed by a temp database."""
    return SqliteConsoleStorage(tmp_dir / "console.db")


@pytest.fixture
def started_at() -> datetime:
    """Deterministic run start timestamp."""
    return datetime(2026, 2, 27, 12, 0, 0, 250000, tzinfo=timezone.utc)


@pytest.fixture
def job_id() -> str:
    return "job-42"


@pytest.fixture
def console_id(storage: SqliteConsoleStorage, job_id: str, started_at: datetime) -> ConsoleId:
    """A console whose job is currently processing the matching run."""
    return storage.start_processing(job_id, started_at)


# ---------------------------------------------------------------------------
# Line factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_line() -> Callable[..., ConsoleLine]:
    """Factory fixture: build a ConsoleLine with sensible defaults."""

    def _factory(
        message: str = "hello",
        time_offset: float = 0.5,
        **overrides: Any,
    ) -> ConsoleLine:
        return ConsoleLine(time_offset=time_offset, message=message, **overrides)

    return _factory


@pytest.fixture
def write_lines(
    storage: SqliteConsoleStorage,
    make_line: Callable[..., ConsoleLine],
) -> Callable[..., list[ConsoleLine]]:
    """Append *n* numbered lines to a console and return them."""

    def _write(cid: ConsoleId, n: int, prefix: str = "line") -> list[ConsoleLine]:
        written = []
        for i in range(n):
            line = make_line(message=f"{prefix} {i}", time_offset=float(i))
            storage.append_line(cid, line)
            written.append(line)
        return written

    return _write
