"""SQLite-backed console storage.

Two tables: an append-only ``console_lines`` collection keyed by console id,
and ``job_states`` holding the current state of each job.  The read side is
``SqliteConnection`` (one per poll).  The write helpers on
``SqliteConsoleStorage`` exist for producers, tooling and tests; the reader
never calls them.

Design:
- Append-only lines: ordered by the AUTOINCREMENT rowid within a key.
- WAL journal mode so dashboard readers never block a writing job.
- Every connection is closed explicitly, including on error paths.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType
from typing import Iterator

from pydantic import BaseModel, ConfigDict

from jobconsole.core.timestamps import serialize_datetime
from jobconsole.models.console import ConsoleId, ConsoleLine
from jobconsole.models.state import PROCESSING_STATE_NAME, STARTED_AT_KEY, StateData

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_LINES = """
CREATE TABLE IF NOT EXISTS console_lines (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    console_key  TEXT NOT NULL,
    payload      TEXT NOT NULL
);
"""

_CREATE_IDX_LINES = """
CREATE INDEX IF NOT EXISTS idx_console_key ON console_lines(console_key, id);
"""

_CREATE_STATES = """
CREATE TABLE IF NOT EXISTS job_states (
    job_id         TEXT PRIMARY KEY,
    state_name     TEXT NOT NULL,
    data_json      TEXT NOT NULL DEFAULT '{}',
    updated_at_utc TEXT NOT NULL
);
"""


class ConsoleSummary(BaseModel):
    """A stored console and how many lines it holds."""

    model_config = ConfigDict(frozen=True)

    console_id: ConsoleId
    line_count: int


class SqliteConnection:
    """Read-only connection used for a single poll.

    Use as a context manager; the underlying ``sqlite3`` connection is
    closed on exit whether or not the block raised.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def __enter__(self) -> SqliteConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._conn.close()

    def count(self, key: str) -> int:
        row = self._conn.execute(
            "SELECT COUNT(*) FROM console_lines WHERE console_key = ?",
            (key,),
        ).fetchone()
        return int(row[0])

    def range_read(self, key: str, start: int, end: int) -> list[str]:
        if end <= start:
            return []
        rows = self._conn.execute(
            "SELECT payload FROM console_lines WHERE console_key = ? "
            "ORDER BY id ASC LIMIT ? OFFSET ?",
            (key, end - start, start),
        ).fetchall()
        return [row[0] for row in rows]

    def get_state(self, job_id: str) -> StateData | None:
        row = self._conn.execute(
            "SELECT state_name, data_json FROM job_states WHERE job_id = ?",
            (job_id,),
        ).fetchone()
        if row is None:
            return None
        return StateData(name=row[0], data=json.loads(row[1]))


class SqliteConsoleStorage:
    """Console line store and job state store in one SQLite database.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        try:
            conn.execute("PRAGMA journal_mode=WAL")
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def _init_schema(self) -> None:
        with closing(self._open()) as conn:
            conn.execute(_CREATE_LINES)
            conn.execute(_CREATE_IDX_LINES)
            conn.execute(_CREATE_STATES)
            conn.commit()

    def connect(self) -> SqliteConnection:
        """Open a read connection for one poll."""
        return SqliteConnection(self._open())

    # ------------------------------------------------------------------
    # Producer-side helpers
    # ------------------------------------------------------------------

    def append_line(self, console_id: ConsoleId, line: ConsoleLine) -> None:
        """Append a line to the end of a console."""
        self.append_record(console_id.key, line.encode())

    def append_record(self, key: str, payload: str) -> None:
        """Append a raw serialized record under *key*."""
        with closing(self._open()) as conn:
            conn.execute(
                "INSERT INTO console_lines (console_key, payload) VALUES (?, ?)",
                (key, payload),
            )
            conn.commit()

    def set_state(self, job_id: str, name: str, data: dict[str, str] | None = None) -> None:
        """Replace the current state of *job_id*."""
        with closing(self._open()) as conn:
            conn.execute(
                """
                INSERT INTO job_states (job_id, state_name, data_json, updated_at_utc)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(job_id) DO UPDATE SET
                    state_name = excluded.state_name,
                    data_json = excluded.data_json,
                    updated_at_utc = excluded.updated_at_utc
                """,
                (
                    job_id,
                    name,
                    json.dumps(data or {}),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            conn.commit()
        logger.debug("Job %s moved to state %s.", job_id, name)

    def start_processing(
        self,
        job_id: str,
        started_at: datetime | None = None,
        state_name: str = PROCESSING_STATE_NAME,
    ) -> ConsoleId:
        """Put *job_id* into the processing state and return its console id."""
        console_id = ConsoleId(
            job_id=job_id,
            timestamp=started_at or datetime.now(timezone.utc),
        )
        self.set_state(
            job_id,
            state_name,
            {STARTED_AT_KEY: serialize_datetime(console_id.timestamp)},
        )
        return console_id

    def delete_state(self, job_id: str) -> None:
        with closing(self._open()) as conn:
            conn.execute("DELETE FROM job_states WHERE job_id = ?", (job_id,))
            conn.commit()

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_consoles(self, job_id: str | None = None) -> list[ConsoleSummary]:
        """Return stored consoles, most recently written first.

        Keys that are not valid console ids are skipped.
        """
        with closing(self._open()) as conn:
            rows = conn.execute(
                "SELECT console_key, COUNT(*), MAX(id) FROM console_lines "
                "GROUP BY console_key ORDER BY MAX(id) DESC"
            ).fetchall()
        return [
            summary
            for summary in self._summaries(rows)
            if job_id is None or summary.console_id.job_id == job_id
        ]

    @staticmethod
    def _summaries(rows: list[tuple]) -> Iterator[ConsoleSummary]:
        for key, line_count, _last_id in rows:
            try:
                console_id = ConsoleId.parse(key)
            except ValueError:
                logger.debug("Skipping non-console key %r.", key)
                continue
            yield ConsoleSummary(console_id=console_id, line_count=line_count)
