"""Incremental console reader.

Dashboard clients poll a console with a cursor.  A non-negative cursor is the
number of lines the client has already seen.  The reader returns the lines
appended since then together with the cursor for the next poll, which is
either the new line count or one of the terminal values in ``StreamEnd``.

Liveness is decided from the job state store, not from the line stream: the
job must still be processing *and* its ``StartedAt`` must match the console's
run timestamp, because job ids are reused across retries.  The state store
is consulted when a poll brings no new lines, and always on the first poll.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import NamedTuple

from jobconsole.config import config
from jobconsole.models.console import ConsoleId, ConsoleLine
from jobconsole.storage.base import ConsoleStorage

logger = logging.getLogger(__name__)


class StreamEnd(IntEnum):
    """Terminal cursor values.  A client receiving one must stop polling."""

    STATE_CHANGED = -1
    JOB_NOT_FOUND = -2


class ReadResult(NamedTuple):
    """Lines returned by one poll plus the cursor for the next one."""

    lines: tuple[ConsoleLine, ...]
    next_start: int

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self.next_start)


def is_terminal(cursor: int) -> bool:
    """Whether *cursor* ends the stream rather than counting lines."""
    return cursor < 0


def describe_end(cursor: int) -> str:
    """Human-readable reason for a terminal cursor."""
    if cursor == StreamEnd.JOB_NOT_FOUND:
        return "Job not found"
    if cursor == StreamEnd.STATE_CHANGED:
        return "Job finished or is no longer running this attempt"
    raise ValueError(f"Cursor {cursor} is not terminal")


def read_lines(
    storage: ConsoleStorage,
    console_id: ConsoleId,
    start: int,
    *,
    processing_state: str | None = None,
) -> ReadResult:
    """Read the lines appended to a console since *start*.

    Parameters
    ----------
    storage:
        Backend providing a per-poll ``StorageConnection``.
    console_id:
        Console of the job run being watched.
    start:
        Cursor returned by the previous poll, or ``0`` for the first one.
        A terminal cursor short-circuits to an empty result without
        touching storage.
    processing_state:
        Name of the job state that means "running"; compared
        case-insensitively.  Defaults to ``config.processing_state_name``.

    Raises
    ------
    ValueError
        If *storage* or *console_id* is missing.
    ConsoleDecodeError
        If a stored record is malformed.  The whole poll fails.
    """
    if storage is None:
        raise ValueError("storage is required")
    if console_id is None:
        raise ValueError("console_id is required")

    if is_terminal(start):
        return ReadResult((), start)

    processing_state = processing_state or config.processing_state_name
    key = console_id.key
    with storage.connect() as conn:
        count = conn.count(key)
        lines: tuple[ConsoleLine, ...] = ()

        if count > start:
            records = conn.range_read(key, start, count)
            lines = tuple(ConsoleLine.decode(record) for record in records)
            # never advance past what was actually read
            count = start + len(lines)

        if count <= start or start == 0:
            state = conn.get_state(console_id.job_id)
            if state is None:
                logger.debug("Console %s: job %s not found.", key, console_id.job_id)
                count = StreamEnd.JOB_NOT_FOUND
            elif not state.is_processing_run(console_id.timestamp, processing_state):
                logger.debug(
                    "Console %s: job %s is %s, stream ended.",
                    key,
                    console_id.job_id,
                    state.name,
                )
                count = StreamEnd.STATE_CHANGED

    return ReadResult(lines, int(count))
