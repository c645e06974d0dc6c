"""Console identity and line records.

A *console* is the ordered line stream written by one run of one job.  The
``ConsoleId`` names it (job id + run start) and doubles as the storage key;
``ConsoleLine`` is a single record in that stream.
"""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from jobconsole.core.timestamps import from_unix_millis, normalize, to_unix_millis

# 11 hex digits hold Unix milliseconds from 1970 up to early 2527.
_TIMESTAMP_DIGITS = 11
_MAX_MILLIS = 16**_TIMESTAMP_DIGITS
_KEY_PATTERN = re.compile(r"^(?P<ts>[0-9a-fA-F]{11})(?P<job_id>.+)$", re.DOTALL)


class ConsoleDecodeError(ValueError):
    """Raised when a stored line record cannot be decoded."""


class ConsoleId(BaseModel):
    """Identifies the console of a single job run.

    Job ids are reused when a job is retried or re-enqueued, so the run
    start timestamp is part of the identity.  The string form is used
    verbatim as the storage key.
    """

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(min_length=1)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _truncate_timestamp(cls, value: datetime) -> datetime:
        value = normalize(value)
        if not 0 <= to_unix_millis(value) < _MAX_MILLIS:
            raise ValueError(f"Timestamp {value.isoformat()} cannot be encoded in a console id")
        return value

    def __str__(self) -> str:
        return f"{to_unix_millis(self.timestamp):0{_TIMESTAMP_DIGITS}x}{self.job_id}"

    @property
    def key(self) -> str:
        """Storage key of this console's line collection."""
        return str(self)

    @classmethod
    def parse(cls, value: str) -> ConsoleId:
        """Rebuild a ``ConsoleId`` from its string form.

        Raises
        ------
        ValueError
            If *value* is not a valid console key.
        """
        match = _KEY_PATTERN.match(value or "")
        if match is None:
            raise ValueError(f"Invalid console id: {value!r}")
        return cls(
            job_id=match.group("job_id"),
            timestamp=from_unix_millis(int(match.group("ts"), 16)),
        )


class ConsoleLine(BaseModel):
    """A single line of console output.

    Stored as compact JSON with one-letter keys; ``time_offset`` is the
    number of seconds since the run started.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    time_offset: float = Field(alias="t", ge=0)
    message: str = Field(alias="s")
    text_color: str | None = Field(default=None, alias="c")

    def encode(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def decode(cls, record: str | bytes) -> ConsoleLine:
        """Deserialize a stored record.

        Raises
        ------
        ConsoleDecodeError
            If the record is not valid JSON or does not describe a line.
        """
        try:
            return cls.model_validate_json(record)
        except ValidationError as exc:
            raise ConsoleDecodeError(f"Malformed console line: {record!r}") from exc
