"""Timestamp helpers shared by console ids and job state metadata.

Every timestamp handled by jobconsole is a timezone-aware UTC ``datetime``
truncated to millisecond precision.  That is the precision of the console
key, so comparing a ``StartedAt`` value against a ``ConsoleId`` must happen
at the same resolution.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize(value: datetime) -> datetime:
    """Return *value* as aware UTC, truncated to whole milliseconds.

    Naive datetimes are assumed to already be in UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def to_unix_millis(value: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return (normalize(value) - _EPOCH) // timedelta(milliseconds=1)


def from_unix_millis(millis: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)


def serialize_datetime(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return (
        normalize(value)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def deserialize_datetime(text: str) -> datetime:
    """Parse a timestamp written by ``serialize_datetime``.

    Plain integers are accepted as Unix milliseconds, which is the other
    form job state stores commonly use for ``StartedAt``.

    Raises
    ------
    ValueError
        If *text* is neither an ISO-8601 timestamp nor an integer.
    """
    text = text.strip()
    if text.lstrip("-").isdigit():
        try:
            return from_unix_millis(int(text))
        except OverflowError as exc:
            raise ValueError(f"Timestamp out of range: {text!r}") from exc
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp: {text!r}") from exc
    return normalize(parsed)
