"""Storage protocols consumed by the console reader.

The reader never writes.  It opens one connection per poll, asks for a line
count, a range of serialized records and the job state, then closes the
connection.  Any backend that satisfies these protocols can serve consoles.
"""

from __future__ import annotations

from types import TracebackType
from typing import Protocol, runtime_checkable

from jobconsole.models.state import StateData


@runtime_checkable
class StorageConnection(Protocol):
    """A short-lived, read-only view over the line and job state stores."""

    def count(self, key: str) -> int:
        """Number of records stored under *key*."""
        ...

    def range_read(self, key: str, start: int, end: int) -> list[str]:
        """Serialized records at zero-based positions ``[start, end)``.

        Records appended after ``end`` are not returned.
        """
        ...

    def get_state(self, job_id: str) -> StateData | None:
        """Current state of *job_id*, or ``None`` if the job does not exist."""
        ...

    def close(self) -> None: ...

    def __enter__(self) -> StorageConnection: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


@runtime_checkable
class ConsoleStorage(Protocol):
    """Factory for ``StorageConnection`` objects."""

    def connect(self) -> StorageConnection: ...
