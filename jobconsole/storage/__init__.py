"""Console storage: the read protocol and a SQLite reference backend."""

from jobconsole.storage.base import ConsoleStorage, StorageConnection
from jobconsole.storage.sqlite import ConsoleSummary, SqliteConnection, SqliteConsoleStorage

__all__ = [
    "ConsoleStorage",
    "ConsoleSummary",
    "SqliteConnection",
    "SqliteConsoleStorage",
    "StorageConnection",
]
