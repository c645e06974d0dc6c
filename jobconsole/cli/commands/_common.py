"""Helpers shared by CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from jobconsole.config import config
from jobconsole.models.console import ConsoleId
from jobconsole.storage.sqlite import SqliteConsoleStorage

console = Console()
err_console = Console(stderr=True)


def open_storage(db: Path | None) -> SqliteConsoleStorage:
    """Open an existing console database, exiting with code 1 if missing."""
    db_path = db or config.storage_path
    if not db_path.exists():
        err_console.print(f"[bold red]Console database not found:[/bold red] {db_path}")
        err_console.print("[dim]Set JOBCONSOLE_STORAGE_PATH or pass --db.[/dim]")
        raise typer.Exit(code=1)
    return SqliteConsoleStorage(db_path)


def parse_console_id(value: str) -> ConsoleId:
    try:
        return ConsoleId.parse(value)
    except ValueError as exc:
        err_console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1) from exc


def print_available_consoles(storage: SqliteConsoleStorage, job_id: str) -> None:
    """List consoles stored for *job_id* (or all jobs if it has none)."""
    summaries = storage.list_consoles(job_id) or storage.list_consoles()
    if not summaries:
        return
    limit = config.max_listed_consoles
    err_console.print("\n[bold]Available consoles:[/bold]")
    for summary in summaries[:limit]:
        err_console.print(f"  [cyan]{summary.console_id}[/cyan]")
    if len(summaries) > limit:
        err_console.print(f"  [dim]... and {len(summaries) - limit} more[/dim]")
