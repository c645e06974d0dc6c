"""``jobconsole tail CONSOLE_ID``: print a job console in the terminal.

Reads the console from the given cursor with the same incremental protocol
the dashboard uses.  With ``--follow`` it keeps polling until the job leaves
its processing state or disappears.
"""

from __future__ import annotations

from pathlib import Path

import typer

from jobconsole.cli.commands._common import (
    console,
    open_storage,
    parse_console_id,
    print_available_consoles,
)
from jobconsole.config import config
from jobconsole.core.reader import StreamEnd, read_lines
from jobconsole.monitor.terminal import ConsoleTailRenderer


def tail_cmd(
    console_id: str = typer.Argument(
        ...,
        help="Console id: 11 hex digits of the run start (Unix ms) followed by the job id.",
    ),
    start: int = typer.Option(
        0,
        "--start",
        "-s",
        help="Number of lines already seen.",
    ),
    follow: bool = typer.Option(
        False,
        "--follow",
        "-f",
        help="Keep polling until the job stops processing (Ctrl+C to exit).",
    ),
    refresh_hz: float = typer.Option(
        None,
        "--refresh",
        "-r",
        help="Poll rate in Hz for follow mode.",
    ),
    db: Path = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to the console SQLite database.",
    ),
) -> None:
    """Print the lines of a job console."""
    storage = open_storage(db)
    cid = parse_console_id(console_id)
    renderer = ConsoleTailRenderer(console=console)
    processing_state = config.processing_state_name

    result = read_lines(storage, cid, start, processing_state=processing_state)
    if start >= 0 and result.next_start == StreamEnd.JOB_NOT_FOUND and not result.lines:
        console.print(f"[bold red]Job not found:[/bold red] {cid.job_id}")
        print_available_consoles(storage, cid.job_id)
        raise typer.Exit(code=1)

    renderer.print_poll(cid, result)
    if not follow or result.is_terminal:
        return

    renderer.follow(
        storage,
        cid,
        result.next_start,
        refresh_hz=refresh_hz or config.refresh_hz,
        processing_state=processing_state,
    )
