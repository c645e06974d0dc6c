"""``jobconsole render CONSOLE_ID``: emit one poll as dashboard HTML.

The fragment goes to stdout; the cursor for the next poll goes to stderr so
scripts can capture the two separately.
"""

from __future__ import annotations

from pathlib import Path

import typer

from jobconsole.cli.commands._common import err_console, open_storage, parse_console_id
from jobconsole.config import config
from jobconsole.monitor.html import fetch_and_render


def render_cmd(
    console_id: str = typer.Argument(..., help="Console id to render."),
    start: int = typer.Option(
        0,
        "--start",
        "-s",
        help="Cursor returned by the previous poll.",
    ),
    db: Path = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to the console SQLite database.",
    ),
) -> None:
    """Render one poll of a console as an HTML fragment."""
    storage = open_storage(db)
    cid = parse_console_id(console_id)

    markup, next_start = fetch_and_render(
        storage, cid, start, processing_state=config.processing_state_name
    )
    typer.echo(markup)
    err_console.print(f"next start: {next_start}", highlight=False)
