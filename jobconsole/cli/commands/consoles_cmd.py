"""``jobconsole consoles [JOB_ID]``: list stored consoles."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from jobconsole.cli.commands._common import console, open_storage
from jobconsole.config import config
from jobconsole.core.timestamps import serialize_datetime


def consoles_cmd(
    job_id: str = typer.Argument(None, help="Only list consoles of this job."),
    db: Path = typer.Option(
        None,
        "--db",
        "-d",
        help="Path to the console SQLite database.",
    ),
) -> None:
    """List stored consoles with their line counts and current job state."""
    storage = open_storage(db)
    summaries = storage.list_consoles(job_id)

    if not summaries:
        console.print("[dim]No consoles stored.[/dim]")
        return

    table = Table(title="Job Consoles")
    table.add_column("Console", style="cyan")
    table.add_column("Started", style="dim")
    table.add_column("Lines", justify="right")
    table.add_column("State")

    with storage.connect() as conn:
        for summary in summaries:
            cid = summary.console_id
            state = conn.get_state(cid.job_id)
            if state is None:
                state_display = "[red]missing[/red]"
            elif state.is_processing_run(cid.timestamp, config.processing_state_name):
                state_display = f"[yellow]{state.name}[/yellow]"
            else:
                state_display = f"[dim]{state.name}[/dim]"
            table.add_row(
                str(cid),
                serialize_datetime(cid.timestamp),
                str(summary.line_count),
                state_display,
            )

    console.print(table)
