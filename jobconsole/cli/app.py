"""Main Typer application: imports and registers all CLI commands.

Entry point: ``jobconsole`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from jobconsole.cli.commands.consoles_cmd import consoles_cmd
from jobconsole.cli.commands.render_cmd import render_cmd
from jobconsole.cli.commands.tail_cmd import tail_cmd
from jobconsole.config import config

app = typer.Typer(
    name="jobconsole",
    help="jobconsole: incremental console output for background jobs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="tail", help="Print (and optionally follow) a job console.")(tail_cmd)
app.command(name="render", help="Render one console poll as dashboard HTML.")(render_cmd)
app.command(name="consoles", help="List stored consoles.")(consoles_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to JOBCONSOLE_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[
            RichHandler(
                rich_tracebacks=config.rich_tracebacks,
                tracebacks_show_locals=config.rich_tracebacks,
                show_path=False,
            )
        ],
        force=True,
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
