"""jobconsole CLI: Typer-based command-line interface.

Provides the ``jobconsole`` command with subcommands for tailing a job
console, rendering a poll as dashboard HTML, and listing stored consoles.

All output uses Rich for formatted terminal display.
"""
