"""Rich terminal renderer for console streams.

Prints console lines as ``HH:MM:SS.mmm  +offset  message``, colored with the
line's ``text_color`` when Rich understands it (CSS names Rich does not know
fall back to the default style).  ``follow`` keeps polling until the stream
ends or the user presses Ctrl+C.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from datetime import datetime, timedelta

from rich.color import Color, ColorParseError
from rich.console import Console
from rich.text import Text

from jobconsole.core.reader import ReadResult, describe_end, read_lines
from jobconsole.models.console import ConsoleId, ConsoleLine
from jobconsole.monitor._formatting import to_human_duration
from jobconsole.storage.base import ConsoleStorage


def _line_style(text_color: str | None) -> str:
    if not text_color:
        return ""
    try:
        Color.parse(text_color)
    except ColorParseError:
        return ""
    return text_color


class ConsoleTailRenderer:
    """Renders console lines and stream status to a Rich console.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_line(self, line: ConsoleLine, reference: datetime) -> Text:
        offset = timedelta(seconds=line.time_offset)
        absolute = reference + offset

        text = Text()
        millis = absolute.microsecond // 1000
        text.append(f"{absolute:%H:%M:%S}.{millis:03d}", style="dim")
        text.append(f" {to_human_duration(offset):>12} ", style="cyan")
        text.append(line.message, style=_line_style(line.text_color))
        return text

    def print_lines(self, lines: Iterable[ConsoleLine], reference: datetime) -> None:
        for line in lines:
            self.console.print(self.render_line(line, reference), highlight=False)

    def print_end(self, cursor: int) -> None:
        """Print the end-of-stream indicator for a terminal cursor."""
        self.console.print(f"[bold yellow]-- {describe_end(cursor)} --[/bold yellow]")

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def print_poll(self, console_id: ConsoleId, result: ReadResult) -> None:
        self.print_lines(result.lines, console_id.timestamp)
        if result.is_terminal:
            self.print_end(result.next_start)

    def follow(
        self,
        storage: ConsoleStorage,
        console_id: ConsoleId,
        start: int = 0,
        *,
        refresh_hz: float = 2.0,
        processing_state: str | None = None,
    ) -> int:
        """Poll a console until the stream ends, printing lines as they arrive.

        Returns the last cursor: terminal when the stream ended, the line
        count when interrupted with Ctrl+C.
        """
        interval = 1.0 / max(refresh_hz, 0.1)
        cursor = start

        try:
            while True:
                result = read_lines(
                    storage, console_id, cursor, processing_state=processing_state
                )
                self.print_poll(console_id, result)
                cursor = result.next_start
                if result.is_terminal:
                    return cursor
                time.sleep(interval)
        except KeyboardInterrupt:
            self.console.print(f"[dim]Stopped at line {cursor}.[/dim]", highlight=False)
            return cursor
