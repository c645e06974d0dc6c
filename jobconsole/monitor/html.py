"""HTML rendering of console lines for the dashboard.

Each line renders independently from the run's reference timestamp, so a
batch is simply the concatenation of its lines in storage order.
``render_console`` wraps a poll's output in a container that carries the
console key and the cursor the client must send on its next poll::

    <div class="console" data-id="KEY" data-n="NEXT">
      <div class="line" style="color:red"><span data-moment-title="...">+1.500s</span>message</div>
    </div>
"""

from __future__ import annotations

import html
from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict

from jobconsole.core.reader import read_lines
from jobconsole.models.console import ConsoleId, ConsoleLine
from jobconsole.monitor._formatting import moment_title, to_human_duration
from jobconsole.storage.base import ConsoleStorage


class RenderedLine(BaseModel):
    """Display-ready form of a ``ConsoleLine``.  ``message`` is already escaped."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    relative: str
    message: str
    text_color: str | None = None

    def to_html(self) -> str:
        style = ""
        if self.text_color:
            style = f' style="color:{html.escape(self.text_color)}"'
        return (
            f'<div class="line"{style}>'
            f"{moment_title(self.timestamp, self.relative)}"
            f"{self.message}</div>"
        )


class RenderedConsole(BaseModel):
    """Lines returned by one poll, wrapped with the stream key and next cursor."""

    model_config = ConfigDict(frozen=True)

    console_id: ConsoleId
    next_start: int
    lines: tuple[RenderedLine, ...] = ()

    @property
    def markup(self) -> str:
        body = "".join(line.to_html() for line in self.lines)
        return (
            f'<div class="console" data-id="{html.escape(str(self.console_id))}" '
            f'data-n="{self.next_start}">{body}</div>'
        )


def render_line(line: ConsoleLine, reference: datetime) -> RenderedLine:
    offset = timedelta(seconds=line.time_offset)
    return RenderedLine(
        timestamp=reference + offset,
        relative=to_human_duration(offset),
        message=html.escape(line.message),
        text_color=line.text_color or None,
    )


def render_lines(
    lines: Iterable[ConsoleLine] | None, reference: datetime
) -> list[RenderedLine]:
    """Render *lines* in order.  ``None`` renders as no lines."""
    if lines is None:
        return []
    return [render_line(line, reference) for line in lines]


def render_batch(lines: Iterable[ConsoleLine] | None, reference: datetime) -> str:
    """Concatenated HTML of *lines*."""
    return "".join(rendered.to_html() for rendered in render_lines(lines, reference))


def render_console(
    storage: ConsoleStorage,
    console_id: ConsoleId,
    start: int,
    *,
    processing_state: str | None = None,
) -> RenderedConsole:
    """Poll a console and render whatever it returned.

    Raises ``ValueError`` if *storage* or *console_id* is missing.
    """
    if storage is None:
        raise ValueError("storage is required")
    if console_id is None:
        raise ValueError("console_id is required")

    result = read_lines(storage, console_id, start, processing_state=processing_state)
    return RenderedConsole(
        console_id=console_id,
        next_start=result.next_start,
        lines=tuple(render_lines(result.lines, console_id.timestamp)),
    )


def fetch_and_render(
    storage: ConsoleStorage,
    console_id: ConsoleId,
    start: int,
    *,
    processing_state: str | None = None,
) -> tuple[str, int]:
    """Dashboard entry point: ``(markup, next_start)`` for one poll.

    The client must send ``next_start`` back verbatim as its next ``start``.
    """
    rendered = render_console(
        storage, console_id, start, processing_state=processing_state
    )
    return rendered.markup, rendered.next_start
