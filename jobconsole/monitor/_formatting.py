"""Shared formatting helpers for the HTML and terminal renderers."""

from __future__ import annotations

import html
from datetime import datetime, timedelta

from jobconsole.core.timestamps import to_unix_millis


def to_human_duration(duration: timedelta, *, display_sign: bool = True) -> str:
    """Compact duration label, e.g. ``+45ms``, ``+3.250s``, ``+2m 5s``, ``+1h 4m``.

    Seconds and milliseconds are dropped once the duration reaches an hour.
    """
    sign = "-" if duration < timedelta(0) else "+"
    duration = abs(duration)

    hours, remainder = divmod(duration.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    millis = duration.microseconds // 1000

    parts: list[str] = []
    if duration.days:
        parts.append(f"{duration.days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if duration < timedelta(hours=1):
        if seconds:
            parts.append(f"{seconds}.{millis:03d}s" if millis else f"{seconds}s")
        elif millis:
            parts.append(f"{millis}ms")

    label = " ".join(parts) or "<1ms"
    return f"{sign}{label}" if display_sign else label


def moment_title(timestamp: datetime, label: str) -> str:
    """``<span>`` carrying an absolute timestamp for client-side tooltips."""
    return (
        f'<span data-moment-title="{to_unix_millis(timestamp)}">'
        f"{html.escape(label)}</span>"
    )
