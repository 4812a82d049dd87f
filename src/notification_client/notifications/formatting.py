"""Human-readable timestamps for the notification panel."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

UNKNOWN_DATE = "unknown date"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Describe ``timestamp`` relative to ``now`` ("5 min ago", "yesterday", ...).

    Naive datetimes are taken as UTC. Anything older than a year falls back to
    an absolute DD.MM.YYYY date.
    """
    if timestamp is None:
        return UNKNOWN_DATE

    now = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = (now - timestamp).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)

    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} h ago"
    if days == 1:
        return "yesterday"
    if days < 7:
        return _plural(days, "day")
    if days < 30:
        return _plural(days // 7, "week")
    if days < 365:
        return _plural(days // 30, "month")
    return timestamp.strftime("%d.%m.%Y")
