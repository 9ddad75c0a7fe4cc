"""Relative time labels for the session history list."""

from datetime import datetime, timezone


def format_age(timestamp: datetime, now: datetime | None = None) -> str:
    """Render ``timestamp`` relative to ``now``.

    Under an hour is "Just now", under a day is "<h>h ago", otherwise
    "<d>d ago". Naive datetimes are treated as UTC.
    """
    now = now or datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours = int((now - timestamp).total_seconds() // 3600)
    if hours < 1:
        return "Just now"
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"
