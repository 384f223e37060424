"""Shift length calculation for volunteer records."""

import re
from datetime import datetime, timedelta

from errors import ValidationError

_TIME_RE = re.compile(r"^\d{1,2}:\d{2}$")
_MAX_HOURS = 24.0


def _parse_time(value, label):
    """Parse 'HH:MM' onto a fixed date so two times can be subtracted."""
    s = str(value or "").strip()
    if not s:
        raise ValidationError(f"{label} is required")
    if not _TIME_RE.match(s):
        raise ValidationError(f"{label} must be HH:MM, got {s!r}")
    try:
        return datetime.strptime(s, "%H:%M")
    except ValueError:
        raise ValidationError(f"{label} is not a valid time: {s!r}") from None


def compute_hours(start_time, end_time):
    """Return hours between two HH:MM times, wrapping past midnight.

    An end time earlier than the start is treated as the next day, so
    23:00 -> 02:00 is 3.0. Equal times give 0.0.
    """
    start = _parse_time(start_time, "Start time")
    end = _parse_time(end_time, "End time")

    hours = (end - start) / timedelta(hours=1)
    if hours < 0:
        hours += 24
    if hours > _MAX_HOURS:
        raise ValidationError("Invalid time range - hours cannot exceed 24")
    return round(hours, 2)


def format_hours(value, places=1):
    """Render an hours value for tables: 8.5 -> '8.5'."""
    try:
        return f"{float(value or 0):.{places}f}"
    except (TypeError, ValueError):
        return f"{0:.{places}f}"
