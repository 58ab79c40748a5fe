from __future__ import annotations

from datetime import datetime, timezone

from hotdesk.core.errors import ValidationError


# All windows are half-open: [start, end).


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def require_window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    if start is None or end is None:
        raise ValidationError("start_time and end_time are required")
    start, end = as_utc(start), as_utc(end)
    if start >= end:
        raise ValidationError("end_time must be after start_time")
    return start, end


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def covers(start: datetime, end: datetime, instant: datetime) -> bool:
    return start <= instant < end
