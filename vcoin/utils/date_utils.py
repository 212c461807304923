"""Date manipulation utilities"""

from datetime import datetime, time, timedelta, timezone
from typing import Optional

END_OF_DAY = time(23, 59, 59, 999000)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken as UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def end_of_day(value: datetime, offset_hours: int = 0) -> datetime:
    """23:59:59.999 UTC of the value's calendar day, shifted by a fixed hour offset"""
    day = ensure_utc(value).date()
    return datetime.combine(day, END_OF_DAY, tzinfo=timezone.utc) + timedelta(hours=offset_hours)


def seconds_between(later: datetime, earlier: datetime) -> int:
    """Whole seconds from earlier to later, truncated toward zero"""
    return int((ensure_utc(later) - ensure_utc(earlier)).total_seconds())


def days_between(later: datetime, earlier: datetime) -> int:
    """Whole days from earlier to later, truncated toward zero"""
    return int(seconds_between(later, earlier) / 86400)


def school_year_start(now: Optional[datetime] = None) -> datetime:
    """March 1st of the current year, the usual start of classes"""
    now = ensure_utc(now) if now else utc_now()
    return datetime(now.year, 3, 1, tzinfo=timezone.utc)
