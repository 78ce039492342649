"""Calendar windows used by the category analytics.

All boundaries are computed in the configured display timezone and handed
back as aware datetimes, so they compare correctly against UTC timestamps
stored in the database. Weeks start on Sunday.
"""

import enum
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from pingpanel.core.config import settings


class TimeRange(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


def local_now(tz: str | None = None) -> datetime:
    return datetime.now(ZoneInfo(tz or settings.timezone))


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (SQLite drops tzinfo) and normalize aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _midnight(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_day(now: datetime) -> datetime:
    return _midnight(now)


def end_of_day(now: datetime) -> datetime:
    # wall-clock arithmetic, so a 23 or 25 hour DST day ends at local midnight
    return _midnight(now + timedelta(days=1))


def start_of_week(now: datetime) -> datetime:
    # Monday is 0 for weekday(); shift so that Sunday is 0
    days_since_sunday = (now.weekday() + 1) % 7
    return _midnight(now - timedelta(days=days_since_sunday))


def start_of_month(now: datetime) -> datetime:
    return _midnight(now.replace(day=1))


def start_of_next_month(now: datetime) -> datetime:
    first = start_of_month(now)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def window_start(time_range: TimeRange, now: datetime) -> datetime:
    if time_range == TimeRange.TODAY:
        return start_of_day(now)
    if time_range == TimeRange.WEEK:
        return start_of_week(now)
    if time_range == TimeRange.MONTH:
        return start_of_month(now)
    raise ValueError(f"Unknown time range: {time_range}")
