"""UTC normalisation and local-day helpers.

Datetimes are stored as UTC. SQLite hands them back naive, so anything read
from the store or received from a client goes through ``ensure_utc`` before
being compared.
"""
from datetime import datetime, time, timedelta, timezone

import pytz


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive input is taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_day_bounds(value: datetime, tz_name: str) -> tuple[datetime, datetime]:
    """UTC bounds ``[start, end]`` of the calendar day containing ``value`` in ``tz_name``."""
    tz = pytz.timezone(tz_name)
    local_date = ensure_utc(value).astimezone(tz).date()
    day_start = tz.localize(datetime.combine(local_date, time.min))
    day_end = tz.localize(datetime.combine(local_date, time.max))
    return day_start.astimezone(timezone.utc), day_end.astimezone(timezone.utc)


def add_hours(value: datetime, hours: float) -> datetime:
    return value + timedelta(hours=hours)


def format_local(value: datetime, tz_name: str) -> str:
    """Human-readable local time for emails, e.g. ``Fri 12 Sep 2025, 12:00``."""
    tz = pytz.timezone(tz_name)
    return ensure_utc(value).astimezone(tz).strftime("%a %d %b %Y, %H:%M")
