"""
Instant helpers. Every engine function takes "now" explicitly; these only normalize it.

Stored timestamps are UTC. Some drivers (SQLite) hand them back naive, so treat naive as UTC.
"""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(now: datetime, tz_name: str) -> datetime:
    """Convert an instant to wall-clock time in tz_name (naive input is taken as UTC)."""
    return as_utc(now).astimezone(ZoneInfo(tz_name))


def local_day_of_week(local: datetime) -> int:
    """0 = Sunday .. 6 = Saturday (datetime.weekday() is Monday-based)."""
    return (local.weekday() + 1) % 7


def minute_of_day(local: datetime) -> int:
    return local.hour * 60 + local.minute
