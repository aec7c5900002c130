"""
Time helpers. Appointment instants are stored and compared in UTC; local
wall-clock values are only used for rendering and for computing the instant.
"""
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_to_utc(day: date, time_of_day: time, tz_name: str) -> datetime:
    local = datetime.combine(day, time_of_day).replace(tzinfo=ZoneInfo(tz_name))
    return local.astimezone(timezone.utc)


def local_date(value: datetime, tz_name: str) -> date:
    return ensure_utc(value).astimezone(ZoneInfo(tz_name)).date()
