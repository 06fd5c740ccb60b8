# src/myday/core/calendar_day.py

"""
Local calendar-day helpers.

All comparisons are done at local-calendar-day granularity. Timestamps are kept
as naive local datetimes; aware values (e.g. ISO strings ending with "Z") are
converted to local time and stripped of tzinfo. No other timezone handling.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

Timestamp = datetime | date | str


def local_now() -> datetime:
    return datetime.now()


def to_local(value: Timestamp | None) -> datetime | None:
    """
    Normalize any supported timestamp encoding to a naive local datetime.

    Accepts datetime, date (-> midnight), and ISO-8601 strings in both the
    date-only ("2024-03-01") and full-datetime forms. Raises ValueError for
    strings that are not ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        dt = datetime.fromisoformat(s)
    else:
        raise TypeError(f"unsupported timestamp type: {type(value).__name__}")

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def local_midnight(value: Timestamp) -> datetime:
    dt = to_local(value)
    if dt is None:
        raise ValueError("empty timestamp")
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def today_midnight(now: datetime | None = None) -> datetime:
    return local_midnight(now or local_now())


def day_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def today_key(now: datetime | None = None) -> str:
    """Today's local calendar day as YYYY-MM-DD."""
    return day_key(now or local_now())


def day_key_of(value: Timestamp) -> str:
    dt = to_local(value)
    if dt is None:
        raise ValueError("empty timestamp")
    return day_key(dt)


def is_today(value: Timestamp | None, now: datetime | None = None) -> bool:
    if value is None:
        return False
    try:
        return day_key_of(value) == today_key(now)
    except (TypeError, ValueError):
        return False


def js_weekday(d: date) -> int:
    """Weekday ordinal with 0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


def week_start(d: datetime) -> datetime:
    """Local midnight of the Sunday that starts d's week."""
    return local_midnight(d) - timedelta(days=js_weekday(d))


def to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()
