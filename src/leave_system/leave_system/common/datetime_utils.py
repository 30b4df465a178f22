from __future__ import annotations

from datetime import date, datetime

import pytz

from ..core.constants import DEFAULT_TIMEZONE


def get_timezone(timezone_str: str = DEFAULT_TIMEZONE) -> pytz.BaseTzInfo:
    try:
        return pytz.timezone(timezone_str)
    except pytz.UnknownTimeZoneError:
        return pytz.timezone(DEFAULT_TIMEZONE)


def now_local(timezone_str: str = DEFAULT_TIMEZONE) -> datetime:
    """Current local wall-clock time (naive).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(pytz.UTC).astimezone(get_timezone(timezone_str)).replace(tzinfo=None)


def to_local_naive(dt: datetime, timezone_str: str = DEFAULT_TIMEZONE) -> datetime:
    """Aware datetimes are converted to local wall-clock; naive ones are taken as local already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_timezone(timezone_str)).replace(tzinfo=None)


def parse_iso_datetime(value: str, timezone_str: str = DEFAULT_TIMEZONE) -> datetime:
    """Parse 'YYYY-MM-DDTHH:MM[:SS][+offset]' into a local naive datetime."""
    v = (value or "").strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return to_local_naive(datetime.fromisoformat(v), timezone_str)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def add_years(day: date, years: int) -> date:
    """Same month/day `years` later; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def format_span(start: datetime, end: datetime) -> str:
    return f"{start.month}/{start.day} {start:%H:%M} ~ {end.month}/{end.day} {end:%H:%M}"
