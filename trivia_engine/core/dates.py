"""
Local calendar helpers.

Daily trivia and streaks are keyed by the user's *local* calendar day, so all
dates here are naive local dates, never UTC conversions.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, time, timedelta

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Current local wall-clock time."""
    return datetime.now()


def local_date_string(value: date | datetime | None = None) -> str:
    """Format a date as YYYY-MM-DD (defaults to today)."""
    if value is None:
        value = local_now()
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def parse_date_string(value: str) -> date:
    return date.fromisoformat(value)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return [start, end) datetimes covering one local day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())
