"""Calendar-date utilities — pure date math, no time of day.

Every function works on ``datetime.date`` values (proleptic Gregorian), so
differences are whole calendar days and daylight-saving transitions cannot
shift them.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from datetime import date, datetime, timedelta

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

# Weeks start on Sunday; index 0 is Sunday.
WEEKDAYS_SHORT = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def parse_date(value: str | date) -> date:
    """Parse YYYY-MM-DD into a date. Dates pass through unchanged.

    Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def format_date(day: date) -> str:
    """Format a date as zero-padded YYYY-MM-DD."""
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


def days_in_month(year: int, month: int) -> int:
    """Number of days in month (1-12)."""
    return calendar.monthrange(year, month)[1]


def weekday_index(day: date) -> int:
    """Day of the week with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7


def first_weekday_of_month(year: int, month: int) -> int:
    """Sunday-based weekday index of the 1st of the month."""
    return weekday_index(date(year, month, 1))


def start_of_week(day: date) -> date:
    """The Sunday on or before day."""
    return day - timedelta(days=weekday_index(day))


def add_days(day: date, days: int) -> date:
    return day + timedelta(days=days)


def add_months(day: date, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length."""
    total = day.year * 12 + (day.month - 1) + months
    year, month = divmod(total, 12)
    month += 1
    return date(year, month, min(day.day, days_in_month(year, month)))


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative if end is earlier)."""
    return (end - start).days


def weeks_between(start: date, end: date) -> int:
    """Whole weeks from start to end, truncated toward zero."""
    days = days_between(start, end)
    return days // 7 if days >= 0 else -((-days) // 7)


def months_between(start: date, end: date) -> int:
    """Calendar-month difference, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def years_between(start: date, end: date) -> int:
    return end.year - start.year


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_same_day(first: date, second: date) -> bool:
    return first == second


def is_today(day: date, today: date | None = None) -> bool:
    return day == (today or date.today())
