"""Calendar view layout — which dates a month or week grid shows, and labels.

Pure data: presenters decide how the cells look.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pocketcal.core.dates import (
    MONTH_NAMES,
    add_days,
    add_months,
    days_in_month,
    first_weekday_of_month,
    parse_date,
    start_of_week,
)
from pocketcal.data.models import EndType, RecurrenceRule

GRID_CELLS = 42  # 6 rows x 7 days

_FREQUENCY_LABELS = {
    "daily": "Daily",
    "weekly": "Weekly",
    "monthly": "Monthly",
    "yearly": "Yearly",
}


@dataclass
class GridCell:
    """One day cell of the month grid."""

    day: date
    is_padding: bool  # belongs to the previous or next month


def month_grid(year: int, month: int) -> list[GridCell]:
    """Always 42 cells, Sunday-first, padded from adjacent months."""
    first = date(year, month, 1)
    lead = first_weekday_of_month(year, month)
    cells = [GridCell(add_days(first, -i), True) for i in range(lead, 0, -1)]
    cells += [GridCell(date(year, month, d), False) for d in range(1, days_in_month(year, month) + 1)]

    following = add_months(first, 1)
    cells += [GridCell(add_days(following, i), True) for i in range(GRID_CELLS - len(cells))]
    return cells


def week_dates(day: date) -> list[date]:
    """Sunday..Saturday of the week containing day."""
    start = start_of_week(day)
    return [add_days(start, i) for i in range(7)]


def header_label(day: date, view: str) -> str:
    """Title shown above the grid, e.g. "March 2024" or "March - April 2024"."""
    if view == "month":
        return f"{MONTH_NAMES[day.month - 1]} {day.year}"

    start = start_of_week(day)
    end = add_days(start, 6)
    if start.month == end.month:
        return f"{MONTH_NAMES[start.month - 1]} {start.year}"
    return f"{MONTH_NAMES[start.month - 1]} - {MONTH_NAMES[end.month - 1]} {end.year}"


def format_short_date(value: str) -> str:
    """"2024-03-05" -> "Mar 5, 2024"; empty string for empty/invalid input."""
    if not value:
        return ""
    try:
        day = parse_date(value)
    except ValueError:
        return ""
    return f"{MONTH_NAMES[day.month - 1][:3]} {day.day}, {day.year}"


def recurrence_label(rule: RecurrenceRule | None) -> str:
    """Human summary of a recurrence rule, e.g. "Weekly · Until Mar 5, 2024"."""
    if rule is None:
        return ""
    freq = _FREQUENCY_LABELS.get(rule.frequency, rule.frequency)
    if rule.end_type == EndType.INDEFINITE.value:
        return f"{freq} · No end date"
    end = format_short_date(rule.end_date or "") or "?"
    return f"{freq} · Until {end}"
