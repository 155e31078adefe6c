"""
PocketCal — Occurrence Engine.

Read-side projection of the event collection: for one calendar date, which
records are visible, at which occurrence index, and with which task
assignments. Recomputed on every query; nothing here is stored.

No I/O and no exceptions: malformed records degrade to "not visible".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date

from pocketcal.core.dates import (
    date_range,
    days_between,
    format_date,
    months_between,
    parse_date,
    weekday_index,
    weeks_between,
    years_between,
)
from pocketcal.data.models import EndType, Event, Frequency, Occurrence

logger = logging.getLogger(__name__)


def _safe_parse(value: str | date | None) -> date | None:
    if not value:
        return None
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        return None


def match_recurrence(event: Event, day: str | date) -> int | None:
    """Return the 0-based occurrence index of day for a recurring event.

    None means day is not an occurrence (before start, past the end date,
    wrong weekday/day-of-month, unknown frequency, or a malformed rule).
    """
    rule = event.recurrence
    if not event.is_recurring or rule is None:
        return None

    start = _safe_parse(event.date)
    check = _safe_parse(day)
    if start is None or check is None:
        logger.debug("Unparseable date for event %s: %r / %r", event.id, event.date, day)
        return None

    if check < start:
        return None

    if rule.end_type == EndType.DATE.value:
        end = _safe_parse(rule.end_date)
        if end is None:
            logger.debug("Event %s ends 'by date' without an end date", event.id)
            return None
        if check > end:
            return None

    frequency = rule.frequency
    if frequency == Frequency.DAILY.value:
        index = days_between(start, check)
    elif frequency == Frequency.WEEKLY.value:
        if weekday_index(check) != weekday_index(start):
            return None
        index = weeks_between(start, check)
    elif frequency == Frequency.MONTHLY.value:
        # Exact day-of-month only: a start on the 31st skips shorter months.
        if check.day != start.day:
            return None
        index = months_between(start, check)
    elif frequency == Frequency.YEARLY.value:
        if check.day != start.day or check.month != start.month:
            return None
        index = years_between(start, check)
    else:
        logger.debug("Unknown frequency %r on event %s", frequency, event.id)
        return None

    return index if index >= 0 else None


def build_occurrence(event: Event, occurrence_index: int) -> Occurrence:
    """Materialize event for one occurrence, rotating tasks when enabled.

    With auto_rotate_tasks and n > 1 participants, participant i gets the
    task held by participant (i + index) mod n. Names, emails and phones
    stay where they are.
    """
    data = event.model_dump()
    data["occurrence_index"] = occurrence_index
    occurrence = Occurrence.model_validate(data)

    participants = event.participants
    if event.auto_rotate_tasks and len(participants) > 1:
        count = len(participants)
        shift = occurrence_index % count
        tasks = [p.task for p in participants]
        occurrence.participants = [
            p.model_copy(update={"task": tasks[(i + shift) % count]})
            for i, p in enumerate(participants)
        ]

    return occurrence


def _is_visible_single(event: Event, day_str: str) -> bool:
    """Closed-interval check for one-off records (ISO strings sort as dates)."""
    return event.date <= day_str <= (event.end_date or event.date)


def _sort_key(occurrence: Occurrence) -> tuple[bool, str]:
    # Timed entries first, ordered by HH:MM; untimed keep input order.
    return (not occurrence.time, occurrence.time)


def occurrences_for_date(
    events: Iterable[Event],
    day: str | date,
    filters: Mapping[str, bool] | None = None,
) -> list[Occurrence]:
    """Return the ordered occurrences visible on day.

    Args:
        events: Master records, in collection order.
        day: The calendar date (date or YYYY-MM-DD).
        filters: Type tag -> visible. Tags missing from the map are hidden;
            None shows every type.
    """
    check = _safe_parse(day)
    if check is None:
        return []
    day_str = format_date(check)

    result: list[Occurrence] = []
    for event in events:
        if filters is not None and not filters.get(event.type, False):
            continue

        if not event.is_recurring:
            if _is_visible_single(event, day_str):
                data = event.model_dump()
                data["occurrence_index"] = 0
                result.append(Occurrence.model_validate(data))
            continue

        index = match_recurrence(event, check)
        if index is not None:
            result.append(build_occurrence(event, index))

    result.sort(key=_sort_key)
    return result


def occurrences_between(
    events: Iterable[Event],
    start: str | date,
    end: str | date,
    filters: Mapping[str, bool] | None = None,
) -> list[tuple[date, list[Occurrence]]]:
    """Occurrences for every date in [start, end], one entry per date."""
    records = list(events)
    return [
        (day, occurrences_for_date(records, day, filters))
        for day in date_range(parse_date(start), parse_date(end))
    ]
