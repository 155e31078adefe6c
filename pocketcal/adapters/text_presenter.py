"""Plain-text presenter — implements PresenterPort.

Draws the current month grid or week, followed by an agenda of every
visible occurrence, to a text stream. Subscribes to the event store and
redraws on each notification.
"""

from __future__ import annotations

import sys
from typing import TextIO

from pocketcal.core.calendar_view import header_label, month_grid, recurrence_label, week_dates
from pocketcal.core.dates import WEEKDAYS_SHORT, weekday_index
from pocketcal.core.event_store import EventStore
from pocketcal.core.occurrences import occurrences_between
from pocketcal.data.models import Occurrence

_BADGES = {"event": "[event]", "task": "[task]"}


class TextPresenter:
    """Text implementation of PresenterPort."""

    def __init__(self, store: EventStore, out: TextIO | None = None, subscribe: bool = True) -> None:
        self._store = store
        self._out = out or sys.stdout
        if subscribe:
            store.subscribe(self.render)

    def render(self) -> None:
        store = self._store
        lines = [f"{header_label(store.current_date, store.view)}  ({store.view}, {store.theme})", ""]
        if store.view == "month":
            lines += self._month_lines()
            cells = [c.day for c in month_grid(store.current_date.year, store.current_date.month)
                     if not c.is_padding]
        else:
            cells = week_dates(store.current_date)
            lines += self._week_lines(cells)
        lines.append("")
        lines += self._agenda_lines(cells[0], cells[-1])
        self._out.write("\n".join(lines) + "\n")

    def _month_lines(self) -> list[str]:
        store = self._store
        rows = [" ".join(f"{d:>4}" for d in WEEKDAYS_SHORT)]
        cells = month_grid(store.current_date.year, store.current_date.month)
        for start in range(0, len(cells), 7):
            row = []
            for cell in cells[start:start + 7]:
                marker = "*" if store.occurrences_for_date(cell.day) else " "
                number = f"({cell.day.day})" if cell.is_padding else f"{cell.day.day}"
                row.append(f"{number:>3}{marker}")
            rows.append(" ".join(row))
        return rows

    def _week_lines(self, days) -> list[str]:
        store = self._store
        lines = []
        for day in days:
            titles = ", ".join(o.title for o in store.occurrences_for_date(day)) or "-"
            lines.append(f"{WEEKDAYS_SHORT[weekday_index(day)]} {day.day:>2}  {titles}")
        return lines

    def _agenda_lines(self, start, end) -> list[str]:
        store = self._store
        lines: list[str] = []
        for day, occurrences in occurrences_between(store.events, start, end, store.filters):
            if not occurrences:
                continue
            lines.append(f"{WEEKDAYS_SHORT[weekday_index(day)]} {day.isoformat()}")
            for occ in occurrences:
                lines += self._occurrence_lines(occ)
        return lines or ["No events."]

    @staticmethod
    def _occurrence_lines(occ: Occurrence) -> list[str]:
        when = "all day" if occ.is_all_day else (occ.time or "--:--")
        badge = _BADGES.get(occ.type, f"[{occ.type}]")
        line = f"  {when:>7}  {occ.title} {badge}"
        if occ.is_recurring:
            line += f"  ↺ {recurrence_label(occ.recurrence)} #{occ.occurrence_index + 1}"
        lines = [line]
        for p in occ.participants:
            if p.task:
                lines.append(f"           {p.name}: {p.task}")
        return lines
