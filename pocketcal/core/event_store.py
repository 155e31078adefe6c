"""
PocketCal — Event Store.

Source of truth for the calendar: owns the id -> master record mapping,
applies CRUD mutations, persists the full collection after each one, and
notifies subscribers synchronously. Also holds the view state the presenter
reads back on every notification (current date, view mode, type filters,
theme).

Missing ids are never an error: update/delete/discussion calls against an
unknown id quietly do nothing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from pocketcal.config import settings
from pocketcal.core.dates import add_days, add_months, format_date, parse_date
from pocketcal.core.occurrences import occurrences_for_date
from pocketcal.data.models import (
    DiscussionMessage,
    Event,
    EventType,
    Occurrence,
    apply_fields,
    default_event,
)
from pocketcal.ports.storage_port import StorageError, StoragePort

logger = logging.getLogger(__name__)

Listener = Callable[[], None]

VIEWS = ("month", "week")
THEMES = ("dark", "light")


class EventStore:
    """Owned, observable collection of master event records."""

    def __init__(
        self,
        storage: StoragePort,
        clock: Callable[[], datetime] | None = None,
        events_key: str | None = None,
        theme_key: str | None = None,
        default_theme: str | None = None,
        default_view: str | None = None,
        seed_sample_events: bool | None = None,
    ) -> None:
        self._storage = storage
        self._clock = clock or datetime.now
        self._events_key = events_key or settings.STORAGE_EVENTS_KEY
        self._theme_key = theme_key or settings.STORAGE_THEME_KEY
        self._seed = (
            settings.SEED_SAMPLE_EVENTS if seed_sample_events is None else seed_sample_events
        )

        self._events: list[Event] = []
        self._listeners: list[Listener] = []
        self._last_id = 0

        self.current_date: date = self._today()
        self.view: str = default_view or settings.DEFAULT_VIEW
        self.filters: dict[str, bool] = {t.value: True for t in EventType}
        self.theme: str = default_theme or settings.DEFAULT_THEME

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, callback: Listener) -> None:
        """Register a no-argument callback run after every mutation."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Read the event collection and theme preference from storage.

        Seeds two sample records on first run when enabled. Raises
        StorageError if the stored collection cannot be decoded.
        """
        raw = self._storage.get(self._events_key)
        if raw is not None:
            try:
                records = json.loads(raw)
                self._events = [Event.model_validate(r) for r in records]
            except (json.JSONDecodeError, TypeError, ValidationError) as exc:
                raise StorageError(f"Stored events under {self._events_key!r} are corrupt: {exc}") from exc
            logger.info("Loaded %d events", len(self._events))
        elif self._seed:
            self._events = self._sample_events()
            self._persist()
            logger.info("Seeded %d sample events", len(self._events))
        else:
            self._events = []

        saved_theme = self._storage.get(self._theme_key)
        if saved_theme in THEMES:
            self.theme = saved_theme

    def _persist(self) -> None:
        payload = json.dumps(
            [e.to_json_dict() for e in self._events], ensure_ascii=False
        )
        self._storage.set(self._events_key, payload)

    def _sample_events(self) -> list[Event]:
        today = format_date(self._today())
        meeting = apply_fields(
            default_event(self._new_id(), today),
            {"title": "Team Meeting", "time": "10:00", "note": "Discuss Q4 goals."},
        )
        mockups = apply_fields(
            default_event(self._new_id(), today),
            {"title": "Finish UI Mockups", "type": EventType.TASK.value,
             "note": "Review with design team."},
        )
        return [meeting, mockups]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _today(self) -> date:
        return self._clock().date()

    def _new_id(self) -> str:
        """Millisecond timestamp, bumped when the clock hasn't moved on."""
        candidate = int(self._clock().timestamp() * 1000)
        taken = {e.id for e in self._events}
        candidate = max(candidate, self._last_id + 1)
        while str(candidate) in taken:
            candidate += 1
        self._last_id = candidate
        return str(candidate)

    def _index_of(self, event_id: str) -> int | None:
        for i, event in enumerate(self._events):
            if event.id == event_id:
                return i
        return None

    @property
    def events(self) -> list[Event]:
        """Snapshot of the master records, in creation order."""
        return list(self._events)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, fields: Mapping[str, Any] | None = None) -> Event:
        """Create a record from defaults overlaid with fields. Never fails
        on content; validation is the caller's job."""
        fields = fields or {}
        day = fields.get("date") or format_date(self._today())
        event = apply_fields(default_event(self._new_id(), day), fields)
        if not event.date:
            event.date = day
        if not event.end_date:
            event.end_date = event.date

        self._events.append(event)
        self._persist()
        logger.info("Event created: %s '%s' on %s", event.id, event.title, event.date)
        self._notify()
        return event

    def update(self, event_id: str, fields: Mapping[str, Any]) -> None:
        """Shallow-merge fields over the record. Unknown id is a no-op."""
        index = self._index_of(event_id)
        if index is None:
            logger.debug("update: no event %s, skipping", event_id)
            return

        self._events[index] = apply_fields(self._events[index], fields)
        self._persist()
        logger.info("Event updated: %s", event_id)
        self._notify()

    def delete(self, event_id: str) -> None:
        """Remove the record and every occurrence derived from it."""
        before = len(self._events)
        self._events = [e for e in self._events if e.id != event_id]
        if len(self._events) < before:
            logger.info("Event deleted: %s", event_id)
        else:
            logger.debug("delete: no event %s", event_id)
        self._persist()
        self._notify()

    def get_by_id(self, event_id: str) -> Event | None:
        index = self._index_of(event_id)
        if index is None:
            return None
        return self._events[index]

    def append_discussion_message(self, event_id: str, sender: str, text: str) -> None:
        """Append a timestamped message to the record's discussion thread."""
        event = self.get_by_id(event_id)
        if event is None:
            logger.debug("append_discussion_message: no event %s, skipping", event_id)
            return

        event.discussion.append(
            DiscussionMessage(
                sender=sender,
                message=text,
                timestamp=self._clock().isoformat(timespec="seconds"),
            )
        )
        self._persist()
        logger.info("Discussion message on %s from %s", event_id, sender)
        self._notify()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def occurrences_for_date(self, day: str | date) -> list[Occurrence]:
        """Visible occurrences on day under the current type filters."""
        return occurrences_for_date(self._events, day, self.filters)

    # ------------------------------------------------------------------
    # View state
    # ------------------------------------------------------------------

    def set_date(self, day: str | date) -> None:
        self.current_date = parse_date(day)
        self._notify()

    def go_today(self) -> None:
        self.set_date(self._today())

    def set_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view!r}")
        self.view = view
        self._notify()

    def navigate(self, direction: int) -> None:
        """Step the current date by one month or one week (direction = +/-1)."""
        if self.view == "month":
            self.current_date = add_months(self.current_date, direction)
        else:
            self.current_date = add_days(self.current_date, 7 * direction)
        self._notify()

    def toggle_filter(self, event_type: str, visible: bool) -> None:
        self.filters[event_type] = visible
        self._notify()

    def toggle_theme(self) -> None:
        """Flip dark/light and persist the preference."""
        self.theme = "light" if self.theme == "dark" else "dark"
        self._storage.set(self._theme_key, self.theme)
        self._notify()
