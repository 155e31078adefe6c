"""
PocketCal — Editing drafts.

The temporary buffer behind the create/edit flow. A draft collects
participants and attachments before anything reaches the event store, and
turns itself into the field dict that EventStore.create/update expect.

Attachment ingestion is the only async path in the project: files are read
concurrently, converted to data URIs, and appended in the order given once
all of them have finished.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from pocketcal.core.dates import format_date, parse_date
from pocketcal.data.models import (
    Attachment,
    EndType,
    Event,
    EventType,
    Frequency,
    Participant,
    apply_fields,
    default_event,
)

logger = logging.getLogger(__name__)

_FALLBACK_MIME = "application/octet-stream"


class DraftValidationError(ValueError):
    """Raised when a draft is not fit to be saved."""


def _parse_field(value: str, label: str):
    """Parse a zero-padded YYYY-MM-DD draft field or reject it."""
    message = f"{label} must be YYYY-MM-DD, got {value!r}."
    try:
        day = parse_date(value)
    except ValueError as exc:
        raise DraftValidationError(message) from exc
    if format_date(day) != value:
        raise DraftValidationError(message)
    return day


async def read_attachment(path: str | Path) -> Attachment:
    """Read one file into an Attachment with a base64 data URI."""
    file_path = Path(path)
    content = await asyncio.to_thread(file_path.read_bytes)
    mime = mimetypes.guess_type(file_path.name)[0] or ""
    encoded = base64.b64encode(content).decode("ascii")
    return Attachment(
        name=file_path.name,
        data_url=f"data:{mime or _FALLBACK_MIME};base64,{encoded}",
        type=mime,
    )


async def read_attachments(paths: Iterable[str | Path]) -> list[Attachment]:
    """Read several files concurrently; result order matches input order."""
    return list(await asyncio.gather(*(read_attachment(p) for p in paths)))


@dataclass
class EventDraft:
    """Unsaved state of the create/edit form."""

    date: str
    event_id: str | None = None
    title: str = ""
    type: str = EventType.EVENT.value
    end_date: str = ""
    time: str = ""
    end_time: str = ""
    is_all_day: bool = False
    note: str = ""
    location: str = ""
    enable_discussion: bool = False
    is_recurring: bool = False
    frequency: str = Frequency.WEEKLY.value
    end_type: str = EndType.INDEFINITE.value
    recurrence_end_date: str = ""
    auto_rotate_tasks: bool = False
    participants: list[Participant] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    on_change: Callable[[], None] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_event(
        cls,
        source: Event | Mapping[str, Any],
        on_change: Callable[[], None] | None = None,
    ) -> EventDraft:
        """Start a draft from a stored record (edit) or an import pre-fill.

        A mapping never carries an id into the draft, so saving it creates
        a new record. Raises DraftValidationError when the mapping holds
        values of the wrong shape.
        """
        if isinstance(source, Event):
            event, event_id = source, source.id
        else:
            day = str(source.get("date") or "")
            try:
                event = apply_fields(default_event("", day), source)
            except ValidationError as exc:
                raise DraftValidationError(f"Invalid event data: {exc.error_count()} bad field(s).") from exc
            event_id = None

        rule = event.recurrence
        return cls(
            date=event.date,
            event_id=event_id,
            title=event.title,
            type=event.type,
            end_date=event.end_date or event.date,
            time=event.time,
            end_time=event.end_time,
            is_all_day=event.is_all_day,
            note=event.note,
            location=event.location,
            enable_discussion=event.enable_discussion,
            is_recurring=event.is_recurring,
            frequency=rule.frequency if rule else Frequency.WEEKLY.value,
            end_type=rule.end_type if rule else EndType.INDEFINITE.value,
            recurrence_end_date=(rule.end_date or "") if rule else "",
            auto_rotate_tasks=event.auto_rotate_tasks,
            participants=[p.model_copy() for p in event.participants],
            attachments=[a.model_copy() for a in event.attachments],
            on_change=on_change,
        )

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    # -- participants ------------------------------------------------------

    def add_participant(self, name: str) -> Participant | None:
        """Append a participant; blank names are ignored."""
        if not name.strip():
            return None
        participant = Participant(name=name.strip())
        self.participants.append(participant)
        self._changed()
        return participant

    def remove_participant(self, index: int) -> None:
        del self.participants[index]
        self._changed()

    def should_offer_auto_rotate(self) -> bool:
        """Rotation only makes sense for recurring drafts with assigned tasks."""
        return self.is_recurring and any(p.task.strip() for p in self.participants)

    # -- attachments -------------------------------------------------------

    async def add_attachments(self, paths: Iterable[str | Path]) -> list[Attachment]:
        """Read all files, append them in input order, refresh once."""
        attachments = await read_attachments(paths)
        self.attachments.extend(attachments)
        logger.debug("Draft attachments: +%d (total %d)", len(attachments), len(self.attachments))
        self._changed()
        return attachments

    def remove_attachment(self, index: int) -> None:
        del self.attachments[index]
        self._changed()

    # -- save --------------------------------------------------------------

    def validate(self) -> None:
        """Raise DraftValidationError if the draft cannot be saved."""
        if not self.title.strip():
            raise DraftValidationError("Title is required.")
        if not self.date:
            raise DraftValidationError("Start date is required.")
        start = _parse_field(self.date, "Start date")
        if self.end_date and _parse_field(self.end_date, "End date") < start:
            raise DraftValidationError("End date cannot be before start date.")
        if self.is_recurring and self.recurrence_end_date:
            _parse_field(self.recurrence_end_date, "Repeat end date")

    def to_fields(self) -> dict[str, Any]:
        """Field dict for EventStore.create / EventStore.update."""
        recurrence = None
        if self.is_recurring:
            recurrence = {
                "frequency": self.frequency,
                "end_type": self.end_type,
                "end_date": self.recurrence_end_date or None,
            }

        return {
            "title": self.title,
            "type": self.type,
            "date": self.date,
            "end_date": self.end_date or self.date,
            "is_all_day": self.is_all_day,
            "time": "" if self.is_all_day else self.time,
            "end_time": "" if self.is_all_day else self.end_time,
            "note": self.note,
            "location": self.location.strip(),
            "enable_discussion": self.enable_discussion,
            "participants": [
                Participant(name=p.name, email=p.email or "", phone=p.phone or "", task=p.task or "")
                for p in self.participants
            ],
            "is_recurring": self.is_recurring,
            "recurrence": recurrence,
            "auto_rotate_tasks": self.auto_rotate_tasks,
            "attachments": [a.model_copy() for a in self.attachments],
        }
