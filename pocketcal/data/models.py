"""
PocketCal — Data Models.

The master event record and everything it owns (participants, attachments,
discussion, recurrence rule). Records persist as a single JSON array in the
key-value store; the camelCase aliases keep that JSON identical to what the
browser build wrote, so existing data loads unchanged.

JSON example of one stored record:
{
    "id": "1709286000000",
    "title": "Cleaning rota",
    "type": "task",
    "date": "2024-03-01",
    "endDate": "2024-03-01",
    "time": "18:00",
    "endTime": "19:00",
    "isAllDay": false,
    "isRecurring": true,
    "recurrence": {"frequency": "weekly", "endType": "indefinite", "endDate": null},
    "autoRotateTasks": true,
    "participants": [{"name": "Dana", "email": "", "phone": "", "task": "Kitchen"}],
    ...
}
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Record tag; drives filtering and the badge shown next to the title."""

    EVENT = "event"
    TASK = "task"


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class EndType(str, Enum):
    DATE = "date"
    INDEFINITE = "indefinite"


class _Record(BaseModel):
    """Base for stored records: snake_case in Python, camelCase on disk."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Participant(_Record):
    """A person attached to an event. Order in the event's list is significant."""

    name: str
    email: str = ""
    phone: str = ""
    task: str = ""


class Attachment(_Record):
    """A file embedded in the record as a base64 data URI."""

    name: str
    data_url: str
    type: str = ""


class DiscussionMessage(_Record):
    sender: str
    message: str
    timestamp: str  # ISO-8601


class RecurrenceRule(_Record):
    """How a recurring record repeats.

    frequency and end_type stay plain strings: a value outside the known
    enums must load fine and simply never match.
    """

    frequency: str = Frequency.WEEKLY.value
    end_type: str = EndType.INDEFINITE.value
    end_date: str | None = None  # YYYY-MM-DD, only meaningful for end_type "date"


class Event(_Record):
    """Master record for an event or a task, recurring or not."""

    id: str
    title: str = ""
    type: str = EventType.EVENT.value
    date: str                      # YYYY-MM-DD, local calendar
    end_date: str = ""             # YYYY-MM-DD, empty means same as date
    time: str = ""                 # HH:MM, empty when untimed or all-day
    end_time: str = ""
    is_all_day: bool = False
    note: str = ""
    location: str = ""
    is_recurring: bool = False
    recurrence: RecurrenceRule | None = None
    auto_rotate_tasks: bool = False
    enable_discussion: bool = False
    discussion: list[DiscussionMessage] = Field(default_factory=list)
    participants: list[Participant] = Field(default_factory=list)
    attachments: list[Attachment] = Field(default_factory=list)

    def to_json_dict(self) -> dict[str, Any]:
        """Storage/export shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)


class Occurrence(Event):
    """Read-only view of an Event on one calendar date. Never persisted."""

    occurrence_index: int = Field(default=0, alias="_occurrenceIndex")


# ---------------------------------------------------------------------------
# Default record + field overrides
# ---------------------------------------------------------------------------

# Accept both spellings: "endDate" and "end_date" both map to end_date.
_FIELD_NAMES: dict[str, str] = {}
for _name in Event.model_fields:
    _FIELD_NAMES[_name] = _name
    _FIELD_NAMES[to_camel(_name)] = _name


def default_event(event_id: str, day: str) -> Event:
    """Return a fresh record with every default spelled out."""
    return Event(
        id=event_id,
        title="",
        type=EventType.EVENT.value,
        date=day,
        end_date=day,
        time="",
        end_time="",
        is_all_day=False,
        note="",
        location="",
        is_recurring=False,
        recurrence=None,
        auto_rotate_tasks=False,
        enable_discussion=False,
        discussion=[],
        participants=[],
        attachments=[],
    )


def normalize_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Map caller-supplied keys (either spelling) to attribute names.

    Unknown keys are dropped.
    """
    normalized: dict[str, Any] = {}
    for key, value in fields.items():
        name = _FIELD_NAMES.get(key)
        if name is not None:
            normalized[name] = value
    return normalized


def apply_fields(event: Event, fields: Mapping[str, Any]) -> Event:
    """Shallow-merge fields over event. Provided fields win; id never changes."""
    merged = event.model_dump()
    for name, value in normalize_fields(fields).items():
        if name == "id":
            continue
        merged[name] = value
    return Event.model_validate(merged)
