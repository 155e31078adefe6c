"""
PocketCal — Invites and sharing.

Pure functions that turn a record into outbound links:
  - a Google Calendar "add event" deep link,
  - a self-referential import link carrying the whole record (minus id)
    as base64 JSON in the ``import`` query parameter,
  - mailto:/sms: invitations that bundle both links for a participant.

The inverse, decoding an import link into a pre-fill dict, lives here too.
Decoding never commits anything to the store, and a bad payload is logged
and ignored.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any
from urllib.parse import parse_qs, quote, urlsplit

from pocketcal.config import settings
from pocketcal.data.models import Event, Participant

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_BASE = "https://calendar.google.com/calendar/render?action=TEMPLATE"
MAPS_SEARCH_BASE = "https://www.google.com/maps/search/?api=1"
IMPORT_PARAM = "import"

# Characters encodeURIComponent leaves alone.
_URI_SAFE = "-_.!~*'()"

# Keys that only make sense inside one local store.
_LOCAL_ONLY_KEYS = ("id", "_occurrenceIndex")


def _encode(value: str) -> str:
    return quote(value, safe=_URI_SAFE)


def _parse_hhmm(value: str) -> tuple[int, int] | None:
    try:
        parsed = datetime.strptime(value.strip()[:5], "%H:%M")
    except ValueError:
        return None
    return parsed.hour, parsed.minute


def google_calendar_url(event: Event) -> str:
    """Build a Google Calendar template link.

    Untimed records use ``YYYYMMDD/YYYYMMDD``. Timed records get a one-hour
    slot starting at ``event.time``.
    """
    day = event.date.replace("-", "")
    dates = f"{day}/{day}"

    hm = _parse_hhmm(event.time) if event.time else None
    if hm is not None:
        start = datetime.strptime(day, "%Y%m%d").replace(hour=hm[0], minute=hm[1])
        end = start + timedelta(hours=1)
        dates = f"{start:%Y%m%dT%H%M}00/{end:%Y%m%dT%H%M}00"

    url = f"{GOOGLE_CALENDAR_BASE}&text={_encode(event.title)}&dates={dates}"
    if event.location:
        url += f"&location={_encode(event.location)}"
    if event.note:
        url += f"&details={_encode(event.note)}"
    return url


def maps_search_url(location: str) -> str:
    return f"{MAPS_SEARCH_BASE}&query={_encode(location)}"


# ---------------------------------------------------------------------------
# Import payloads
# ---------------------------------------------------------------------------


def _export_dict(event: Event | Mapping[str, Any]) -> dict[str, Any]:
    data = event.to_json_dict() if isinstance(event, Event) else dict(event)
    for key in _LOCAL_ONLY_KEYS:
        data.pop(key, None)
    return data


def encode_import_payload(event: Event | Mapping[str, Any]) -> str:
    """Base64 of the record's UTF-8 JSON, without its local id."""
    text = json.dumps(_export_dict(event), ensure_ascii=False, separators=(",", ":"))
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def import_url(event: Event | Mapping[str, Any], base_url: str | None = None) -> str:
    """Self-referential share link: ``{base_url}?import={payload}``."""
    if base_url is None:
        base_url = settings.IMPORT_BASE_URL

    base = base_url.split("?", 1)[0]
    return f"{base}?{IMPORT_PARAM}={quote(encode_import_payload(event), safe='')}"


def decode_import_payload(blob: str) -> dict[str, Any] | None:
    """Decode an import payload into a pre-fill dict (id stripped).

    Returns None, after logging, when the payload is not base64 UTF-8 JSON
    describing an object.
    """
    # Query parsing turns '+' into ' '; undo that before decoding.
    cleaned = blob.strip().replace(" ", "+")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        raw = base64.b64decode(cleaned, validate=True)
        data = json.loads(raw.decode("utf-8"))
    except ValueError as exc:  # also binascii.Error, UnicodeDecodeError, JSONDecodeError
        logger.warning("Failed to import event: %s", exc)
        return None

    if not isinstance(data, dict):
        logger.warning("Failed to import event: payload is %s, not an object", type(data).__name__)
        return None

    for key in _LOCAL_ONLY_KEYS:
        data.pop(key, None)
    return data


def import_prefill_from_url(url: str) -> dict[str, Any] | None:
    """Read the ``import`` parameter of url (or a bare query string).

    Returns None when the parameter is absent or cannot be decoded.
    """
    query = urlsplit(url).query
    if not query and "=" in url and "?" not in url:
        query = url
    values = parse_qs(query).get(IMPORT_PARAM)
    if not values:
        return None
    return decode_import_payload(values[0])


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


def _invitation_lines(participant: Participant, event: Event, date_info: str) -> list[str]:
    lines = [
        f"Hi {participant.name},",
        f"You're invited to: {event.title}",
        f"Date: {date_info}",
    ]
    lines.append(f"At: {event.location}" if event.location else "")
    return lines


def email_invite_url(
    participant: Participant, event: Event, base_url: str | None = None,
) -> str:
    """mailto: link with the invitation and both calendar links."""
    lines = _invitation_lines(participant, event, event.date)
    lines += [
        "",
        f"Add to Google Calendar: {google_calendar_url(event)}",
        "",
        f"Import to PocketCal: {import_url(event, base_url)}",
    ]
    subject = _encode(f"Invitation: {event.title}")
    body = _encode("\n".join(lines))
    return f"mailto:{participant.email}?subject={subject}&body={body}"


def sms_invite_url(
    participant: Participant, event: Event, base_url: str | None = None,
) -> str:
    """sms: link with a shorter invitation text."""
    date_info = event.date
    if event.end_date and event.end_date != event.date:
        date_info += f" to {event.end_date}"
    date_info += " " + ("All Day" if event.is_all_day else event.time)

    lines = _invitation_lines(participant, event, date_info.rstrip())
    lines += [
        "",
        f"Import to App: {import_url(event, base_url)}",
        "",
        f"GCal: {google_calendar_url(event)}",
    ]
    body = _encode("\n".join(lines))
    return f"sms:{participant.phone}?body={body}"
