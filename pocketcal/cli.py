"""
PocketCal — Command-line front end.

Wires settings, storage, the event store and the text presenter together.
Every command loads the store once and applies at most one mutation;
`show` draws the calendar through the text presenter.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import TextIO

from pocketcal.adapters.storage_factory import create_storage
from pocketcal.adapters.text_presenter import TextPresenter
from pocketcal.core.dates import format_date, parse_date
from pocketcal.core.drafts import DraftValidationError, EventDraft
from pocketcal.core.event_store import VIEWS, EventStore
from pocketcal.core.invites import google_calendar_url, import_prefill_from_url, import_url
from pocketcal.data.models import EndType, EventType, Frequency, Participant
from pocketcal.ports.presenter_port import PresenterPort
from pocketcal.ports.storage_port import StorageError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pocketcal",
        description="Personal calendar with recurring events and rotating tasks.",
    )
    parser.add_argument("--db", default=None, help="SQLite file (overrides DATABASE_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    p_show = sub.add_parser("show", help="Draw the month or week around a date")
    p_show.add_argument("--date", type=parse_date, default=None, help="YYYY-MM-DD (default: today)")
    p_show.add_argument("--view", choices=VIEWS, default=None)
    p_show.add_argument("--hide", action="append", default=[], choices=[t.value for t in EventType],
                        help="Hide a record type (repeatable)")

    p_add = sub.add_parser("add", help="Create an event or task")
    p_add.add_argument("title")
    p_add.add_argument("--date", type=parse_date, required=True, help="YYYY-MM-DD")
    p_add.add_argument("--end-date", type=parse_date, default=None)
    p_add.add_argument("--time", default="", help="HH:MM")
    p_add.add_argument("--end-time", default="")
    p_add.add_argument("--all-day", action="store_true")
    p_add.add_argument("--type", choices=[t.value for t in EventType], default=EventType.EVENT.value)
    p_add.add_argument("--note", default="")
    p_add.add_argument("--location", default="")
    p_add.add_argument("--repeat", choices=[f.value for f in Frequency], default=None)
    p_add.add_argument("--until", type=parse_date, default=None, help="Last date of a recurring series")
    p_add.add_argument("--participant", action="append", default=[],
                       help="NAME or NAME:TASK (repeatable, order matters for rotation)")
    p_add.add_argument("--rotate", action="store_true", help="Rotate tasks across occurrences")
    p_add.add_argument("--discussion", action="store_true", help="Enable the discussion thread")
    p_add.add_argument("--attach", action="append", default=[], help="File to attach (repeatable)")

    p_delete = sub.add_parser("delete", help="Delete a record and all its occurrences")
    p_delete.add_argument("id")

    p_comment = sub.add_parser("comment", help="Append a discussion message")
    p_comment.add_argument("id")
    p_comment.add_argument("sender")
    p_comment.add_argument("text")

    p_share = sub.add_parser("share", help="Print Google Calendar and import links")
    p_share.add_argument("id")

    p_import = sub.add_parser("import", help="Decode an import link")
    p_import.add_argument("url")
    p_import.add_argument("--save", action="store_true", help="Create the decoded record")

    sub.add_parser("theme", help="Toggle dark/light theme")
    return parser


def _parse_participant(raw: str) -> Participant:
    name, _, task = raw.partition(":")
    return Participant(name=name.strip(), task=task.strip())


def _draft_from_args(args: argparse.Namespace) -> EventDraft:
    draft = EventDraft(
        date=format_date(args.date),
        title=args.title,
        type=args.type,
        end_date=format_date(args.end_date or args.date),
        time=args.time,
        end_time=args.end_time,
        is_all_day=args.all_day,
        note=args.note,
        location=args.location,
        enable_discussion=args.discussion,
        is_recurring=args.repeat is not None,
        frequency=args.repeat or Frequency.WEEKLY.value,
        end_type=EndType.DATE.value if args.until else EndType.INDEFINITE.value,
        recurrence_end_date=format_date(args.until) if args.until else "",
        auto_rotate_tasks=args.rotate,
    )
    for raw in args.participant:
        participant = _parse_participant(raw)
        if participant.name:
            draft.participants.append(participant)
    return draft


def run(argv: list[str] | None = None, out: TextIO | None = None) -> int:
    """Execute one command. Returns the process exit code."""
    out = out or sys.stdout
    args = build_parser().parse_args(argv)

    try:
        store = EventStore(create_storage(db_path=args.db))
        store.load()
    except StorageError as exc:
        logger.error("Storage unavailable: %s", exc)
        return 1

    presenter: PresenterPort = TextPresenter(store, out=out, subscribe=False)

    try:
        if args.command == "show":
            if args.view:
                store.set_view(args.view)
            for hidden in args.hide:
                store.toggle_filter(hidden, False)
            if args.date:
                store.set_date(args.date)
            presenter.render()

        elif args.command == "add":
            draft = _draft_from_args(args)
            if args.attach:
                asyncio.run(draft.add_attachments(args.attach))
            draft.validate()
            event = store.create(draft.to_fields())
            out.write(f"Created {event.id}\n")

        elif args.command == "delete":
            if store.get_by_id(args.id) is None:
                out.write(f"No event {args.id}\n")
            store.delete(args.id)

        elif args.command == "comment":
            store.append_discussion_message(args.id, args.sender, args.text)

        elif args.command == "share":
            event = store.get_by_id(args.id)
            if event is None:
                out.write(f"No event {args.id}\n")
                return 1
            out.write(f"Google Calendar: {google_calendar_url(event)}\n")
            out.write(f"Import link: {import_url(event)}\n")

        elif args.command == "import":
            prefill = import_prefill_from_url(args.url)
            if prefill is None:
                out.write("Nothing to import.\n")
                return 1
            out.write(json.dumps(prefill, indent=2, ensure_ascii=False) + "\n")
            if args.save:
                draft = EventDraft.from_event(prefill)
                draft.validate()
                event = store.create(draft.to_fields())
                out.write(f"Created {event.id}\n")

        elif args.command == "theme":
            store.toggle_theme()
            out.write(f"Theme: {store.theme}\n")

    except (DraftValidationError, OSError) as exc:
        out.write(f"Error: {exc}\n")
        return 2
    except StorageError as exc:
        logger.error("Storage failure: %s", exc)
        return 1

    return 0


def main() -> None:
    sys.exit(run())
