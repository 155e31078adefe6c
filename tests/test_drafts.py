"""Tests for pocketcal.core.drafts — the editing buffer and attachment ingestion."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from pocketcal.core.drafts import (
    DraftValidationError,
    EventDraft,
    read_attachment,
    read_attachments,
)
from pocketcal.data.models import Attachment, Participant, apply_fields, default_event


class TestParticipants:
    def test_add_trims_name(self):
        draft = EventDraft(date="2024-03-05")
        draft.add_participant("  Dana  ")
        assert [p.name for p in draft.participants] == ["Dana"]
        assert draft.participants[0].task == ""

    def test_blank_names_ignored(self):
        on_change = MagicMock()
        draft = EventDraft(date="2024-03-05", on_change=on_change)
        assert draft.add_participant("   ") is None
        assert draft.participants == []
        on_change.assert_not_called()

    def test_add_and_remove_refresh(self):
        on_change = MagicMock()
        draft = EventDraft(date="2024-03-05", on_change=on_change)
        draft.add_participant("Dana")
        draft.add_participant("Eli")
        draft.remove_participant(0)
        assert [p.name for p in draft.participants] == ["Eli"]
        assert on_change.call_count == 3


class TestAutoRotateOffer:
    def test_recurring_with_task(self):
        draft = EventDraft(date="2024-03-05", is_recurring=True,
                           participants=[Participant(name="Dana", task="Dishes")])
        assert draft.should_offer_auto_rotate() is True

    def test_one_time(self):
        draft = EventDraft(date="2024-03-05", participants=[Participant(name="Dana", task="Dishes")])
        assert draft.should_offer_auto_rotate() is False

    def test_blank_tasks(self):
        draft = EventDraft(date="2024-03-05", is_recurring=True,
                           participants=[Participant(name="Dana", task="  ")])
        assert draft.should_offer_auto_rotate() is False


class TestValidate:
    def test_valid(self):
        EventDraft(date="2024-03-05", title="Ok", end_date="2024-03-05").validate()

    def test_blank_title(self):
        with pytest.raises(DraftValidationError, match="Title"):
            EventDraft(date="2024-03-05", title="  ").validate()

    def test_end_before_start(self):
        draft = EventDraft(date="2024-03-05", title="Trip", end_date="2024-03-04")
        with pytest.raises(DraftValidationError, match="End date cannot be before start date"):
            draft.validate()

    @pytest.mark.parametrize("bad", ["2024-3-5", "05/03/2024", "2024-02-30", "soon"])
    def test_malformed_start_date(self, bad):
        with pytest.raises(DraftValidationError, match="Start date must be YYYY-MM-DD"):
            EventDraft(date=bad, title="Dentist").validate()

    def test_malformed_end_date(self):
        draft = EventDraft(date="2024-03-05", title="Trip", end_date="2024-3-7")
        with pytest.raises(DraftValidationError, match="End date must be YYYY-MM-DD"):
            draft.validate()

    def test_malformed_repeat_end_date(self):
        draft = EventDraft(date="2024-03-05", title="Gym", is_recurring=True,
                           end_type="date", recurrence_end_date="next year")
        with pytest.raises(DraftValidationError, match="Repeat end date"):
            draft.validate()


class TestToFields:
    def test_one_time_has_no_recurrence(self):
        fields = EventDraft(date="2024-03-05", title="A").to_fields()
        assert fields["is_recurring"] is False
        assert fields["recurrence"] is None
        assert fields["end_date"] == "2024-03-05"

    def test_recurring_rule(self):
        draft = EventDraft(date="2024-03-05", title="A", is_recurring=True,
                           frequency="monthly", end_type="date", recurrence_end_date="2024-12-31")
        assert draft.to_fields()["recurrence"] == {
            "frequency": "monthly", "end_type": "date", "end_date": "2024-12-31",
        }

    def test_indefinite_rule_has_no_end_date(self):
        draft = EventDraft(date="2024-03-05", title="A", is_recurring=True, frequency="daily")
        assert draft.to_fields()["recurrence"]["end_date"] is None

    def test_all_day_clears_times(self):
        draft = EventDraft(date="2024-03-05", title="A", is_all_day=True,
                           time="09:00", end_time="10:00")
        fields = draft.to_fields()
        assert fields["time"] == ""
        assert fields["end_time"] == ""

    def test_location_trimmed(self):
        assert EventDraft(date="2024-03-05", location="  Park ").to_fields()["location"] == "Park"

    def test_saves_through_store(self, store):
        draft = EventDraft(date="2024-03-05", title="Rota", is_recurring=True,
                           frequency="weekly", auto_rotate_tasks=True)
        draft.add_participant("Dana")
        draft.participants[0].task = "Kitchen"
        event = store.create(draft.to_fields())
        saved = store.get_by_id(event.id)
        assert saved.recurrence.frequency == "weekly"
        assert saved.recurrence.end_type == "indefinite"
        assert saved.participants == [Participant(name="Dana", task="Kitchen")]


class TestFromEvent:
    def test_edit_existing_keeps_id(self):
        event = apply_fields(default_event("42", "2024-03-05"), {
            "title": "Rota", "isRecurring": True,
            "recurrence": {"frequency": "daily", "endType": "date", "endDate": "2024-04-01"},
            "participants": [{"name": "Dana", "task": "Kitchen"}],
        })
        draft = EventDraft.from_event(event)
        assert draft.event_id == "42"
        assert draft.frequency == "daily"
        assert draft.end_type == "date"
        assert draft.recurrence_end_date == "2024-04-01"
        draft.participants[0].task = "Bins"
        assert event.participants[0].task == "Kitchen"

    def test_prefill_mapping_has_no_id(self):
        prefill = {"title": "Picnic", "date": "2024-06-01", "endDate": "2024-06-02",
                   "participants": [{"name": "Noa"}]}
        draft = EventDraft.from_event(prefill)
        assert draft.event_id is None
        assert draft.title == "Picnic"
        assert draft.end_date == "2024-06-02"
        assert draft.is_recurring is False
        assert [p.name for p in draft.participants] == ["Noa"]

    def test_wrong_shaped_prefill_rejected(self):
        prefill = {"title": "X", "date": "2024-03-01", "participants": "oops"}
        with pytest.raises(DraftValidationError, match="Invalid event data"):
            EventDraft.from_event(prefill)


class TestAttachments:
    @pytest.mark.asyncio
    async def test_read_attachment_data_uri(self, tmp_path):
        path = tmp_path / "note.txt"
        path.write_text("hello")
        attachment = await read_attachment(path)
        assert attachment.name == "note.txt"
        assert attachment.type == "text/plain"
        assert attachment.data_url == "data:text/plain;base64,aGVsbG8="

    @pytest.mark.asyncio
    async def test_unknown_extension(self, tmp_path):
        path = tmp_path / "blob.zzqx"
        path.write_bytes(b"\x00\x01")
        attachment = await read_attachment(path)
        assert attachment.type == ""
        assert attachment.data_url == "data:application/octet-stream;base64,AAE="

    @pytest.mark.asyncio
    async def test_read_attachments_preserves_order(self, tmp_path):
        paths = []
        for name in ("c.txt", "a.txt", "b.txt"):
            p = tmp_path / name
            p.write_text(name)
            paths.append(p)
        result = await read_attachments(paths)
        assert [a.name for a in result] == ["c.txt", "a.txt", "b.txt"]

    @pytest.mark.asyncio
    async def test_add_attachments_waits_for_all_and_refreshes_once(self):
        finished = []

        async def fake_read(path):
            # First file finishes last
            await asyncio.sleep(0.02 if path == "slow.pdf" else 0)
            finished.append(path)
            return Attachment(name=path, data_url="data:,", type="")

        on_change = MagicMock()
        draft = EventDraft(date="2024-03-05", on_change=on_change)
        with patch("pocketcal.core.drafts.read_attachment", side_effect=fake_read):
            added = await draft.add_attachments(["slow.pdf", "fast.png"])

        assert finished == ["fast.png", "slow.pdf"]
        assert [a.name for a in added] == ["slow.pdf", "fast.png"]
        assert [a.name for a in draft.attachments] == ["slow.pdf", "fast.png"]
        on_change.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        draft = EventDraft(date="2024-03-05")
        with pytest.raises(FileNotFoundError):
            await draft.add_attachments([tmp_path / "nope.txt"])
        assert draft.attachments == []

    def test_remove_attachment(self):
        draft = EventDraft(date="2024-03-05",
                           attachments=[Attachment(name="a", data_url="data:,"),
                                        Attachment(name="b", data_url="data:,")])
        draft.remove_attachment(0)
        assert [a.name for a in draft.attachments] == ["b"]
