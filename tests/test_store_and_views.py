"""Tests for tidycal/core/calendar_store.py and tidycal/core/views.py

The store reads and rewrites the whole file on every call, recovers from
unreadable files, and refuses uploads that are not calendars. The views render
the agenda text and the timed-event listing.
"""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from helpers import make_document, make_event
from tidycal.config import StorageSettings
from tidycal.core import CalendarStore, InvalidUpload, list_events, resolve_calendar_file, summarize
from tidycal.domain import CalendarEvent

VALID_UPLOAD = "\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Uploader//EN",
        "BEGIN:VEVENT",
        "UID:u1",
        "SUMMARY:Imported",
        "DTSTART:20250604T100000",
        "DTEND:20250604T110000",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
)


REPEATED_RRULE = "\n".join(
    [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Uploader//EN",
        "BEGIN:VEVENT",
        "UID:keep",
        "SUMMARY:Keep me",
        "DTSTART:20250603T100000",
        "DTEND:20250603T110000",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:twice",
        "SUMMARY:Twice",
        "DTSTART:20250605T080000",
        "DTEND:20250605T083000",
        "RRULE:FREQ=DAILY",
        "RRULE:FREQ=WEEKLY",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
)


class TestCalendarStore:
    """Tests for whole-document persistence."""

    def test_missing_file_loads_empty_document(self, calendar_path):
        document = CalendarStore(calendar_path).load()

        assert document.events == []
        assert not calendar_path.exists()

    def test_malformed_file_recovers_as_empty(self, calendar_path):
        calendar_path.write_text("garbage", encoding="utf-8")

        assert CalendarStore(calendar_path).load().events == []

    def test_undecodable_bytes_recover_as_empty(self, calendar_path):
        calendar_path.write_bytes(VALID_UPLOAD.replace("SUMMARY:Imported", "SUMMARY:Caf\xe9").encode("latin-1"))

        assert CalendarStore(calendar_path).load().events == []

    def test_repeated_property_keeps_other_events(self, calendar, calendar_path):
        """An event with two RRULE lines must not take the rest of the calendar down with it."""
        calendar_path.write_text(REPEATED_RRULE, encoding="utf-8")

        calendar.create_event(date(2025, 6, 4), time(9, 0), title="New")
        text = calendar_path.read_text(encoding="utf-8")

        assert "SUMMARY:Keep me" in text
        assert "SUMMARY:Twice" in text
        assert "SUMMARY:New" in text
        assert [event.title for event in CalendarStore(calendar_path).load().events] == ["Keep me", "Twice", "New"]

    def test_save_then_load(self, calendar_path):
        store = CalendarStore(calendar_path)
        store.save(make_document(make_event("Standup", datetime(2025, 6, 2, 9, 0))))

        assert [event.title for event in store.load().events] == ["Standup"]

    def test_mutate_saves_only_on_change(self, calendar_path):
        calendar_path.write_text(VALID_UPLOAD, encoding="utf-8")
        before = calendar_path.read_bytes()

        result = CalendarStore(calendar_path).mutate(lambda document: False)

        assert result is False
        assert calendar_path.read_bytes() == before

    def test_invalid_upload_leaves_file_untouched(self, calendar_path):
        calendar_path.write_text(VALID_UPLOAD, encoding="utf-8")
        store = CalendarStore(calendar_path)

        with pytest.raises(InvalidUpload):
            store.replace_whole_document("not a calendar")

        assert store.read_raw_document() == VALID_UPLOAD

    def test_upload_is_stored_verbatim(self, calendar_path):
        store = CalendarStore(calendar_path)
        store.replace_whole_document(VALID_UPLOAD)

        assert calendar_path.read_text(encoding="utf-8") == VALID_UPLOAD
        assert store.load().events[0].title == "Imported"

    def test_read_raw_document_of_missing_file_is_empty(self, calendar_path):
        assert CalendarStore(calendar_path).read_raw_document() == ""


class TestResolveCalendarFile:
    def test_prefers_existing_configured_file(self, tmp_path):
        configured = tmp_path / "resources" / "calendar.ics"
        configured.parent.mkdir()
        configured.write_text(VALID_UPLOAD, encoding="utf-8")
        storage = StorageSettings(calendar_file=configured, data_dir=tmp_path / "data")

        assert resolve_calendar_file(storage) == configured

    def test_falls_back_to_data_dir(self, tmp_path):
        storage = StorageSettings(calendar_file=tmp_path / "missing.ics", data_dir=tmp_path / "data")

        assert resolve_calendar_file(storage) == tmp_path / "data" / "calendar.ics"
        assert (tmp_path / "data").is_dir()


class TestViews:
    """Tests for the read-side renderings."""

    def test_summary_groups_by_day(self):
        document = make_document(
            make_event("Lunch", datetime(2025, 6, 2, 12, 0), 30),
            make_event("Standup", datetime(2025, 6, 2, 9, 0), 15),
            CalendarEvent(uid="h", title="Holiday", start=date(2025, 6, 3), end=date(2025, 6, 4)),
        )

        assert summarize(document) == (
            "Calendar summary:\n"
            "\n"
            "2025-06-02\n"
            "  09:00-09:15 Standup\n"
            "  12:00-12:30 Lunch\n"
            "\n"
            "2025-06-03\n"
            "  (all-day) Holiday\n"
            "\n"
            "Total events: 3\n"
        )

    def test_empty_summary(self):
        assert summarize(make_document()) == "Calendar summary:\n\nTotal events: 0\n"

    def test_list_events_skips_all_day_and_sorts(self):
        document = make_document(
            make_event("Later", datetime(2025, 6, 3, 9, 0)),
            CalendarEvent(uid="h", title="Holiday", start=date(2025, 6, 2), end=date(2025, 6, 3)),
            make_event("Earlier", datetime(2025, 6, 2, 14, 0), 90),
        )

        assert list_events(document) == [
            {"title": "Earlier", "date": "2025-06-02", "start": "14:00", "end": "15:30", "durationMinutes": 90},
            {"title": "Later", "date": "2025-06-03", "start": "09:00", "end": "10:00", "durationMinutes": 60},
        ]
