"""Tests for tidycal/core/ics_codec.py

The codec turns iCalendar text into owned event records and back. It must keep
title, start, end and recurrence intact across a rewrite, carry unrelated
components through untouched, and reject text that is not a calendar.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from helpers import make_document, make_event
from tidycal.core import MalformedDocument, decode_calendar, encode_calendar

ZONED_DOCUMENT = "\r\n".join(
    [
        "BEGIN:VCALENDAR",
        "PRODID:-//Example Corp//Planner//EN",
        "VERSION:2.0",
        "BEGIN:VTIMEZONE",
        "TZID:Europe/Berlin",
        "BEGIN:STANDARD",
        "DTSTART:19701025T030000",
        "TZOFFSETFROM:+0200",
        "TZOFFSETTO:+0100",
        "END:STANDARD",
        "END:VTIMEZONE",
        "BEGIN:VEVENT",
        "UID:zoned-1@example.com",
        "SUMMARY:Review",
        "DTSTART;TZID=Europe/Berlin:20250603T140000",
        "DTEND;TZID=Europe/Berlin:20250603T150000",
        "LOCATION:Room 4",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:holiday@example.com",
        "SUMMARY:Holiday",
        "DTSTART;VALUE=DATE:20250609",
        "DTEND;VALUE=DATE:20250610",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:duration@example.com",
        "SUMMARY:Focus",
        "DTSTART:20250604T090000",
        "DURATION:PT90M",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:open-ended@example.com",
        "SUMMARY:Ping",
        "DTSTART:20250605T090000",
        "END:VEVENT",
        "END:VCALENDAR",
        "",
    ]
)


class TestRoundTrip:
    """Encoding then decoding keeps the owned event fields."""

    def test_preserves_title_start_end_and_recurrence(self):
        """Should survive a write/read cycle unchanged."""
        original = make_document(
            make_event("Standup", datetime(2025, 6, 2, 9, 0), 30, rrule="FREQ=DAILY"),
            make_event("Lunch, with team", datetime(2025, 6, 2, 12, 0), 45),
        )

        decoded = decode_calendar(encode_calendar(original))

        assert [(e.title, e.start, e.end, e.rrule) for e in decoded.events] == [
            ("Standup", datetime(2025, 6, 2, 9, 0), datetime(2025, 6, 2, 9, 30), "FREQ=DAILY"),
            ("Lunch, with team", datetime(2025, 6, 2, 12, 0), datetime(2025, 6, 2, 12, 45), None),
        ]
        assert [e.uid for e in decoded.events] == [e.uid for e in original.events]

    def test_writes_floating_times_without_tzid(self):
        """Floating times are written without a TZID parameter."""
        text = encode_calendar(make_document(make_event("Standup", datetime(2025, 6, 2, 9, 0))))

        assert "DTSTART:20250602T090000" in text
        assert "TZID" not in text

    def test_writes_preamble(self):
        text = encode_calendar(make_document())

        assert text.startswith("BEGIN:VCALENDAR")
        assert "PRODID:-//Tidy Calendar//Planner//EN" in text
        assert "VERSION:2.0" in text
        assert "CALSCALE:GREGORIAN" in text


class TestDecode:
    """Decoding uploaded documents."""

    def test_zoned_times_keep_wall_clock(self):
        """Should drop the zone and keep 14:00 local time."""
        document = decode_calendar(ZONED_DOCUMENT)
        review = document.events[0]

        assert review.start == datetime(2025, 6, 3, 14, 0)
        assert review.start.tzinfo is None
        assert review.end == datetime(2025, 6, 3, 15, 0)

    def test_date_only_events_are_all_day(self):
        holiday = decode_calendar(ZONED_DOCUMENT).events[1]

        assert holiday.all_day is True
        assert holiday.start == date(2025, 6, 9)
        assert holiday.schedulable is False

    def test_end_falls_back_to_duration_then_default(self):
        """DURATION supplies the end; without it, the default duration applies."""
        events = decode_calendar(ZONED_DOCUMENT, default_duration=timedelta(minutes=60)).events

        assert events[2].end == datetime(2025, 6, 4, 10, 30)
        assert events[3].end == datetime(2025, 6, 5, 10, 0)

    def test_keeps_document_prodid(self):
        assert decode_calendar(ZONED_DOCUMENT).prodid == "-//Example Corp//Planner//EN"

    def test_carries_other_components_through_rewrite(self):
        """VTIMEZONE and unowned event properties survive a rewrite."""
        text = encode_calendar(decode_calendar(ZONED_DOCUMENT))

        assert "BEGIN:VTIMEZONE" in text
        assert "TZID:Europe/Berlin" in text
        assert "LOCATION:Room 4" in text

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "this is not a calendar", "BEGIN:VEVENT\r\nUID:x\r\nEND:VEVENT\r\n"],
    )
    def test_rejects_non_calendar_text(self, text):
        with pytest.raises(MalformedDocument):
            decode_calendar(text)
