"""Tests for tidycal/core/mutators.py and tidycal/core/matcher.py

Events are addressed by title (case-insensitive) and start to the minute.
Creation fills in defaults; moves keep the duration; misses report False
without touching the document.
"""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from helpers import make_document, make_event
from tidycal.core import create_event, delete, find_event, find_index, resize, update_start
from tidycal.domain import DEFAULT_EVENT_TITLE, EventKey, Recurrence


class TestMatching:
    """Tests for the title/start event key."""

    def test_title_match_ignores_case(self):
        document = make_document(make_event("Standup", datetime(2025, 6, 2, 9, 0)))

        assert find_index(document, EventKey.from_parts("STANDUP", date(2025, 6, 2), time(9, 0))) == 0

    def test_start_must_match_to_the_minute(self):
        document = make_document(make_event("Standup", datetime(2025, 6, 2, 9, 0)))

        assert find_event(document, EventKey.from_parts("Standup", date(2025, 6, 2), time(9, 1))) is None

    def test_first_match_wins(self):
        first = make_event("Standup", datetime(2025, 6, 2, 9, 0), uid="first")
        second = make_event("standup", datetime(2025, 6, 2, 9, 0), uid="second")
        document = make_document(first, second)

        assert find_event(document, EventKey.from_parts("Standup", date(2025, 6, 2), time(9, 0))).uid == "first"


class TestCreateEvent:
    """Tests for event creation."""

    def test_creates_recurring_event(self):
        """Empty calendar, 30-minute daily standup."""
        document = make_document()

        event = create_event(
            document,
            start=datetime(2025, 6, 2, 9, 0),
            recurrence=Recurrence.DAILY,
            title="Standup",
            duration_minutes=30,
        )

        assert document.events == [event]
        assert event.rrule == "FREQ=DAILY"
        assert event.end == datetime(2025, 6, 2, 9, 30)

    @pytest.mark.parametrize("minutes", [None, 0, -15])
    def test_non_positive_duration_uses_default(self, minutes):
        event = create_event(make_document(), start=datetime(2025, 6, 2, 9, 0), duration_minutes=minutes)

        assert event.end == datetime(2025, 6, 2, 10, 0)

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_blank_title_gets_default(self, title):
        event = create_event(make_document(), start=datetime(2025, 6, 2, 9, 0), title=title)

        assert event.title == DEFAULT_EVENT_TITLE

    def test_uids_are_unique(self):
        document = make_document()
        first = create_event(document, start=datetime(2025, 6, 2, 9, 0))
        second = create_event(document, start=datetime(2025, 6, 2, 9, 0))

        assert first.uid != second.uid

    def test_non_recurring_has_no_rrule(self):
        event = create_event(make_document(), start=datetime(2025, 6, 2, 9, 0), recurrence=Recurrence.from_label("non-recurring"))

        assert event.rrule is None


class TestUpdateResizeDelete:
    """Tests for the keyed mutations."""

    def test_update_start_keeps_duration(self):
        document = make_document(make_event("Review", datetime(2025, 6, 2, 9, 0), 45))
        key = EventKey.from_parts("review", date(2025, 6, 2), time(9, 0))

        assert update_start(document, key, datetime(2025, 6, 4, 15, 0)) is True
        assert document.events[0].start == datetime(2025, 6, 4, 15, 0)
        assert document.events[0].end == datetime(2025, 6, 4, 15, 45)

    def test_resize_sets_new_end(self):
        document = make_document(make_event("Review", datetime(2025, 6, 2, 9, 0)))
        key = EventKey.from_parts("Review", date(2025, 6, 2), time(9, 0))

        assert resize(document, key, 240) is True
        assert document.events[0].end == datetime(2025, 6, 2, 13, 0)

    def test_delete_removes_first_match(self):
        document = make_document(
            make_event("Review", datetime(2025, 6, 2, 9, 0), uid="a"),
            make_event("Review", datetime(2025, 6, 2, 9, 0), uid="b"),
        )

        assert delete(document, EventKey.from_parts("Review", date(2025, 6, 2), time(9, 0))) is True
        assert [event.uid for event in document.events] == ["b"]

    def test_misses_leave_document_unchanged(self):
        original = make_event("Review", datetime(2025, 6, 2, 9, 0))
        document = make_document(original)
        key = EventKey.from_parts("Nonexistent", date(2025, 1, 1), time(0, 0))

        assert update_start(document, key, datetime(2025, 6, 3, 9, 0)) is False
        assert resize(document, key, 30) is False
        assert delete(document, key) is False
        assert document.events == [make_event("Review", datetime(2025, 6, 2, 9, 0))]
