from __future__ import annotations

from typing import Optional

from ..domain import CalendarDocument, CalendarEvent, EventKey


def find_index(document: CalendarDocument, key: EventKey) -> Optional[int]:
    """Position of the first event whose title and start match ``key``."""

    for index, event in enumerate(document.events):
        if key.matches(event):
            return index
    return None


def find_event(document: CalendarDocument, key: EventKey) -> Optional[CalendarEvent]:
    index = find_index(document, key)
    return document.events[index] if index is not None else None
