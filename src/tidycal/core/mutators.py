"""Single-event mutations on an in-memory calendar document.

None of these functions touch storage; callers load, mutate and save.
Events are always addressed by :class:`EventKey`, never by uid.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import uuid4

from ..domain import DEFAULT_EVENT_TITLE, CalendarDocument, CalendarEvent, EventKey, Recurrence
from .matcher import find_event, find_index

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 60


def new_uid() -> str:
    return f"{uuid4()}@tidycal"


def _effective_minutes(minutes: Optional[int], default: int) -> int:
    if minutes is None or minutes <= 0:
        return default
    return minutes


def create_event(
    document: CalendarDocument,
    *,
    start: datetime,
    recurrence: Recurrence = Recurrence.NONE,
    title: Optional[str] = None,
    duration_minutes: Optional[int] = None,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
    uid_factory: Callable[[], str] = new_uid,
) -> CalendarEvent:
    minutes = _effective_minutes(duration_minutes, default_duration_minutes)
    event = CalendarEvent(
        uid=uid_factory(),
        title=title.strip() if title and title.strip() else DEFAULT_EVENT_TITLE,
        start=start,
        end=start + timedelta(minutes=minutes),
        rrule=recurrence.to_rrule(),
    )
    document.events.append(event)
    logger.debug("Created %r at %s for %d minute(s)", event.title, start, minutes)
    return event


def update_start(document: CalendarDocument, key: EventKey, new_start: datetime) -> bool:
    """Move the matched event to ``new_start`` keeping its duration."""

    event = find_event(document, key)
    if event is None:
        return False
    event.reschedule(new_start)
    return True


def resize(
    document: CalendarDocument,
    key: EventKey,
    new_duration_minutes: Optional[int],
    *,
    default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
) -> bool:
    event = find_event(document, key)
    if event is None:
        return False
    minutes = _effective_minutes(new_duration_minutes, default_duration_minutes)
    event.start = event.starts_at
    event.end = event.starts_at + timedelta(minutes=minutes)
    return True


def delete(document: CalendarDocument, key: EventKey) -> bool:
    index = find_index(document, key)
    if index is None:
        return False
    removed = document.events.pop(index)
    logger.debug("Removed %r starting %s", removed.title, removed.start)
    return True
