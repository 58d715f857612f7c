from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from ..config import SchedulingSettings
from ..domain import CalendarDocument, CalendarEvent, EventKey
from .matcher import find_event

logger = logging.getLogger(__name__)

Interval = Tuple[datetime, datetime]


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap: touching intervals do not overlap."""

    return start_a < end_b and start_b < end_a


def collides(start: datetime, end: datetime, intervals: Iterable[Interval]) -> bool:
    return any(overlaps(start, end, other_start, other_end) for other_start, other_end in intervals)


def obstructions(document: CalendarDocument, day: date, *, exclude: Optional[CalendarEvent] = None) -> List[Interval]:
    """Intervals of the schedulable events starting on ``day``, sorted by start."""

    intervals = [
        (event.starts_at, event.ends_at)
        for event in document.events
        if event is not exclude and event.schedulable and event.day == day
    ]
    return sorted(intervals)


def event_duration(event: CalendarEvent, default_minutes: int) -> timedelta:
    duration = event.ends_at - event.starts_at
    if duration <= timedelta(0):
        return timedelta(minutes=default_minutes)
    return duration


def resolve_conflict(
    document: CalendarDocument,
    key: EventKey,
    desired_start: datetime,
    *,
    settings: SchedulingSettings = SchedulingSettings(),
) -> Optional[datetime]:
    """Place the matched event at the first free start on ``desired_start``'s day.

    Candidates advance in ``step_minutes`` increments from ``desired_start``
    and never leave that day. On success the event is moved and the placed
    start is returned; otherwise nothing changes and ``None`` is returned.
    """

    event = find_event(document, key)
    if event is None:
        return None

    duration = event_duration(event, settings.default_duration_minutes)
    day = desired_start.date()
    blocked = obstructions(document, day, exclude=event)
    step = timedelta(minutes=settings.step_minutes)

    candidate = desired_start
    for _ in range(settings.max_attempts):
        if not collides(candidate, candidate + duration, blocked):
            event.reschedule(candidate, duration)
            return candidate
        candidate += step
        if candidate.date() != day:
            break

    logger.info("No free slot for %r on %s after searching from %s", event.title, day, desired_start.time())
    return None
