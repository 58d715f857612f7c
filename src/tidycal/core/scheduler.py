from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ..config import SchedulingSettings
from ..domain import CalendarDocument, CalendarEvent
from .conflicts import collides

logger = logging.getLogger(__name__)


def _schedulable_on(document: CalendarDocument, day: date) -> List[CalendarEvent]:
    return sorted(
        (event for event in document.events_on(day) if event.schedulable),
        key=lambda event: event.starts_at,
    )


def auto_space(document: CalendarDocument, min_gap_minutes: int, *, today: date) -> int:
    """Push same-day events apart so each starts at least ``min_gap_minutes`` after the previous one ends.

    Past days, all-day events and recurring events are left alone. A shift that
    would move an event onto the following day is skipped. Returns the number
    of events moved.
    """

    gap = timedelta(minutes=min_gap_minutes)
    moved = 0
    for day in document.days():
        if day < today:
            continue
        next_allowed: Optional[datetime] = None
        for event in _schedulable_on(document, day):
            if next_allowed is None:
                next_allowed = event.ends_at + gap
                continue
            if event.starts_at < next_allowed and next_allowed.date() == day:
                event.reschedule(next_allowed)
                moved += 1
            next_allowed = event.ends_at + gap
    if moved:
        logger.info("Auto-spacing moved %d event(s) with a %d minute gap", moved, min_gap_minutes)
    return moved


def week_days(today: date) -> List[date]:
    """Monday to Sunday of the ISO week containing ``today``."""

    monday = today - timedelta(days=today.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


def _free_slot(
    bucket: List[CalendarEvent],
    day: date,
    duration: timedelta,
    settings: SchedulingSettings,
) -> Optional[Tuple[datetime, datetime]]:
    intervals = [(event.starts_at, event.ends_at) for event in bucket]
    cursor = datetime.combine(day, settings.search_start)
    step = timedelta(minutes=settings.step_minutes)
    for _ in range(settings.max_attempts):
        end = cursor + duration
        if end.date() != day:
            return None
        if not collides(cursor, end, intervals):
            return cursor, end
        cursor += step
    return None


def rebalance_week(
    document: CalendarDocument,
    *,
    today: date,
    settings: SchedulingSettings = SchedulingSettings(),
) -> int:
    """Move events from the busiest day of this week to lighter days that are not in the past.

    Bounded by ``settings.rebalance_iterations`` moves; each move puts the
    latest event of the heaviest day into the first free slot of the lightest
    day that accepts it. Returns the number of events moved.
    """

    days = week_days(today)
    buckets: Dict[date, List[CalendarEvent]] = {day: [] for day in days}
    for event in document.events:
        if event.schedulable and event.day in buckets:
            buckets[event.day].append(event)

    moved = 0
    for _ in range(settings.rebalance_iterations):
        order = sorted(days, key=lambda day: len(buckets[day]))
        light = next((day for day in order if day >= today), None)
        if light is None:
            break
        heavy = order[-1]
        if len(buckets[heavy]) - len(buckets[light]) <= 0:
            break

        heavy_events = sorted(buckets[heavy], key=lambda event: event.starts_at)
        candidate = heavy_events[-1]
        duration = candidate.duration

        target = light
        slot = _free_slot(buckets[light], light, duration, settings)
        if slot is None:
            for day in order:
                if day in (light, heavy) or day < today:
                    continue
                slot = _free_slot(buckets[day], day, duration, settings)
                if slot is not None:
                    target = day
                    break
        if slot is None:
            logger.info("Rebalance stopped: no free slot for %r this week", candidate.title)
            break

        candidate.reschedule(slot[0], duration)
        buckets[heavy].remove(candidate)
        buckets[target].append(candidate)
        moved += 1
        logger.debug("Rebalanced %r from %s to %s", candidate.title, heavy, slot[0])

    return moved
