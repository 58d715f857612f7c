from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional

from ..config import SchedulingSettings
from ..core import (
    CalendarStore,
    auto_space,
    create_event,
    delete,
    list_events,
    rebalance_week,
    resize,
    resolve_conflict,
    summarize,
    update_start,
)
from ..core.views import EventRow
from ..domain import CalendarDocument, CalendarEvent, EventKey, Recurrence
from .context import ServiceContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CalendarService:
    """One load -> mutate -> save transaction per public method."""

    context: ServiceContext

    @property
    def store(self) -> CalendarStore:
        return self.context.store

    @property
    def scheduling(self) -> SchedulingSettings:
        return self.context.settings.scheduling

    def create_event(
        self,
        day: date,
        at: time,
        recurrence: Recurrence = Recurrence.NONE,
        title: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> CalendarEvent:
        def _create(document: CalendarDocument) -> CalendarEvent:
            return create_event(
                document,
                start=datetime.combine(day, at),
                recurrence=recurrence,
                title=title,
                duration_minutes=duration_minutes,
                default_duration_minutes=self.scheduling.default_duration_minutes,
            )

        event = self.store.mutate(_create)
        logger.info("Created event %r on %s at %s", event.title, day, at.strftime("%H:%M"))
        return event

    def update_event(self, title: str, day: date, at: time, new_day: date, new_at: time) -> bool:
        key = EventKey.from_parts(title, day, at)
        new_start = datetime.combine(new_day, new_at)
        updated = self.store.mutate(lambda document: update_start(document, key, new_start))
        if not updated:
            logger.info("No event %r at %s to move", title, key.start)
        return updated

    def reschedule_event(self, title: str, day: date, at: time, new_day: date, new_at: time) -> Optional[datetime]:
        """Conflict-aware move; ``None`` when no free slot exists on the target day."""

        key = EventKey.from_parts(title, day, at)
        desired = datetime.combine(new_day, new_at)
        return self.store.mutate(
            lambda document: resolve_conflict(document, key, desired, settings=self.scheduling)
        )

    def resize_event(self, title: str, day: date, at: time, new_duration_minutes: Optional[int]) -> bool:
        key = EventKey.from_parts(title, day, at)
        return self.store.mutate(
            lambda document: resize(
                document,
                key,
                new_duration_minutes,
                default_duration_minutes=self.scheduling.default_duration_minutes,
            )
        )

    def delete_event(self, title: str, day: date, at: time) -> bool:
        key = EventKey.from_parts(title, day, at)
        deleted = self.store.mutate(lambda document: delete(document, key))
        if deleted:
            logger.info("Deleted event %r at %s", title, key.start)
        return deleted

    def auto_space(self, min_gap_minutes: Optional[int] = None) -> int:
        gap = min_gap_minutes if min_gap_minutes and min_gap_minutes > 0 else self.scheduling.default_gap_minutes
        today = self.context.now().date()
        return self.store.mutate(lambda document: auto_space(document, gap, today=today))

    def rebalance_week(self) -> int:
        today = self.context.now().date()
        return self.store.mutate(
            lambda document: rebalance_week(document, today=today, settings=self.scheduling)
        )

    def summarize(self) -> str:
        return summarize(self.store.load())

    def list_events(self) -> List[EventRow]:
        return list_events(self.store.load())

    def read_raw_document(self) -> str:
        return self.store.read_raw_document()

    def replace_document(self, raw_text: str) -> None:
        self.store.replace_whole_document(raw_text)
