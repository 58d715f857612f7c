from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Union

from .enums import Recurrence

DateOrDateTime = Union[date, datetime]

DEFAULT_EVENT_TITLE = "New Event"
DEFAULT_PRODID = "-//Tidy Calendar//Planner//EN"
DEFAULT_VERSION = "2.0"
DEFAULT_CALSCALE = "GREGORIAN"


def as_datetime(value: DateOrDateTime) -> datetime:
    """Return ``value`` as a floating datetime; date-only values become midnight."""

    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def is_date_only(value: DateOrDateTime) -> bool:
    return not isinstance(value, datetime)


def combine(day: date, at: time) -> datetime:
    return datetime.combine(day, at.replace(second=0, microsecond=0))


@dataclass(slots=True)
class CalendarEvent:
    uid: str
    title: str
    start: DateOrDateTime
    end: DateOrDateTime
    rrule: Optional[str] = None
    source: Optional[str] = field(default=None, compare=False, repr=False)

    @property
    def recurrence(self) -> Recurrence:
        return Recurrence.from_rrule(self.rrule)

    @property
    def is_recurring(self) -> bool:
        return bool(self.rrule)

    @property
    def all_day(self) -> bool:
        return is_date_only(self.start) or is_date_only(self.end)

    @property
    def schedulable(self) -> bool:
        """True for events the scheduling algorithms may block on or move."""

        return not self.all_day and not self.is_recurring

    @property
    def starts_at(self) -> datetime:
        return as_datetime(self.start)

    @property
    def ends_at(self) -> datetime:
        return as_datetime(self.end)

    @property
    def day(self) -> date:
        return self.starts_at.date()

    @property
    def duration(self) -> timedelta:
        return max(self.ends_at - self.starts_at, timedelta(0))

    def reschedule(self, new_start: datetime, duration: Optional[timedelta] = None) -> None:
        length = self.duration if duration is None else duration
        self.start = new_start
        self.end = new_start + length


@dataclass(frozen=True, slots=True)
class EventKey:
    """External address of an event: its title and its start to the minute."""

    title: str
    start: datetime

    @classmethod
    def from_parts(cls, title: str, day: date, at: time) -> "EventKey":
        return cls(title=title or "", start=combine(day, at))

    def matches(self, event: CalendarEvent) -> bool:
        if (event.title or "").lower() != self.title.lower():
            return False
        return event.starts_at.replace(second=0, microsecond=0) == self.start.replace(second=0, microsecond=0)


@dataclass(slots=True)
class CalendarDocument:
    prodid: str = DEFAULT_PRODID
    version: str = DEFAULT_VERSION
    calscale: str = DEFAULT_CALSCALE
    events: List[CalendarEvent] = field(default_factory=list)
    # Non-VEVENT components (VTIMEZONE, VTODO, ...) carried through a rewrite untouched.
    passthrough: List[str] = field(default_factory=list)

    def events_on(self, day: date) -> List[CalendarEvent]:
        return [event for event in self.events if event.day == day]

    def days(self) -> List[date]:
        return sorted({event.day for event in self.events})
