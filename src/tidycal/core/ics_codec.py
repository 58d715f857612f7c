"""Conversion between iCalendar text and :class:`CalendarDocument` records."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from icalendar import Calendar as iCalendar
from icalendar import Event as iEvent
from icalendar.cal import Component
from icalendar.prop import vRecur

from ..domain.models import (
    DEFAULT_CALSCALE,
    DEFAULT_PRODID,
    DEFAULT_VERSION,
    CalendarDocument,
    CalendarEvent,
    DateOrDateTime,
)

logger = logging.getLogger(__name__)

_OWNED_PROPERTIES = ("UID", "SUMMARY", "DTSTART", "DTEND", "DURATION", "RRULE")


class MalformedDocument(ValueError):
    """Raised when text cannot be decoded as a calendar document."""


def _floating(value: DateOrDateTime) -> DateOrDateTime:
    # Zoned values keep their wall clock; scheduling never converts zones.
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return value


def parse_calendar(text: str) -> iCalendar:
    """Parse ``text`` into an ``icalendar`` component, requiring a VCALENDAR root."""

    if not text or not text.strip():
        raise MalformedDocument("calendar document is empty")
    try:
        component = iCalendar.from_ical(text)
    except (ValueError, IndexError, KeyError, TypeError) as exc:
        raise MalformedDocument(f"calendar document could not be parsed: {exc}") from exc
    if isinstance(component, list) or component.name != "VCALENDAR":
        raise MalformedDocument("calendar document must contain exactly one VCALENDAR")
    return component


def _first(component: Component, name: str):
    # A repeated property comes back as a list; the first occurrence wins.
    value = component.get(name)
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _decode_event(component: Component, default_duration: timedelta) -> Optional[CalendarEvent]:
    dtstart = _first(component, "DTSTART")
    if dtstart is None:
        return None
    start = _floating(dtstart.dt)

    dtend = _first(component, "DTEND")
    duration = _first(component, "DURATION")
    if dtend is not None:
        end = _floating(dtend.dt)
    elif duration is not None:
        end = start + duration.dt
    elif isinstance(start, datetime):
        end = start + default_duration
    else:
        end = start + timedelta(days=1)

    rrule = _first(component, "RRULE")
    uid = _first(component, "UID")
    return CalendarEvent(
        uid=str(uid) if uid is not None else "",
        title=str(_first(component, "SUMMARY") or ""),
        start=start,
        end=end,
        rrule=rrule.to_ical().decode("utf-8") if rrule is not None else None,
        source=component.to_ical().decode("utf-8"),
    )


def decode_calendar(text: str, *, default_duration: timedelta = timedelta(minutes=60)) -> CalendarDocument:
    calendar = parse_calendar(text)
    document = CalendarDocument(
        prodid=str(calendar.get("PRODID", DEFAULT_PRODID)),
        version=str(calendar.get("VERSION", DEFAULT_VERSION)),
        calscale=str(calendar.get("CALSCALE", DEFAULT_CALSCALE)),
    )
    for component in calendar.subcomponents:
        if component.name == "VEVENT":
            try:
                event = _decode_event(component, default_duration)
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("Keeping undecodable event %s verbatim: %s", component.get("UID", "<no uid>"), exc)
                event = None
            if event is not None:
                document.events.append(event)
                continue
        # Start-less or undecodable events and other component kinds are carried verbatim.
        document.passthrough.append(component.to_ical().decode("utf-8"))
    return document


def _encode_event(event: CalendarEvent) -> iEvent:
    if event.source:
        component = iEvent.from_ical(event.source)
        for name in _OWNED_PROPERTIES:
            if name in component:
                del component[name]
    else:
        component = iEvent()
    component.add("uid", event.uid)
    component.add("summary", event.title)
    component.add("dtstart", event.start)
    component.add("dtend", event.end)
    if event.rrule:
        component.add("rrule", vRecur.from_ical(event.rrule))
    return component


def encode_calendar(document: CalendarDocument) -> str:
    calendar = iCalendar()
    calendar.add("prodid", document.prodid)
    calendar.add("version", document.version)
    calendar.add("calscale", document.calscale)
    for raw in document.passthrough:
        calendar.add_component(Component.from_ical(raw))
    for event in document.events:
        calendar.add_component(_encode_event(event))
    return calendar.to_ical().decode("utf-8")
