from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, List, Optional

from ..domain import ActionPlan, Recurrence
from .registry import register_api
from .serializers import serialize_event, serialize_result
from .state import api_state


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid date (expected yyyy-MM-dd): {value}") from exc


def _parse_time(value: str) -> time:
    try:
        return time.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid time (expected HH:mm): {value}") from exc


@register_api(
    "calendar_summary",
    description="Return a day-by-day text summary of every event, including all-day events.",
    category="calendar",
    tags=("read",),
)
def calendar_summary() -> Dict[str, Any]:
    return {"summary": api_state.calendar.summarize()}


@register_api(
    "list_events",
    description="List timed events with date, start, end and duration, sorted by start.",
    category="calendar",
    tags=("read",),
)
def list_events() -> Dict[str, Any]:
    return {"events": api_state.calendar.list_events()}


@register_api(
    "read_calendar_document",
    description="Return the raw iCalendar document exactly as stored.",
    category="calendar",
    tags=("read", "ics"),
)
def read_calendar_document() -> Dict[str, Any]:
    return {"ics": api_state.calendar.read_raw_document()}


@register_api(
    "upload_calendar_document",
    description="Replace the whole calendar with an uploaded iCalendar document.",
    category="calendar",
    tags=("write", "ics"),
    mutating=True,
)
def upload_calendar_document(ics: str) -> Dict[str, Any]:
    api_state.calendar.replace_document(ics)
    return {"replaced": True}


@register_api(
    "create_event",
    description="Create an event on a date and time, optionally recurring (daily, weekly, monthly, yearly).",
    category="events",
    tags=("write",),
    mutating=True,
)
def create_event(
    date: str,
    time: str,
    title: str = "",
    duration_minutes: int = 60,
    recurring: str = "non-recurring",
) -> Dict[str, Any]:
    event = api_state.calendar.create_event(
        _parse_date(date),
        _parse_time(time),
        recurrence=Recurrence.from_label(recurring),
        title=title,
        duration_minutes=duration_minutes,
    )
    return {"event": serialize_event(event)}


@register_api(
    "update_event",
    description="Move the event matching title and start to a new date and time, keeping its duration.",
    category="events",
    tags=("write",),
    mutating=True,
)
def update_event(title: str, date: str, time: str, new_date: str, new_time: str) -> Dict[str, Any]:
    updated = api_state.calendar.update_event(
        title, _parse_date(date), _parse_time(time), _parse_date(new_date), _parse_time(new_time)
    )
    return {"updated": updated}


@register_api(
    "reschedule_event",
    description="Move an event to the first slot at or after the requested time that does not overlap other events that day.",
    category="events",
    tags=("write", "conflict"),
    mutating=True,
)
def reschedule_event(title: str, date: str, time: str, new_date: str, new_time: str) -> Dict[str, Any]:
    placed = api_state.calendar.reschedule_event(
        title, _parse_date(date), _parse_time(time), _parse_date(new_date), _parse_time(new_time)
    )
    return {"placed": placed.strftime("%Y-%m-%d %H:%M") if placed else None}


@register_api(
    "resize_event",
    description="Change how long the event matching title and start lasts.",
    category="events",
    tags=("write",),
    mutating=True,
)
def resize_event(title: str, date: str, time: str, new_duration_minutes: int) -> Dict[str, Any]:
    resized = api_state.calendar.resize_event(title, _parse_date(date), _parse_time(time), new_duration_minutes)
    return {"resized": resized}


@register_api(
    "delete_event",
    description="Delete the first event matching title and start.",
    category="events",
    tags=("write",),
    mutating=True,
)
def delete_event(title: str, date: str, time: str) -> Dict[str, Any]:
    return {"deleted": api_state.calendar.delete_event(title, _parse_date(date), _parse_time(time))}


@register_api(
    "auto_space_events",
    description="Shift same-day events so consecutive events are separated by at least the given gap.",
    category="scheduling",
    tags=("write", "spacing"),
    mutating=True,
)
def auto_space_events(min_gap_minutes: int = 60) -> Dict[str, Any]:
    return {"moved": api_state.calendar.auto_space(min_gap_minutes)}


@register_api(
    "rebalance_week",
    description="Spread this week's events from busy days to lighter days that are not in the past.",
    category="scheduling",
    tags=("write", "rebalance"),
    mutating=True,
)
def rebalance_week() -> Dict[str, Any]:
    return {"moved": api_state.calendar.rebalance_week()}


@register_api(
    "apply_actions",
    description="Apply a planner action list (create_event, update_event, bulk_update, ...) in order.",
    category="planning",
    tags=("write", "actions"),
    mutating=True,
)
def apply_actions(actions: List[Dict[str, Any]], allow_past: bool = False) -> Dict[str, Any]:
    plan = ActionPlan.from_payload({"actions": actions})
    result = api_state.applier.apply_plan(plan, allow_past=allow_past)
    summary: Optional[str] = api_state.calendar.summarize() if result.include_summary else None
    return serialize_result(result, summary=summary)
