"""Domain models for calendar planning."""

from __future__ import annotations

from .actions import Action, ActionPlan, MoveRequest, Suggestion, parse_action, parse_actions
from .enums import Recurrence
from .models import DEFAULT_EVENT_TITLE, CalendarDocument, CalendarEvent, EventKey

__all__ = [
    "Action",
    "ActionPlan",
    "CalendarDocument",
    "CalendarEvent",
    "DEFAULT_EVENT_TITLE",
    "EventKey",
    "MoveRequest",
    "Recurrence",
    "Suggestion",
    "parse_action",
    "parse_actions",
]
