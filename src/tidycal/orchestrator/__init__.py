"""Language-model planning and the conversational assistant."""

from __future__ import annotations

from .assistant import CalendarAssistant, SlotChoice, TurnResult, wants_past_edits
from .planner import ActionPlanner, PlannedTurn, PlannerNotConfiguredError, PlanParseError, parse_plan

__all__ = [
    "ActionPlanner",
    "CalendarAssistant",
    "PlanParseError",
    "PlannedTurn",
    "PlannerNotConfiguredError",
    "SlotChoice",
    "TurnResult",
    "parse_plan",
    "wants_past_edits",
]
