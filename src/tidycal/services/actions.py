"""Apply planner actions to the calendar, one transaction per mutation.

Actions run strictly in order. Each contributes to a running *applied* count:
one per successful single-event mutation, the moved count for auto-spacing and
rebalancing, one per successful bulk move. Actions that target a start before
"now" are skipped without error unless the caller allows past edits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from ..domain import Action, ActionPlan, MoveRequest, Recurrence
from ..domain.actions import (
    AskClarificationAction,
    AutoSpaceAction,
    BulkUpdateAction,
    CreateEventAction,
    DeleteEventAction,
    RebalanceWeekAction,
    ResizeEventAction,
    RespondAction,
    UpdateEventAction,
)
from .calendar import CalendarService

logger = logging.getLogger(__name__)


@dataclass
class ActionOutcome:
    type: str
    applied: int = 0
    skipped: bool = False
    detail: str = ""

    def to_dict(self) -> dict:
        return {"type": self.type, "applied": self.applied, "skipped": self.skipped, "detail": self.detail}


@dataclass
class ApplyResult:
    applied: int = 0
    outcomes: List[ActionOutcome] = field(default_factory=list)
    messages: List[str] = field(default_factory=list)
    questions: List[str] = field(default_factory=list)
    include_summary: bool = False

    def record(self, outcome: ActionOutcome) -> None:
        self.outcomes.append(outcome)
        self.applied += outcome.applied

    def to_dict(self) -> dict:
        return {
            "applied": self.applied,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
            "messages": list(self.messages),
            "questions": list(self.questions),
            "include_summary": self.include_summary,
        }


class ActionApplier:
    def __init__(self, calendar: CalendarService) -> None:
        self.calendar = calendar

    def _in_past(self, target: datetime, allow_past: bool) -> bool:
        if allow_past:
            return False
        return target < self.calendar.context.now()

    def apply_plan(self, plan: ActionPlan, *, allow_past: bool = False) -> ApplyResult:
        return self.apply_all(plan.actions, allow_past=allow_past)

    def apply_all(self, actions: Iterable[Action], *, allow_past: bool = False) -> ApplyResult:
        result = ApplyResult()
        for action in actions:
            self._dispatch(action, allow_past, result)
        logger.info("Applied %d change(s) from %d action(s)", result.applied, len(result.outcomes))
        return result

    def apply(self, action: Action, *, allow_past: bool = False) -> int:
        result = ApplyResult()
        self._dispatch(action, allow_past, result)
        return result.applied

    def _dispatch(self, action: Action, allow_past: bool, result: ApplyResult) -> None:
        if isinstance(action, CreateEventAction):
            outcome = self._create(action, allow_past)
        elif isinstance(action, UpdateEventAction):
            outcome = self._update(action, allow_past)
        elif isinstance(action, ResizeEventAction):
            applied = self.calendar.resize_event(action.title, action.date, action.time, action.new_duration_minutes)
            outcome = ActionOutcome(action.type, applied=int(applied), detail="" if applied else "no match")
        elif isinstance(action, DeleteEventAction):
            applied = self.calendar.delete_event(action.title, action.date, action.time)
            outcome = ActionOutcome(action.type, applied=int(applied), detail="" if applied else "no match")
        elif isinstance(action, AutoSpaceAction):
            outcome = ActionOutcome(action.type, applied=self.calendar.auto_space(action.min_gap_minutes))
        elif isinstance(action, RebalanceWeekAction):
            outcome = ActionOutcome(action.type, applied=self.calendar.rebalance_week())
        elif isinstance(action, BulkUpdateAction):
            outcome = self._bulk(action, allow_past)
        elif isinstance(action, AskClarificationAction):
            if action.question:
                result.questions.append(action.question)
            outcome = ActionOutcome(action.type)
        elif isinstance(action, RespondAction):
            if action.message:
                result.messages.append(action.message)
            result.include_summary = result.include_summary or action.include_summary
            outcome = ActionOutcome(action.type)
        else:
            logger.debug("Ignoring unsupported action %r", action)
            return
        result.record(outcome)

    def _create(self, action: CreateEventAction, allow_past: bool) -> ActionOutcome:
        if self._in_past(action.target_start, allow_past):
            logger.info("Skipping create_event in the past: %s", action.target_start)
            return ActionOutcome(action.type, skipped=True, detail="in the past")
        event = self.calendar.create_event(
            action.date,
            action.time,
            recurrence=Recurrence.from_label(action.recurring),
            title=action.title,
            duration_minutes=action.duration_minutes,
        )
        return ActionOutcome(action.type, applied=1, detail=event.uid)

    def _update(self, action: UpdateEventAction, allow_past: bool) -> ActionOutcome:
        if self._in_past(action.target_start, allow_past):
            logger.info("Skipping update_event into the past: %s", action.target_start)
            return ActionOutcome(action.type, skipped=True, detail="in the past")
        applied = self.calendar.update_event(action.title, action.date, action.time, action.new_date, action.new_time)
        return ActionOutcome(action.type, applied=int(applied), detail="" if applied else "no match")

    def _move(self, move: MoveRequest) -> bool:
        placed: Optional[datetime] = self.calendar.reschedule_event(
            move.title, move.date, move.time, move.new_date, move.new_time
        )
        if placed is not None:
            return True
        return self.calendar.update_event(move.title, move.date, move.time, move.new_date, move.new_time)

    def _bulk(self, action: BulkUpdateAction, allow_past: bool) -> ActionOutcome:
        applied = 0
        skipped = 0
        for move in action.moves:
            if self._in_past(move.target_start, allow_past):
                skipped += 1
                continue
            if self._move(move):
                applied += 1
        detail = f"{skipped} move(s) in the past skipped" if skipped else ""
        return ActionOutcome(action.type, applied=applied, detail=detail)
