"""Typed actions produced by the planner and consumed by the action applier.

The planner emits loosely-typed JSON records; each record is validated once,
here, into one variant of :data:`Action` keyed on its ``type`` field. Records
that fail validation are logged and dropped rather than failing the whole plan.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Annotated, Any, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)


class _ActionModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CreateEventAction(_ActionModel):
    type: Literal["create_event"] = "create_event"
    title: str = ""
    date: dt.date
    time: dt.time
    recurring: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, alias="durationMinutes")

    @property
    def target_start(self) -> dt.datetime:
        return dt.datetime.combine(self.date, self.time)


class UpdateEventAction(_ActionModel):
    type: Literal["update_event"] = "update_event"
    title: str = Field(min_length=1)
    date: dt.date
    time: dt.time
    new_date: dt.date = Field(alias="newDate")
    new_time: dt.time = Field(alias="newTime")

    @property
    def target_start(self) -> dt.datetime:
        return dt.datetime.combine(self.new_date, self.new_time)


class ResizeEventAction(_ActionModel):
    type: Literal["resize_event"] = "resize_event"
    title: str = Field(min_length=1)
    date: dt.date
    time: dt.time
    new_duration_minutes: int = Field(alias="newDurationMinutes")


class DeleteEventAction(_ActionModel):
    type: Literal["delete_event"] = "delete_event"
    title: str = Field(min_length=1)
    date: dt.date
    time: dt.time


class AutoSpaceAction(_ActionModel):
    type: Literal["auto_space"] = "auto_space"
    min_gap_minutes: Optional[int] = Field(default=None, alias="minGapMinutes")


class MoveRequest(_ActionModel):
    title: str = Field(min_length=1)
    date: dt.date
    time: dt.time
    new_date: dt.date = Field(alias="newDate")
    new_time: dt.time = Field(alias="newTime")

    @property
    def target_start(self) -> dt.datetime:
        return dt.datetime.combine(self.new_date, self.new_time)


class BulkUpdateAction(_ActionModel):
    type: Literal["bulk_update"] = "bulk_update"
    moves: List[MoveRequest] = Field(default_factory=list)

    @field_validator("moves", mode="before")
    @classmethod
    def _drop_invalid_moves(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        kept: List[Any] = []
        for entry in value:
            if isinstance(entry, MoveRequest):
                kept.append(entry)
                continue
            try:
                kept.append(MoveRequest.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Dropping invalid bulk move %r: %s", entry, exc.errors()[0].get("msg"))
        return kept


class RebalanceWeekAction(_ActionModel):
    type: Literal["rebalance_week"] = "rebalance_week"


class AskClarificationAction(_ActionModel):
    type: Literal["ask_clarification"] = "ask_clarification"
    question: str = ""


class RespondAction(_ActionModel):
    type: Literal["respond"] = "respond"
    message: str = ""
    include_summary: bool = Field(default=False, alias="includeSummary")


Action = Annotated[
    Union[
        CreateEventAction,
        UpdateEventAction,
        ResizeEventAction,
        DeleteEventAction,
        AutoSpaceAction,
        BulkUpdateAction,
        RebalanceWeekAction,
        AskClarificationAction,
        RespondAction,
    ],
    Field(discriminator="type"),
]

ACTION_TYPES = (
    "create_event",
    "update_event",
    "resize_event",
    "delete_event",
    "auto_space",
    "bulk_update",
    "rebalance_week",
    "ask_clarification",
    "respond",
)

_ACTION_ADAPTER: TypeAdapter[Action] = TypeAdapter(Action)


def parse_action(record: Any) -> Optional[Action]:
    """Validate one planner record; ``None`` for unknown or invalid records."""

    if not isinstance(record, dict) or record.get("type") not in ACTION_TYPES:
        logger.debug("Ignoring action record without a known type: %r", record)
        return None
    try:
        return _ACTION_ADAPTER.validate_python(record)
    except ValidationError as exc:
        logger.warning("Dropping invalid %s action: %s", record.get("type"), exc)
        return None


def parse_actions(records: Iterable[Any]) -> List[Action]:
    actions: List[Action] = []
    for record in records:
        action = parse_action(record)
        if action is not None:
            actions.append(action)
    return actions


class Suggestion(BaseModel):
    model_config = ConfigDict(extra="ignore")

    note: str = ""


class ActionPlan(BaseModel):
    model_config = ConfigDict(extra="ignore")

    actions: List[Action] = Field(default_factory=list)
    suggestions: List[Suggestion] = Field(default_factory=list)

    @field_validator("actions", mode="before")
    @classmethod
    def _lenient_actions(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return parse_actions(value)

    @field_validator("suggestions", mode="before")
    @classmethod
    def _lenient_suggestions(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict) and item.get("note")]

    @classmethod
    def from_payload(cls, payload: Any) -> "ActionPlan":
        if not isinstance(payload, dict):
            return cls()
        return cls.model_validate(payload)

    @property
    def suggestion_notes(self) -> List[str]:
        return [suggestion.note for suggestion in self.suggestions if suggestion.note]
