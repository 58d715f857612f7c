from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..domain import CalendarEvent
from ..services import ApplyResult


class EventPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    title: str
    start: str
    end: str
    recurrence: str
    all_day: bool = Field(default=False, alias="allDay")

    @classmethod
    def from_domain(cls, event: CalendarEvent) -> "EventPayload":
        return cls(
            uid=event.uid,
            title=event.title,
            start=_iso(event.start),
            end=_iso(event.end),
            recurrence=event.recurrence.value,
            all_day=event.all_day,
        )


class OutcomePayload(BaseModel):
    type: str
    applied: int
    skipped: bool
    detail: str = ""


class ApplyResultPayload(BaseModel):
    applied: int
    outcomes: List[OutcomePayload] = Field(default_factory=list)
    messages: List[str] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)
    include_summary: bool = False
    summary: Optional[str] = None

    @classmethod
    def from_result(cls, result: ApplyResult, *, summary: Optional[str] = None) -> "ApplyResultPayload":
        return cls(
            applied=result.applied,
            outcomes=[OutcomePayload(**outcome.to_dict()) for outcome in result.outcomes],
            messages=result.messages,
            questions=result.questions,
            include_summary=result.include_summary,
            summary=summary,
        )


class ChatRequest(BaseModel):
    message: str = ""


def _iso(value: Optional[Union[date, datetime]]) -> str:
    return value.isoformat() if value else ""


def dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True)
