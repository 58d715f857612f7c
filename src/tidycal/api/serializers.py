from __future__ import annotations

from typing import Any, Dict, Optional

from ..domain import CalendarEvent
from ..services import ApplyResult
from .models import ApplyResultPayload, EventPayload, dump


def serialize_event(event: CalendarEvent) -> Dict[str, Any]:
    return dump(EventPayload.from_domain(event))


def serialize_result(result: ApplyResult, *, summary: Optional[str] = None) -> Dict[str, Any]:
    return dump(ApplyResultPayload.from_result(result, summary=summary))
