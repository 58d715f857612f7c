"""Application services orchestrating storage and the scheduling engine."""

from __future__ import annotations

from .actions import ActionApplier, ActionOutcome, ApplyResult
from .calendar import CalendarService
from .context import Clock, ServiceContext

__all__ = [
    "ActionApplier",
    "ActionOutcome",
    "ApplyResult",
    "CalendarService",
    "Clock",
    "ServiceContext",
]
