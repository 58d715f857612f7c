"""Builders shared by the test modules."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from tidycal.config import LlmSettings
from tidycal.domain import CalendarDocument, CalendarEvent
from tidycal.orchestrator import ActionPlanner

# Monday of ISO week 2025-06-02 .. 2025-06-08.
FIXED_NOW = datetime(2025, 6, 2, 8, 0)


def make_event(
    title: str,
    start: datetime,
    minutes: int = 60,
    *,
    uid: Optional[str] = None,
    rrule: Optional[str] = None,
) -> CalendarEvent:
    return CalendarEvent(
        uid=uid or f"{title.lower().replace(' ', '-')}-{start:%Y%m%d%H%M}@test",
        title=title,
        start=start,
        end=start + timedelta(minutes=minutes),
        rrule=rrule,
    )


def make_document(*events: CalendarEvent) -> CalendarDocument:
    return CalendarDocument(events=list(events))


class StubPlanner(ActionPlanner):
    """Planner that replays canned model replies instead of calling the API."""

    def __init__(self, replies: List[str]) -> None:
        super().__init__(
            settings=LlmSettings(
                api_key="test-key",
                model="stub-model",
                base_url=None,
                api_version=None,
                organization=None,
                project=None,
                temperature=0.0,
            )
        )
        self.replies = list(replies)
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.replies.pop(0)
