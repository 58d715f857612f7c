from __future__ import annotations

from enum import Enum
from typing import Optional


class Recurrence(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Recurrence":
        """Map planner labels such as ``non-recurring`` or ``Weekly`` onto a member."""

        cleaned = (label or "").strip().lower()
        for member in cls:
            if member.value == cleaned:
                return member
        return cls.NONE

    @classmethod
    def from_rrule(cls, rrule: Optional[str]) -> "Recurrence":
        if not rrule:
            return cls.NONE
        for part in rrule.split(";"):
            key, _, value = part.partition("=")
            if key.strip().upper() == "FREQ":
                return cls.from_label(value)
        return cls.NONE

    def to_rrule(self) -> Optional[str]:
        if self is Recurrence.NONE:
            return None
        return f"FREQ={self.value.upper()}"
