from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

from ..config import AppSettings, get_settings
from ..core import CalendarStore

Clock = Callable[[], datetime]


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, the calendar store and the clock."""

    settings: AppSettings = field(default_factory=get_settings)
    calendar_path: Optional[Path] = None
    clock: Clock = datetime.now
    store: CalendarStore = field(init=False)

    def __post_init__(self) -> None:
        self.store = CalendarStore(
            self.calendar_path,
            storage=self.settings.storage,
            default_duration=timedelta(minutes=self.settings.scheduling.default_duration_minutes),
        )

    def now(self) -> datetime:
        return self.clock().replace(tzinfo=None)
