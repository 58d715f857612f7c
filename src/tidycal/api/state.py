from __future__ import annotations

from dataclasses import dataclass, field

from ..services import ActionApplier, CalendarService, ServiceContext


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    calendar: CalendarService = field(init=False)
    applier: ActionApplier = field(init=False)

    def __post_init__(self) -> None:
        self._wire()

    def _wire(self) -> None:
        self.calendar = CalendarService(self.context)
        self.applier = ActionApplier(self.calendar)

    def rebind(self, context: ServiceContext) -> None:
        """Point every registered tool at a different context (tests, alternate files)."""

        self.context = context
        self._wire()


api_state = ApiState()
