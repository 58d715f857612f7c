"""Conversational front end that turns chat turns into applied calendar actions.

Each turn runs through a small state graph::

    select --(slot picked)--> apply --> finalize
       \\--(otherwise)--> plan --> apply --> finalize
                            \\--(unparseable)--> END

The assistant keeps the only conversational state in the system: a short
rolling history of lines fed back into the planner prompt, and the time slots
the previous reply offered so the user can pick one by number or weekday.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, TypedDict

import orjson
from langchain_core.runnables import RunnableLambda
from langgraph.graph import END, StateGraph

from ..bootstrap.logging import LOG_DIR
from ..domain import ActionPlan
from ..services import ActionApplier, ApplyResult, CalendarService
from .planner import ActionPlanner, PlanParseError

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 12
DEFAULT_CHAT_PROMPT = (
    "What would you like me to do next? I can schedule, move, resize, or clear events. "
    'Say "summarize" if you want an overview.'
)

_PAST_KEYWORDS = (
    "backdate",
    "retroactive",
    "in the past",
    "past",
    "yesterday",
    "last week",
    "last monday",
    "last tuesday",
    "last wednesday",
    "last thursday",
    "last friday",
    "last saturday",
    "last sunday",
)
_SLOT_PATTERN = re.compile(r"Create\s+'([^']+)'\s+on\s+(\d{4}-\d{2}-\d{2})\s+at\s+(\d{2}:\d{2})", re.IGNORECASE)
_INDEX_PATTERNS = (re.compile(r"(?:option|choice)\s*(\d+)"), re.compile(r"^(\d+)$"))
_ORDINALS = {"first": 1, "second": 2, "third": 3, "fourth": 4, "fifth": 5}
_WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def wants_past_edits(request: str) -> bool:
    lowered = (request or "").lower()
    return any(keyword in lowered for keyword in _PAST_KEYWORDS)


@dataclass(frozen=True)
class SlotChoice:
    title: str
    date: str
    time: str
    duration_minutes: int = 60

    @property
    def weekday(self) -> str:
        return _WEEKDAYS[date.fromisoformat(self.date).weekday()]

    def to_record(self) -> Dict[str, Any]:
        return {
            "type": "create_event",
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "durationMinutes": self.duration_minutes,
            "recurring": "non-recurring",
        }


def extract_slot_choices(plan: ActionPlan) -> List[SlotChoice]:
    choices: List[SlotChoice] = []
    for note in plan.suggestion_notes:
        match = _SLOT_PATTERN.search(note)
        if match:
            choices.append(SlotChoice(title=match.group(1), date=match.group(2), time=match.group(3)))
    return choices


def pick_slot(reply: str, choices: List[SlotChoice]) -> Optional[SlotChoice]:
    """Resolve "option 2", "2", "second" or a weekday name against offered slots."""

    if not choices:
        return None
    cleaned = re.sub(r"[.!?,]", "", (reply or "").strip().lower())
    for pattern in _INDEX_PATTERNS:
        match = pattern.search(cleaned)
        if match:
            index = int(match.group(1))
            if 1 <= index <= len(choices):
                return choices[index - 1]
            break
    for word, position in _ORDINALS.items():
        if word in cleaned and position <= len(choices):
            return choices[position - 1]
    if cleaned in _WEEKDAYS:
        same_day = [choice for choice in choices if choice.weekday == cleaned]
        if same_day:
            return min(same_day, key=lambda choice: (choice.date, choice.time))
    return None


def format_suggestions(plan: Optional[ActionPlan]) -> str:
    if plan is None:
        return ""
    return "\n".join(f"- {note}" for note in plan.suggestion_notes)


@dataclass
class TurnResult:
    applied: int = 0
    plan: Optional[ActionPlan] = None
    raw: str = ""
    parse_error: bool = False
    summary: Optional[str] = None
    suggestions: str = ""
    outcome: ApplyResult = field(default_factory=ApplyResult)

    def render_chat_reply(self) -> str:
        if self.parse_error:
            return "I couldn't parse the model output. Try rephrasing your request.\n\n" + self.raw
        if self.outcome.messages:
            reply = "\n\n".join(self.outcome.messages)
            if self.outcome.include_summary:
                reply += "\n\n" + (self.summary or "")
        elif self.applied > 0:
            reply = f"Applied actions: {self.applied}"
        elif self.outcome.questions:
            reply = self.outcome.questions[0]
        else:
            reply = DEFAULT_CHAT_PROMPT
        if self.suggestions:
            reply += "\n\nSuggestions:\n" + self.suggestions
        return reply

    def render_report_lines(self) -> List[str]:
        if self.parse_error:
            return ["Model response couldn't be parsed as JSON. Raw output follows:\n\n" + (self.raw or "(empty)")]
        lines = [f"Applied actions: {self.applied}"]
        if self.summary:
            lines.append("\n" + self.summary)
        if self.suggestions:
            lines.append("\nSuggestions:\n" + self.suggestions)
        return lines


class TurnState(TypedDict, total=False):
    request: str
    allow_past: bool
    fast_path: bool
    action_plan: ActionPlan
    raw: str
    parse_error: bool
    outcome: ApplyResult
    result: TurnResult


class CalendarAssistant:
    """Stateful chat session over a calendar service and an action planner."""

    def __init__(
        self,
        calendar: CalendarService,
        planner: Optional[ActionPlanner] = None,
        *,
        run_log_dir: Optional[Path] = None,
    ) -> None:
        self.calendar = calendar
        self.applier = ActionApplier(calendar)
        self.planner = planner or ActionPlanner(calendar.context.settings.llm)
        self.run_log_dir = run_log_dir
        self.history: Deque[str] = deque(maxlen=HISTORY_LIMIT)
        self.pending_choices: List[SlotChoice] = []
        self._graph = self._build_graph()

    # ------------------------------------------------------------------ public API

    def handle(self, request: str) -> TurnResult:
        text = (request or "").strip()
        state: TurnState = self._graph.invoke({"request": text, "allow_past": wants_past_edits(text)})
        result = state["result"]
        self._log_run(text, result)
        return result

    def reset(self) -> None:
        self.history.clear()
        self.pending_choices = []

    # ------------------------------------------------------------------ graph nodes

    def _build_graph(self):
        graph = StateGraph(TurnState)
        graph.add_node("select", RunnableLambda(self._select_node))
        graph.add_node("plan", RunnableLambda(self._plan_node))
        graph.add_node("apply", RunnableLambda(self._apply_node))
        graph.add_node("finalize", RunnableLambda(self._finalize_node))
        graph.set_entry_point("select")
        graph.add_conditional_edges(
            "select", lambda state: "apply" if state.get("fast_path") else "plan", {"apply": "apply", "plan": "plan"}
        )
        graph.add_conditional_edges(
            "plan", lambda state: END if state.get("parse_error") else "apply", {"apply": "apply", END: END}
        )
        graph.add_edge("apply", "finalize")
        graph.add_edge("finalize", END)
        return graph.compile()

    def _select_node(self, state: TurnState) -> TurnState:
        chosen = pick_slot(state["request"], self.pending_choices)
        if chosen is None:
            return {"fast_path": False}
        logger.info("Selected offered slot %s on %s at %s", chosen.title, chosen.date, chosen.time)
        self.pending_choices = []
        return {"fast_path": True, "action_plan": ActionPlan.from_payload({"actions": [chosen.to_record()]}), "raw": ""}

    def _plan_node(self, state: TurnState) -> TurnState:
        request = state["request"]
        try:
            turn = self.planner.plan(
                request,
                calendar_text=self.calendar.read_raw_document(),
                history=list(self.history),
                now=self.calendar.context.now(),
            )
        except PlanParseError as exc:
            logger.warning("Planner output could not be parsed: %s", exc)
            self._remember(request, "parse error on model output")
            return {"parse_error": True, "raw": exc.raw, "result": TurnResult(raw=exc.raw, parse_error=True)}
        return {"parse_error": False, "action_plan": turn.plan, "raw": turn.raw}

    def _apply_node(self, state: TurnState) -> TurnState:
        outcome = self.applier.apply_plan(state["action_plan"], allow_past=state.get("allow_past", False))
        return {"outcome": outcome}

    def _finalize_node(self, state: TurnState) -> TurnState:
        plan = state["action_plan"]
        outcome = state["outcome"]
        if state.get("fast_path"):
            self._remember(state["request"], f"applied {outcome.applied} action(s) via fast selection")
            return {"result": TurnResult(applied=outcome.applied, plan=plan, outcome=outcome)}

        self.pending_choices = extract_slot_choices(plan)
        if any(action.type == "create_event" for action in plan.actions):
            self.pending_choices = []
        self._remember(state["request"], f"applied {outcome.applied} action(s)")
        summary = self.calendar.summarize() if outcome.include_summary else None
        result = TurnResult(
            applied=outcome.applied,
            plan=plan,
            raw=state.get("raw", ""),
            summary=summary,
            suggestions=format_suggestions(plan),
            outcome=outcome,
        )
        return {"result": result}

    # ------------------------------------------------------------------ helpers

    def _remember(self, request: str, reply: str) -> None:
        self.history.append(f"User: {request}")
        self.history.append(f"Assistant: {reply}")

    def _log_run(self, request: str, result: TurnResult) -> None:
        target = self.run_log_dir or LOG_DIR / "agent_runs"
        now = datetime.now()
        entry = {
            "timestamp": now.isoformat(),
            "model": self.planner.settings.model,
            "user_message": request,
            "history_length": len(self.history),
            "applied": result.applied,
            "parse_error": result.parse_error,
            "plan": result.plan.model_dump(mode="json", by_alias=True) if result.plan else None,
            "outcomes": [outcome.to_dict() for outcome in result.outcome.outcomes],
        }
        try:
            target.mkdir(parents=True, exist_ok=True)
            filename = target / f"{now.isoformat().replace(':', '-')}.json"
            filename.write_bytes(orjson.dumps(entry, option=orjson.OPT_INDENT_2))
        except OSError:
            logger.warning("Could not write run log under %s", target, exc_info=True)
