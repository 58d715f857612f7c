from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

import orjson
from openai import OpenAI, OpenAIError

from ..config import LlmSettings, get_settings
from ..domain import ActionPlan
from .prompts import build_instruction, build_prompt

logger = logging.getLogger(__name__)


class PlannerNotConfiguredError(RuntimeError):
    """Raised when the planner is used without LLM credentials."""


class PlanParseError(ValueError):
    """Raised when the model reply is not a JSON action plan."""

    def __init__(self, message: str, raw: str) -> None:
        super().__init__(message)
        self.raw = raw


@dataclass
class PlannedTurn:
    raw: str
    plan: ActionPlan


def strip_code_fence(raw: str) -> str:
    text = (raw or "").strip()
    if text.startswith("```"):
        newline = text.find("\n")
        if newline != -1:
            text = text[newline + 1 :]
        if text.endswith("```"):
            text = text[:-3]
    return text.strip()


def parse_plan(raw: str) -> ActionPlan:
    try:
        payload = orjson.loads(strip_code_fence(raw))
    except orjson.JSONDecodeError as exc:
        raise PlanParseError(f"Model output is not JSON: {exc}", raw) from exc
    if not isinstance(payload, dict):
        raise PlanParseError("Model output must be a JSON object", raw)
    return ActionPlan.from_payload(payload)


class ActionPlanner:
    """Asks the language model for an action plan describing the user's request."""

    def __init__(self, settings: Optional[LlmSettings] = None, client: Optional[OpenAI] = None) -> None:
        self.settings = settings or get_settings().llm
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.is_configured

    def _ensure_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise PlannerNotConfiguredError(f"Language model is not configured. Missing: {missing}")
        default_query = {}
        if self.settings.api_version:
            default_query["api-version"] = self.settings.api_version
        self._client = OpenAI(
            api_key=self.settings.api_key,
            base_url=self.settings.base_url,
            organization=self.settings.organization,
            project=self.settings.project,
            default_query=default_query or None,
        )
        return self._client

    def complete(self, prompt: str) -> str:
        client = self._ensure_client()
        completion = client.chat.completions.create(
            model=self.settings.model,
            temperature=self.settings.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return completion.choices[0].message.content or ""

    def plan(
        self,
        request: str,
        *,
        calendar_text: str,
        history: Sequence[str] = (),
        now: Optional[datetime] = None,
    ) -> PlannedTurn:
        today = (now or datetime.now()).date()
        week_start = today - timedelta(days=today.weekday())
        instruction = build_instruction(today, week_start, week_start + timedelta(days=6))
        prompt = build_prompt(instruction, calendar_text=calendar_text, history=history, request=request)
        try:
            raw = self.complete(prompt)
        except OpenAIError:
            logger.exception("Planner request failed")
            raise
        logger.debug("Planner replied with %d character(s)", len(raw))
        return PlannedTurn(raw=raw, plan=parse_plan(raw))
