from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import time
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from platformdirs import user_data_dir

load_dotenv()

APP_NAME = "Tidy Calendar"
APP_AUTHOR = "TidyCal"


@dataclass(frozen=True)
class LlmSettings:
    api_key: Optional[str]
    model: str
    base_url: Optional[str]
    api_version: Optional[str]
    organization: Optional[str]
    project: Optional[str]
    temperature: float

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.model)

    @property
    def missing_env_vars(self) -> list[str]:
        missing = []
        if not self.api_key:
            missing.append("OPENAI_API_KEY")
        if not self.model:
            missing.append("OPENAI_MODEL")
        return missing


@dataclass(frozen=True)
class StorageSettings:
    calendar_file: Path
    data_dir: Path

    @property
    def fallback_file(self) -> Path:
        return self.data_dir / "calendar.ics"


@dataclass(frozen=True)
class SchedulingSettings:
    """Search and spacing constants shared by the scheduling algorithms."""

    step_minutes: int = 30
    max_attempts: int = 48
    rebalance_iterations: int = 30
    search_start: time = time(hour=10, minute=0)
    default_duration_minutes: int = 60
    default_gap_minutes: int = 60


@dataclass(frozen=True)
class ServerSettings:
    host: str
    port: int
    mcp_port: int
    static_dir: Optional[Path]


@dataclass(frozen=True)
class AppSettings:
    llm: LlmSettings
    storage: StorageSettings
    scheduling: SchedulingSettings
    server: ServerSettings


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _time_from_env(name: str, default: time) -> time:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return time.fromisoformat(raw)
    except ValueError:
        return default


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    llm = LlmSettings(
        api_key=os.getenv("OPENAI_API_KEY"),
        model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        base_url=os.getenv("OPENAI_BASE_URL"),
        api_version=os.getenv("OPENAI_API_VERSION"),
        organization=os.getenv("OPENAI_ORG"),
        project=os.getenv("OPENAI_PROJECT"),
        temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.2")),
    )

    storage = StorageSettings(
        calendar_file=Path(os.getenv("TIDYCAL_CALENDAR_FILE", Path.cwd() / "resources" / "calendar.ics")),
        data_dir=Path(os.getenv("TIDYCAL_DATA_DIR", user_data_dir(APP_NAME, APP_AUTHOR))),
    )

    scheduling = SchedulingSettings(
        step_minutes=_int_from_env("TIDYCAL_STEP_MINUTES", 30),
        max_attempts=_int_from_env("TIDYCAL_MAX_ATTEMPTS", 48),
        rebalance_iterations=_int_from_env("TIDYCAL_REBALANCE_ITERATIONS", 30),
        search_start=_time_from_env("TIDYCAL_SEARCH_START", time(hour=10, minute=0)),
        default_duration_minutes=_int_from_env("TIDYCAL_DEFAULT_DURATION", 60),
        default_gap_minutes=_int_from_env("TIDYCAL_DEFAULT_GAP", 60),
    )

    static_dir = os.getenv("TIDYCAL_STATIC_DIR")
    server = ServerSettings(
        host=os.getenv("TIDYCAL_HOST", "127.0.0.1"),
        port=_int_from_env("PORT", 8080),
        mcp_port=_int_from_env("TIDYCAL_MCP_PORT", 8765),
        static_dir=Path(static_dir) if static_dir else None,
    )

    return AppSettings(llm=llm, storage=storage, scheduling=scheduling, server=server)
