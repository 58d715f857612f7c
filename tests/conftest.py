"""Shared test fixtures for Tidy Calendar tests.

Every test gets its own calendar file under ``tmp_path`` and a frozen clock
(Monday 2025-06-02 08:00), so "now"-sensitive behaviour such as the past-time
guard and the weekly rebalance is deterministic.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Keep log files out of the working tree; read when tidycal.bootstrap is imported.
os.environ.setdefault("TIDYCAL_LOG_DIR", tempfile.mkdtemp(prefix="tidycal-logs-"))

from helpers import FIXED_NOW  # noqa: E402
from tidycal.services import ActionApplier, CalendarService, ServiceContext  # noqa: E402


# ─────────────────────────────────────────────────────────────────────────────
# Service Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def calendar_path(tmp_path: Path) -> Path:
    """Path to an isolated calendar file (not created yet)."""
    return tmp_path / "calendar.ics"


@pytest.fixture
def context(calendar_path: Path) -> ServiceContext:
    return ServiceContext(calendar_path=calendar_path, clock=lambda: FIXED_NOW)


@pytest.fixture
def calendar(context: ServiceContext) -> CalendarService:
    return CalendarService(context)


@pytest.fixture
def applier(calendar: CalendarService) -> ActionApplier:
    return ActionApplier(calendar)


@pytest.fixture
def bound_api(context: ServiceContext) -> Generator:
    """Point the registered tools at the isolated calendar for one test."""
    from tidycal.api import api_state

    previous = api_state.context
    api_state.rebind(context)
    yield api_state
    api_state.rebind(previous)
