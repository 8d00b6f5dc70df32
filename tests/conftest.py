"""
Project-wide pytest fixtures.

Use these across test modules. Helpers live in tests.common.
"""
from __future__ import annotations

from datetime import date

import pytest

# Ensure project root on path before any local imports
from tests.common import ensure_project_root, make_cache, make_modules

ensure_project_root()

from rotator.orchestrator.ledger import DailyActivityLedger  # noqa: E402
from rotator.orchestrator.registry import ModuleRegistry  # noqa: E402

TODAY = date(2026, 10, 19)


class FakeClock:
    """Settable clock for the daily ledger."""

    def __init__(self, today: date = TODAY):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ledger(clock) -> DailyActivityLedger:
    return DailyActivityLedger(clock=clock)


@pytest.fixture
def cache():
    """Credential cache with 10 deterministic accounts."""
    return make_cache(10)


@pytest.fixture
def calls() -> list:
    """Collects (module_name, account_id) pairs from test modules."""
    return []


@pytest.fixture
def registry(calls) -> ModuleRegistry:
    return ModuleRegistry(make_modules(["Alpha", "Beta", "Gamma", "Delta", "Epsilon"], calls=calls))
