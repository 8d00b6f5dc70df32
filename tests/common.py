"""
Shared test helpers and utilities for project-wide use.

Use these from conftest.py fixtures or individual tests.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, List, Optional
from unittest.mock import MagicMock


# Ensure project root is on path when tests run
def _ensure_project_root() -> Path:
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    return root


def ensure_project_root() -> Path:
    """Add project root to sys.path. Idempotent. Returns root Path."""
    return _ensure_project_root()


ensure_project_root()

from protocol.models import ActivityReport, Credential, ModuleResult  # noqa: E402
from rotator.credentials import CredentialCache, KeyStore  # noqa: E402
from rotator.modules.base import ModuleDescriptor  # noqa: E402


def make_keys(count: int) -> List[str]:
    """Deterministic valid private keys 0x...01, 0x...02, ..."""
    return [f"0x{i:064x}" for i in range(1, count + 1)]


def make_cache(count: int) -> CredentialCache:
    """CredentialCache over a plain-key source holding `count` keys."""
    source = MagicMock(spec=KeyStore)
    source.plain_path = "keys.txt"
    source.has_secret_store.return_value = False
    source.has_plain_store.return_value = True
    source.load_plain.return_value = make_keys(count)
    return CredentialCache(source)


def make_module(
    name: str,
    result: Optional[ModuleResult] = None,
    error: Optional[BaseException] = None,
    warmup_delay: float = 0.0,
    calls: Optional[list] = None,
) -> ModuleDescriptor:
    """Module that records the accounts it ran for and returns result or raises error."""

    async def execute(credential: Credential) -> ModuleResult:
        if calls is not None:
            calls.append((name, credential.account_id))
        if error is not None:
            raise error
        return result or ModuleResult(success=True, tx_hash="0xabc")

    return ModuleDescriptor(
        name=name, description=f"{name} test module", execute=execute, warmup_delay=warmup_delay
    )


def make_modules(names: Iterable[str], calls: Optional[list] = None) -> List[ModuleDescriptor]:
    return [make_module(n, calls=calls) for n in names]


class StubOracle:
    """Activity oracle returning canned partitions; records every batch."""

    def __init__(self, completed: Iterable[str] = (), fail: bool = False):
        self.completed = {a for a in completed}
        self.fail = fail
        self.batches: List[List[str]] = []

    async def check_batch(self, account_ids: List[str]) -> ActivityReport:
        self.batches.append(list(account_ids))
        if self.fail:
            raise RuntimeError("oracle unavailable")
        report = ActivityReport()
        for account_id in account_ids:
            if account_id in self.completed:
                report.completed.append(account_id)
            else:
                report.active.append(account_id)
        return report
