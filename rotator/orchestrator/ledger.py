"""
In-memory daily activity ledger.

Tracks the last calendar day (UTC) each account had a successful action.
Used to prefer accounts that still need activity today, never to exclude.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from protocol.models import Credential


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class DailyActivityLedger:
    def __init__(self, clock: Callable[[], date] = utc_today):
        self._clock = clock
        self._last_active: Dict[str, date] = {}

    def __len__(self) -> int:
        return len(self._last_active)

    def last_active(self, account_id: str) -> Optional[date]:
        return self._last_active.get(account_id)

    def mark_active(self, account_id: str) -> None:
        self._last_active[account_id] = self._clock()

    def is_active_today(self, account_id: str) -> bool:
        return self._last_active.get(account_id) == self._clock()

    def partition(
        self, credentials: Iterable[Credential]
    ) -> Tuple[List[Credential], List[Credential]]:
        """Split into (needs activity today, already active today), order kept."""
        needs, done = [], []
        for credential in credentials:
            if self.is_active_today(credential.account_id):
                done.append(credential)
            else:
                needs.append(credential)
        return needs, done

    def prioritize(self, credentials: List[Credential], count: int) -> List[Credential]:
        """Take up to count credentials, those needing activity today first."""
        needs, done = self.partition(credentials)
        return (needs + done)[:count]
