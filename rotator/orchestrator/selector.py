"""
Wallet selection for one round.

Two modes:
- fixed roster: accounts supplied by the caller, used as given
- adaptive: probe the shuffled credential pool in batches through the
  activity oracle and keep only accounts still eligible for work

Both apply the daily-activity priority. Adaptive selection never raises:
any error switches to the fallback state, which takes the head of the
unfiltered pool.
"""
from __future__ import annotations

import enum
import logging
import random
from typing import List, Optional, Sequence, Set

from protocol.models import Credential
from rotator.credentials import CredentialCache
from rotator.errors import CredentialError
from rotator.orchestrator.ledger import DailyActivityLedger
from rotator.services.activity import ActivityOracle

logger = logging.getLogger(__name__)

DEFAULT_MAX_PROBE_ROUNDS = 5
DEFAULT_BATCH_MULTIPLIER = 1


class SelectionState(str, enum.Enum):
    ADAPTIVE = "adaptive"
    FALLBACK = "fallback"


class WalletSelector:
    def __init__(
        self,
        credentials: CredentialCache,
        ledger: DailyActivityLedger,
        oracle: Optional[ActivityOracle] = None,
        roster: Optional[Sequence[str]] = None,
        max_probe_rounds: int = DEFAULT_MAX_PROBE_ROUNDS,
        batch_multiplier: int = DEFAULT_BATCH_MULTIPLIER,
        rng: Optional[random.Random] = None,
    ):
        if max_probe_rounds < 1 or batch_multiplier < 1:
            raise ValueError("max_probe_rounds and batch_multiplier must be >= 1")
        self.credentials = credentials
        self.ledger = ledger
        self.oracle = oracle
        self.max_probe_rounds = max_probe_rounds
        self.batch_multiplier = batch_multiplier
        self.rng = rng or random.Random()
        self._roster: Optional[List[str]] = None
        if roster:
            self.set_roster(roster)

    @property
    def roster(self) -> Optional[List[str]]:
        return list(self._roster) if self._roster is not None else None

    def set_roster(self, account_ids: Sequence[str]) -> None:
        """Use a fixed ordered roster; an empty roster means adaptive mode."""
        self._roster = list(account_ids) or None

    def clear_roster(self) -> None:
        self._roster = None

    async def select_for_round(self, desired_count: int) -> List[Credential]:
        """
        Choose up to desired_count accounts for the next round.

        An empty list means no eligible account was found; the caller skips
        the round.
        """
        if desired_count < 1:
            return []
        if self._roster:
            return self._select_from_roster(desired_count)

        state = SelectionState.ADAPTIVE
        selected: List[Credential] = []
        while True:
            if state is SelectionState.ADAPTIVE:
                try:
                    selected = await self._select_adaptive(desired_count)
                    break
                except CredentialError:
                    raise
                except Exception as e:
                    logger.error(f"Wallet selection failed, using unfiltered pool: {e}", exc_info=True)
                    state = SelectionState.FALLBACK
            else:
                selected = self.credentials.load()[:desired_count]
                break
        return selected

    def _select_from_roster(self, desired_count: int) -> List[Credential]:
        pool: List[Credential] = []
        for account_id in self._roster:
            credential = self.credentials.by_account(account_id)
            if credential is None:
                logger.warning(f"Roster account {account_id} has no loaded credential, skipping")
                continue
            pool.append(credential)

        logger.info(f"Using {len(pool)} preselected accounts")
        if len(pool) < desired_count:
            logger.warning(
                f"Roster has {len(pool)} accounts for {desired_count} workers, "
                f"running {len(pool)} workers"
            )
        return self._apply_priority(pool, desired_count)

    async def _select_adaptive(self, desired_count: int) -> List[Credential]:
        pool = self.credentials.load()
        by_account = {c.account_id: c for c in pool}
        shuffled = [c.account_id for c in pool]
        self.rng.shuffle(shuffled)

        batch_size = desired_count * self.batch_multiplier
        active: List[str] = []
        seen: Set[str] = set()
        checked = 0
        probe = 0
        while (
            len(active) < desired_count
            and probe < self.max_probe_rounds
            and checked < len(shuffled)
        ):
            probe += 1
            batch = shuffled[checked : checked + batch_size]
            checked += len(batch)
            if self.oracle is None:
                active.extend(batch)
                continue
            report = await self.oracle.check_batch(batch)
            for account_id in report.active:
                if account_id in by_account and account_id not in seen:
                    seen.add(account_id)
                    active.append(account_id)
            logger.info(
                f"Probe #{probe}: {len(report.active)}/{len(batch)} active, "
                f"{len(report.completed)}/{len(batch)} complete "
                f"(checked {checked}, found {len(active)})"
            )

        if not active:
            logger.warning(f"No active accounts after checking {checked} accounts")
            return []

        if len(active) < desired_count:
            logger.warning(
                f"Only {len(active)} active accounts for {desired_count} workers"
            )
        self.rng.shuffle(active)
        candidates = [by_account[a] for a in active[:desired_count]]
        return self._apply_priority(candidates, desired_count)

    def _apply_priority(self, candidates: List[Credential], desired_count: int) -> List[Credential]:
        needs, _ = self.ledger.partition(candidates)
        selected = self.ledger.prioritize(candidates, desired_count)
        if needs:
            logger.info(f"Daily priority: {len(needs)} accounts still need activity today")
        else:
            logger.info("All candidate accounts already active today")
        logger.info(f"Selected {len(selected)} accounts")
        return selected
