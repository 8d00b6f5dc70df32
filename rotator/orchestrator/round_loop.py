"""
Infinite round loop.

Each round: gate -> select -> dispatch -> await -> aggregate -> pace.
Per-slot failures stay inside their outcome, round-level failures are
logged and paced with the short error delay, and only credential loading
failures end the loop.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, List, Optional

from protocol.models import ExecutionOutcome, RoundSummary
from rotator.credentials import CredentialCache
from rotator.errors import CredentialError
from rotator.orchestrator.dispatch import WorkerSlot, execute_slots
from rotator.orchestrator.ledger import DailyActivityLedger
from rotator.orchestrator.registry import ModuleRegistry
from rotator.orchestrator.rotation import ModuleRotator, RoundState
from rotator.orchestrator.selector import WalletSelector
from rotator.orchestrator.summary import log_summary, summarize
from rotator.services.gas import AdmissionGate
from rotator.utils.env import ERROR_DELAY, ROUND_DELAY

logger = logging.getLogger(__name__)

MIN_WORKERS = 1
MAX_WORKERS = 10


class RoundScheduler:
    """
    Drives rounds of concurrent module executions forever.

    Rotation state and the daily ledger are instance fields, so several
    schedulers can coexist. Not reentrant: one round runs at a time.
    """

    def __init__(
        self,
        credentials: CredentialCache,
        registry: ModuleRegistry,
        selector: WalletSelector,
        worker_count: int,
        gate: Optional[AdmissionGate] = None,
        ledger: Optional[DailyActivityLedger] = None,
        round_delay: float = ROUND_DELAY,
        error_delay: float = ERROR_DELAY,
    ):
        if not MIN_WORKERS <= worker_count <= MAX_WORKERS:
            raise ValueError(f"worker_count must be in [{MIN_WORKERS}, {MAX_WORKERS}]")
        self.credentials = credentials
        self.registry = registry
        self.selector = selector
        self.worker_count = worker_count
        self.gate = gate
        self.ledger = ledger if ledger is not None else selector.ledger
        if self.ledger is not selector.ledger:
            # selection reads the ledger that aggregation marks
            logger.warning("Scheduler ledger differs from the selector's, sharing the scheduler's")
            selector.ledger = self.ledger
        self.round_delay = round_delay
        self.error_delay = error_delay
        self.rotator = ModuleRotator(registry)
        self.state = RoundState()
        self.last_summary: Optional[RoundSummary] = None
        self._stop = asyncio.Event()

    def stop(self) -> None:
        """Request shutdown; cuts short a gate wait or the pause between rounds, never a dispatched round."""
        logger.info("Stop requested, finishing current round")
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    async def run(self, max_rounds: Optional[int] = None) -> None:
        """
        Run rounds until stop() is called or max_rounds rounds ran.

        Raises:
            CredentialError: If credentials cannot be loaded
        """
        # Unlock credentials before any gas wait
        self.credentials.load()

        rounds = 0
        while not self.stopping and (max_rounds is None or rounds < max_rounds):
            logger.info("=" * 60)
            logger.info(f"ROUND #{self.state.iteration}")
            logger.info("=" * 60)
            try:
                await self.run_round()
                delay = self.round_delay
            except CredentialError:
                raise
            except Exception as e:
                logger.error(f"Error in round #{self.state.iteration}: {e}", exc_info=True)
                delay = self.error_delay

            rounds += 1
            self.state.iteration += 1
            if self.stopping or (max_rounds is not None and rounds >= max_rounds):
                break
            logger.info(f"Sleeping {delay:.0f}s before next round...")
            await self._until_stopped(asyncio.sleep(delay))

        logger.info(f"Round loop stopped after {rounds} rounds")

    async def run_round(self) -> Optional[RoundSummary]:
        """
        Execute one round.

        Returns:
            The round summary, or None if no eligible account was found
        """
        await self._wait_for_admission()
        if self.stopping:
            logger.info("Stop requested during admission wait, skipping round")
            return None

        enabled = self.registry.enabled()
        if not enabled:
            raise RuntimeError("No enabled modules")
        if self.registry.excluded:
            logger.info(
                f"Excluded modules: {', '.join(self.registry.excluded)} "
                f"({len(enabled)} of {len(self.registry)} enabled)"
            )

        t0 = time.monotonic()
        accounts = await self.selector.select_for_round(self.worker_count)
        if not accounts:
            logger.info("No active accounts, skipping round")
            return None

        slots = [
            WorkerSlot(
                slot_index=i,
                credential=credential,
                module=self.rotator.assign(i, self.state),
            )
            for i, credential in enumerate(accounts[: self.worker_count], start=1)
        ]
        for slot in slots:
            logger.info(f"Slot #{slot.slot_index}: {slot.module.name} -> {slot.account_id}")

        outcomes = await execute_slots(slots)
        summary = self._aggregate(outcomes, time.monotonic() - t0)
        self.state.advance_offset(len(slots), len(enabled))
        return summary

    async def _wait_for_admission(self) -> None:
        if self.gate is None:
            return
        try:
            if await self.gate.is_too_expensive():
                logger.info("Gas price above limit, waiting...")
                await self._until_stopped(self.gate.wait_until_acceptable())
        except Exception as e:
            # fail open
            logger.error(f"Admission gate error, proceeding: {e}")

    async def _until_stopped(self, aw: Awaitable) -> bool:
        """
        Await aw unless stop() is called first, in which case aw is cancelled.

        Returns:
            True if a stop was requested
        """
        task = asyncio.ensure_future(aw)
        stopper = asyncio.ensure_future(self._stop.wait())
        try:
            await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [t for t in (task, stopper) if not t.done()]
            for t in pending:
                t.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
        if not task.cancelled():
            task.result()
        return self.stopping

    def _aggregate(self, outcomes: List[ExecutionOutcome], elapsed: float) -> RoundSummary:
        for outcome in outcomes:
            if outcome.success:
                self.ledger.mark_active(outcome.account_id)
        summary = summarize(outcomes, elapsed, iteration=self.state.iteration)
        log_summary(summary, f"Round #{self.state.iteration}")
        self.last_summary = summary
        return summary
