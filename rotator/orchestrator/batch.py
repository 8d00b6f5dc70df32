"""
One-shot sweep: every account runs exactly one module, in fixed-size batches.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, List, Sequence

from protocol.models import Credential, ExecutionOutcome, RoundSummary
from rotator.orchestrator.dispatch import WorkerSlot, execute_slots
from rotator.orchestrator.registry import ModuleRegistry
from rotator.orchestrator.summary import log_summary, summarize
from rotator.utils.env import BATCH_DELAY

logger = logging.getLogger(__name__)


class BatchRunner:
    def __init__(self, registry: ModuleRegistry, batch_delay: float = BATCH_DELAY):
        self.registry = registry
        self.batch_delay = batch_delay

    def distribute(self, accounts: Sequence[Credential]) -> List[WorkerSlot]:
        """Account at position i gets module i mod N, exclusions ignored."""
        modules = self.registry.all()
        return [
            WorkerSlot(slot_index=i + 1, credential=c, module=modules[i % len(modules)])
            for i, c in enumerate(accounts)
        ]

    @staticmethod
    def log_distribution(slots: Sequence[WorkerSlot]) -> None:
        groups: Dict[str, List[WorkerSlot]] = {}
        for slot in slots:
            groups.setdefault(slot.module.name, []).append(slot)
        logger.info("Module distribution:")
        for name, members in groups.items():
            logger.info(f"  {name}:")
            for slot in members:
                logger.info(f"    {slot.account_id[:10]}... (account #{slot.slot_index})")

    async def run_once(
        self, accounts: Sequence[Credential], max_concurrent: int = 10
    ) -> RoundSummary:
        """
        Run every account once and return the final aggregate report.

        Batches of max_concurrent run to completion before the next starts.
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")

        slots = self.distribute(accounts)
        logger.info(f"Sweep: {len(slots)} accounts, up to {max_concurrent} concurrent")
        self.log_distribution(slots)

        t0 = time.monotonic()
        outcomes: List[ExecutionOutcome] = []
        for start in range(0, len(slots), max_concurrent):
            batch = slots[start : start + max_concurrent]
            logger.info(
                f"Batch {start // max_concurrent + 1}: accounts {start + 1}-{start + len(batch)}"
            )
            outcomes.extend(await execute_slots(batch))
            if start + max_concurrent < len(slots) and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        summary = summarize(outcomes, time.monotonic() - t0)
        log_summary(summary, "Sweep complete")
        return summary
