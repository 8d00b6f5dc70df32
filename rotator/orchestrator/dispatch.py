"""
Shared module-dispatch primitive.

Runs one worker slot and always returns an ExecutionOutcome; exceptions
from the module become failed outcomes so sibling slots are unaffected.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Sequence

from protocol.models import Credential, ExecutionOutcome
from rotator.modules.base import ModuleDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerSlot:
    """One account paired with one module for a single round or batch."""

    slot_index: int
    credential: Credential
    module: ModuleDescriptor

    @property
    def account_id(self) -> str:
        return self.credential.account_id


async def execute_slot(slot: WorkerSlot) -> ExecutionOutcome:
    t0 = time.monotonic()
    try:
        if slot.module.warmup_delay > 0:
            await asyncio.sleep(slot.module.warmup_delay)
        result = await slot.module.execute(slot.credential)
    except Exception as e:
        logger.error(
            f"Slot #{slot.slot_index} ({slot.module.name}, {slot.account_id}) raised: {e}",
            exc_info=True,
        )
        return ExecutionOutcome(
            success=False,
            account_id=slot.account_id,
            module_name=slot.module.name,
            slot_index=slot.slot_index,
            error=str(e) or type(e).__name__,
            elapsed=time.monotonic() - t0,
        )

    return ExecutionOutcome(
        success=result.success,
        skipped=result.skipped,
        account_id=slot.account_id,
        module_name=slot.module.name,
        slot_index=slot.slot_index,
        tx_hash=result.tx_hash,
        explorer_url=result.explorer_url,
        error=None if result.skipped else result.error,
        elapsed=time.monotonic() - t0,
    )


async def execute_slots(slots: Sequence[WorkerSlot]) -> List[ExecutionOutcome]:
    """
    Run slots concurrently and wait for all of them.

    Never cancels siblings; one outcome per slot, in slot order.
    """
    results = await asyncio.gather(
        *(execute_slot(s) for s in slots), return_exceptions=True
    )
    outcomes: List[ExecutionOutcome] = []
    for slot, result in zip(slots, results):
        if isinstance(result, BaseException):
            outcomes.append(
                ExecutionOutcome(
                    success=False,
                    account_id=slot.account_id,
                    module_name=slot.module.name,
                    slot_index=slot.slot_index,
                    error=str(result) or type(result).__name__,
                )
            )
        else:
            outcomes.append(result)
    return outcomes
