"""
Scheduler core: module registry and rotation, wallet selection, the round
loop and the one-shot batch sweep.

- registry: enabled/excluded module set
- rotation: cyclic slot -> module assignment
- ledger: daily activity priority
- selector: per-round account selection
- dispatch: run one worker slot, never raising
- round_loop: infinite round scheduler
- batch: run every account once
"""
from rotator.orchestrator.batch import BatchRunner
from rotator.orchestrator.dispatch import WorkerSlot, execute_slot, execute_slots
from rotator.orchestrator.ledger import DailyActivityLedger
from rotator.orchestrator.registry import ModuleRegistry
from rotator.orchestrator.rotation import ModuleRotator, RoundState
from rotator.orchestrator.round_loop import RoundScheduler
from rotator.orchestrator.selector import WalletSelector
from rotator.orchestrator.summary import summarize

__all__ = [
    "BatchRunner",
    "DailyActivityLedger",
    "ModuleRegistry",
    "ModuleRotator",
    "RoundScheduler",
    "RoundState",
    "WalletSelector",
    "WorkerSlot",
    "execute_slot",
    "execute_slots",
    "summarize",
]
