"""
Shared data models used between the scheduler and its collaborators.

NOTE: scheduler internals (round state, ledger) live in rotator.orchestrator
"""

from protocol.models import (
    ActivityReport,
    Credential,
    ExecutionOutcome,
    ModuleResult,
    ModuleStats,
    RoundSummary,
)

__all__ = [
    "ActivityReport",
    "Credential",
    "ExecutionOutcome",
    "ModuleResult",
    "ModuleStats",
    "RoundSummary",
]
