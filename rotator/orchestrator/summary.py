"""
Outcome aggregation and round reporting.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from protocol.models import ExecutionOutcome, ModuleStats, RoundSummary

logger = logging.getLogger(__name__)


def summarize(
    outcomes: Iterable[ExecutionOutcome], elapsed: float, iteration: int = 0
) -> RoundSummary:
    """
    Tally outcomes; skipped counts toward ok, never toward failed.

    succeeded + skipped + failed == dispatched always holds.
    """
    outcomes = list(outcomes)
    per_module: Dict[str, ModuleStats] = {}
    succeeded = skipped = failed = 0
    for outcome in outcomes:
        stats = per_module.setdefault(outcome.module_name, ModuleStats())
        if outcome.skipped:
            skipped += 1
        elif outcome.success:
            succeeded += 1
        else:
            failed += 1
        if outcome.ok:
            stats.ok += 1
        else:
            stats.failed += 1

    return RoundSummary(
        iteration=iteration,
        dispatched=len(outcomes),
        succeeded=succeeded,
        skipped=skipped,
        failed=failed,
        elapsed=elapsed,
        per_module=per_module,
        outcomes=outcomes,
    )


def _status(outcome: ExecutionOutcome) -> str:
    if outcome.skipped:
        return "SKIP"
    return "OK" if outcome.success else "FAIL"


def log_outcomes(outcomes: List[ExecutionOutcome]) -> None:
    for o in outcomes:
        line = f"  #{o.slot_index} [{_status(o)}] {o.module_name} | {o.account_id} | {o.elapsed:.2f}s"
        if o.explorer_url or o.tx_hash:
            line += f" | {o.explorer_url or o.tx_hash}"
        if o.error:
            line += f" | {o.error}"
        if o.ok:
            logger.info(line)
        else:
            logger.warning(line)


def log_summary(summary: RoundSummary, title: str) -> None:
    logger.info("-" * 60)
    logger.info(
        f"{title}: ok {summary.ok}/{summary.dispatched} "
        f"(success {summary.succeeded}, skipped {summary.skipped}), "
        f"errors {summary.failed}, {summary.elapsed:.2f}s"
    )
    log_outcomes(summary.outcomes)
    for name, stats in sorted(summary.per_module.items()):
        logger.info(f"  {name}: {stats.ok}/{stats.total} ({stats.success_rate:.1f}%)")
    logger.info("-" * 60)
