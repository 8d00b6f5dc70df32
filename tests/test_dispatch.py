"""
Tests for the slot dispatch primitive and outcome aggregation.
"""
from unittest.mock import AsyncMock, patch

import pytest

from protocol.models import ExecutionOutcome, ModuleResult
from rotator.orchestrator.dispatch import WorkerSlot, execute_slot, execute_slots
from rotator.orchestrator.summary import summarize
from tests.common import make_cache, make_module


@pytest.fixture
def creds():
    return make_cache(4).load()


class TestExecuteSlot:
    """Tests for a single slot run."""

    @pytest.mark.asyncio
    async def test_success_outcome(self, creds):
        slot = WorkerSlot(1, creds[0], make_module("Alpha"))
        outcome = await execute_slot(slot)
        assert outcome.success is True
        assert outcome.account_id == creds[0].account_id
        assert outcome.module_name == "Alpha"
        assert outcome.tx_hash == "0xabc"
        assert outcome.elapsed >= 0

    @pytest.mark.asyncio
    async def test_exception_becomes_failed_outcome(self, creds):
        slot = WorkerSlot(2, creds[1], make_module("Boom", error=RuntimeError("rpc down")))
        outcome = await execute_slot(slot)
        assert outcome.success is False
        assert outcome.error == "rpc down"
        assert outcome.slot_index == 2

    @pytest.mark.asyncio
    async def test_skipped_drops_error(self, creds):
        result = ModuleResult(success=False, skipped=True, error="not available", reason="cooldown")
        outcome = await execute_slot(WorkerSlot(1, creds[0], make_module("Skip", result=result)))
        assert outcome.skipped is True
        assert outcome.ok is True
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_warmup_delay_applied(self, creds):
        module = make_module("Swap", warmup_delay=2.0)
        with patch("rotator.orchestrator.dispatch.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await execute_slot(WorkerSlot(1, creds[0], module))
        sleep.assert_awaited_once_with(2.0)

    @pytest.mark.asyncio
    async def test_no_warmup_no_sleep(self, creds):
        with patch("rotator.orchestrator.dispatch.asyncio.sleep", new_callable=AsyncMock) as sleep:
            await execute_slot(WorkerSlot(1, creds[0], make_module("Alpha")))
        sleep.assert_not_awaited()


class TestExecuteSlots:
    """Tests for the concurrent join."""

    @pytest.mark.asyncio
    async def test_one_failure_does_not_cancel_siblings(self, creds):
        calls = []
        modules = [
            make_module("A", calls=calls),
            make_module("B", error=ValueError("bad"), calls=calls),
            make_module("C", calls=calls),
            make_module("D", calls=calls),
        ]
        slots = [WorkerSlot(i + 1, creds[i], m) for i, m in enumerate(modules)]
        outcomes = await execute_slots(slots)

        assert len(outcomes) == 4
        assert [o.success for o in outcomes] == [True, False, True, True]
        assert outcomes[1].error == "bad"
        assert len(calls) == 4

    @pytest.mark.asyncio
    async def test_warmup_does_not_hold_back_other_slots(self, creds):
        """A slot warming up does not delay its siblings' executors."""
        calls = []
        slots = [
            WorkerSlot(1, creds[0], make_module("Warm", warmup_delay=0.05, calls=calls)),
            WorkerSlot(2, creds[1], make_module("Plain", calls=calls)),
        ]
        outcomes = await execute_slots(slots)

        assert [name for name, _ in calls] == ["Plain", "Warm"]
        assert [o.module_name for o in outcomes] == ["Warm", "Plain"]
        assert all(o.success for o in outcomes)


class TestSummarize:
    """Tests for tallies and per-module breakdown."""

    def _outcome(self, module, success=True, skipped=False):
        return ExecutionOutcome(success=success, skipped=skipped, account_id="0x1", module_name=module)

    def test_counts_sum_to_dispatched(self):
        outcomes = [
            self._outcome("A"),
            self._outcome("A", success=False),
            self._outcome("B", success=False, skipped=True),
            self._outcome("B"),
            self._outcome("C", success=False),
        ]
        summary = summarize(outcomes, elapsed=1.5, iteration=3)
        assert summary.dispatched == 5
        assert summary.succeeded + summary.skipped + summary.failed == 5
        assert (summary.succeeded, summary.skipped, summary.failed) == (2, 1, 2)
        assert summary.ok == 3
        assert summary.iteration == 3

    def test_skipped_counts_as_ok_per_module(self):
        summary = summarize(
            [self._outcome("B", success=False, skipped=True), self._outcome("B", success=False)],
            elapsed=0,
        )
        stats = summary.per_module["B"]
        assert (stats.ok, stats.failed) == (1, 1)
        assert stats.success_rate == 50.0

    def test_error_text_never_turns_failure_into_success(self):
        outcome = ExecutionOutcome(
            success=False, account_id="0x1", module_name="Check-in", error="Check not available"
        )
        summary = summarize([outcome], elapsed=0)
        assert summary.failed == 1
        assert summary.ok == 0

    def test_empty(self):
        summary = summarize([], elapsed=0)
        assert summary.dispatched == 0
        assert summary.per_module == {}
