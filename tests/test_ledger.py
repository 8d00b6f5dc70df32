"""
Tests for the daily activity ledger.
"""
from datetime import timedelta

from tests.common import make_cache


class TestDailyActivityLedger:
    """Tests for the needs-activity-today partition."""

    def test_unmarked_account_needs_activity(self, ledger):
        creds = make_cache(3).load()
        needs, done = ledger.partition(creds)
        assert needs == creds
        assert done == []

    def test_marked_account_moves_to_done(self, ledger):
        creds = make_cache(3).load()
        ledger.mark_active(creds[1].account_id)
        needs, done = ledger.partition(creds)
        assert [c.account_id for c in needs] == [creds[0].account_id, creds[2].account_id]
        assert done == [creds[1]]

    def test_mark_expires_next_day(self, ledger, clock):
        creds = make_cache(1).load()
        ledger.mark_active(creds[0].account_id)
        assert ledger.is_active_today(creds[0].account_id)
        clock.today = clock.today + timedelta(days=1)
        assert not ledger.is_active_today(creds[0].account_id)

    def test_prioritize_pads_from_done(self, ledger):
        creds = make_cache(4).load()
        ledger.mark_active(creds[0].account_id)
        ledger.mark_active(creds[1].account_id)
        picked = ledger.prioritize(creds, 3)
        assert picked == [creds[2], creds[3], creds[0]]
