"""Tests for propdesk.journal – workspace persistence."""

import json
import logging

import pytest

from propdesk.journal import WorkspaceJournal, WorkspaceSnapshot
from propdesk.models import Account, RiskLimits, StepConfig, StepTargets, Trade
from propdesk.types import ChallengeType, TradeOutcome


def _snapshot():
    account = Account(
        id="acc-1",
        name="Apex 100k",
        type=ChallengeType.TWO_STEP,
        starting_balance=100_000.0,
        balance=100_000.0,
        daily_starting_balance=100_000.0,
        max_drawdown_percent=10.0,
        step_targets=StepTargets(step1=StepConfig(8.0, 5.0), step2=StepConfig(5.0, 5.0)),
        current_step=2,
        last_passed_step=1,
        risk_limits=RiskLimits(max_trades_per_day=4),
    )
    trade = Trade(
        id="t1",
        account_id="acc-1",
        date="2025-01-15T10:00:00+00:00",
        symbol="EURUSD",
        strategy="Breakout",
        entry_model="FVG",
        outcome=TradeOutcome.WIN,
        profit_amount=8_000.0,
        phase=1,
        confluences=("FVG", "OB"),
    )
    return WorkspaceSnapshot(
        accounts=[account], trades=[trade], last_active_account_id="acc-1", last_active_tab="journal"
    )


class TestWorkspaceJournal:

    def test_save_and_load(self, tmp_path):
        journal = WorkspaceJournal(tmp_path / "journal")
        snap = _snapshot()
        journal.save("user-1", snap)
        assert journal.load("user-1") == snap

    def test_load_missing_returns_none(self, tmp_path):
        assert WorkspaceJournal(tmp_path).load("nobody") is None

    def test_save_leaves_no_tmp_file(self, tmp_path):
        journal = WorkspaceJournal(tmp_path)
        journal.save("user-1", _snapshot())
        assert [p.name for p in tmp_path.iterdir()] == ["workspace_user-1.json"]

    def test_file_is_plain_json(self, tmp_path):
        journal = WorkspaceJournal(tmp_path)
        journal.save("user-1", _snapshot())
        data = json.loads(journal.path_for("user-1").read_text())
        assert data["accounts"][0]["type"] == "2-Step"
        assert data["trades"][0]["outcome"] == "win"
        assert data["trades"][0]["confluences"] == ["FVG", "OB"]

    def test_corrupt_file_returns_none(self, tmp_path, caplog):
        journal = WorkspaceJournal(tmp_path)
        journal.path_for("user-1").write_text("{not json")
        with caplog.at_level(logging.ERROR, logger="propdesk.journal"):
            assert journal.load("user-1") is None
        assert "Failed to load workspace" in caplog.text

    def test_path_is_sanitised(self, tmp_path):
        path = WorkspaceJournal(tmp_path).path_for("a/b c@d")
        assert path.parent == tmp_path
        assert path.name == "workspace_a_b_c_d.json"

    @pytest.mark.parametrize("user_id", ["", "  "])
    def test_user_id_required(self, tmp_path, user_id):
        with pytest.raises(ValueError):
            WorkspaceJournal(tmp_path).path_for(user_id)

    def test_clear(self, tmp_path):
        journal = WorkspaceJournal(tmp_path)
        journal.save("user-1", _snapshot())
        journal.clear("user-1")
        assert journal.load("user-1") is None
        journal.clear("user-1")

    def test_users_are_isolated(self, tmp_path):
        journal = WorkspaceJournal(tmp_path)
        journal.save("user-1", _snapshot())
        assert journal.load("user-2") is None


class TestWorkspaceSnapshot:

    def test_from_dict_tolerates_missing_lists(self):
        snap = WorkspaceSnapshot.from_dict({})
        assert snap.accounts == []
        assert snap.trades == []
        assert snap.last_active_account_id is None

    def test_legacy_account_defaults(self):
        raw = _snapshot().to_dict()
        acc = raw["accounts"][0]
        for key in ("daily_starting_balance", "risk_limits", "last_passed_step", "is_funded"):
            acc.pop(key)
        account = WorkspaceSnapshot.from_dict(raw).accounts[0]
        assert account.daily_starting_balance == account.starting_balance
        assert account.risk_limits == RiskLimits()
        assert account.last_passed_step is None
        assert account.is_funded is False
