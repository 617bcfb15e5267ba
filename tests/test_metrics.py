"""Tests for propdesk.metrics – phase reporting."""

from datetime import date

import numpy as np
import pytest

from propdesk.metrics import (
    compute_phase_metrics,
    daily_pnl,
    equity_curve,
    max_drawdown,
    monthly_pnl,
    strategy_breakdown,
)
from propdesk.models import Account, StepConfig, StepTargets, Trade
from propdesk.types import ChallengeType, TradeOutcome


TODAY = date(2025, 1, 15)


def _account(**overrides):
    defaults = dict(
        id="acc-1",
        name="Test",
        type=ChallengeType.TWO_STEP,
        starting_balance=100_000.0,
        balance=100_000.0,
        daily_starting_balance=100_000.0,
        max_drawdown_percent=10.0,
        step_targets=StepTargets(step1=StepConfig(8.0, 5.0), step2=StepConfig(5.0, 4.0)),
    )
    defaults.update(overrides)
    return Account(**defaults)


def _trade(outcome, amount, date="2025-01-15T10:00:00Z", phase=1, strategy="Breakout", model="FVG", **kw):
    outcome = TradeOutcome(outcome)
    return Trade(
        id=kw.pop("id", "t"),
        account_id=kw.pop("account_id", "acc-1"),
        date=date,
        symbol="EURUSD",
        strategy=strategy,
        entry_model=model,
        outcome=outcome,
        profit_amount=outcome.signed_profit(amount),
        phase=phase,
        **kw,
    )


# ---------------------------------------------------------------------------
# Equity curve and drawdown
# ---------------------------------------------------------------------------

class TestEquity:

    def test_equity_curve_starts_at_balance(self):
        curve = equity_curve(1_000.0, [_trade("win", 100.0), _trade("loss", 50.0)])
        np.testing.assert_allclose(curve, [1_000.0, 1_100.0, 1_050.0])

    def test_equity_curve_without_trades(self):
        np.testing.assert_allclose(equity_curve(1_000.0, []), [1_000.0])

    def test_max_drawdown(self):
        assert max_drawdown([100.0, 120.0, 90.0, 130.0, 125.0]) == pytest.approx(-30.0)

    def test_max_drawdown_monotonic_rise(self):
        assert max_drawdown([1.0, 2.0, 3.0]) == 0.0

    def test_max_drawdown_empty(self):
        assert max_drawdown([]) == 0.0


# ---------------------------------------------------------------------------
# Calendar aggregation
# ---------------------------------------------------------------------------

class TestCalendar:

    def test_daily_pnl_buckets_by_utc_day(self):
        trades = [
            _trade("win", 200.0, date="2025-01-14T23:30:00-05:00"),  # 15th in UTC
            _trade("loss", 50.0, date="2025-01-15T09:00:00Z"),
            _trade("win", 75.0, date="2025-01-13T09:00:00Z"),
        ]
        assert daily_pnl(trades) == {date(2025, 1, 13): 75.0, date(2025, 1, 15): 150.0}
        assert list(daily_pnl(trades)) == [date(2025, 1, 13), date(2025, 1, 15)]

    def test_monthly_pnl(self):
        trades = [
            _trade("win", 200.0, date="2025-01-02T10:00:00Z"),
            _trade("loss", 50.0, date="2025-01-31T10:00:00Z"),
            _trade("win", 999.0, date="2025-02-01T10:00:00Z"),
        ]
        assert monthly_pnl(trades, 2025, 1) == pytest.approx(150.0)
        assert monthly_pnl(trades, 2024, 1) == 0.0


# ---------------------------------------------------------------------------
# Strategy breakdown
# ---------------------------------------------------------------------------

class TestStrategyBreakdown:

    def test_groups_and_sorts_by_pnl(self):
        trades = [
            _trade("win", 300.0, strategy="Breakout", model="FVG", entry_price=1.10, stop_loss=1.09, take_profit=1.13),
            _trade("loss", 100.0, strategy="Breakout", model="FVG", entry_price=1.10, stop_loss=1.09, take_profit=1.11),
            _trade("win", 900.0, strategy="Reversal", model="OB"),
        ]
        stats = strategy_breakdown(trades)
        assert [(s.strategy, s.entry_model) for s in stats] == [("Reversal", "OB"), ("Breakout", "FVG")]

        breakout = stats[1]
        assert breakout.count == 2
        assert breakout.wins == 1
        assert breakout.win_rate == pytest.approx(50.0)
        assert breakout.pnl == pytest.approx(200.0)
        assert breakout.avg_risk_reward == pytest.approx(2.0)

    def test_empty(self):
        assert strategy_breakdown([]) == []


# ---------------------------------------------------------------------------
# compute_phase_metrics
# ---------------------------------------------------------------------------

class TestPhaseMetrics:

    def test_current_phase(self):
        trades = [
            _trade("win", 6_000.0, date="2025-01-15T09:00:00Z"),
            _trade("loss", 1_000.0, date="2025-01-14T09:00:00Z"),
            _trade("be", 0.0, date="2025-01-15T11:00:00Z"),
            _trade("win", 4_000.0, phase=2),
            _trade("win", 4_000.0, account_id="acc-2"),
        ]
        m = compute_phase_metrics(_account(), trades, 1, TODAY)
        assert m.trades == 3
        assert (m.wins, m.losses, m.break_even) == (1, 1, 1)
        assert m.win_rate == pytest.approx(100.0 / 3)
        assert m.pnl == pytest.approx(5_000.0)
        assert m.profit_target == pytest.approx(8_000.0)
        assert m.target_progress == pytest.approx(0.625)
        assert m.daily_pnl == pytest.approx(6_000.0)
        assert m.daily_loss_limit == pytest.approx(5_000.0)
        assert m.max_drawdown_limit == pytest.approx(10_000.0)
        assert m.current_drawdown == 0.0
        assert m.equity_max_drawdown == pytest.approx(-1_000.0)
        assert m.can_advance is False

    def test_can_advance_at_target(self):
        m = compute_phase_metrics(_account(), [_trade("win", 8_000.0)], 1, TODAY)
        assert m.can_advance is True
        assert m.target_progress == pytest.approx(1.0)

    def test_past_phase_cannot_advance(self):
        m = compute_phase_metrics(_account(current_step=2), [_trade("win", 9_000.0)], 1, TODAY)
        assert m.can_advance is False

    def test_losing_phase(self):
        m = compute_phase_metrics(_account(), [_trade("loss", 2_500.0)], 1, TODAY)
        assert m.current_drawdown == pytest.approx(2_500.0)
        assert m.target_progress == 0.0

    def test_second_step_uses_its_own_config(self):
        m = compute_phase_metrics(_account(current_step=2), [], 2, TODAY)
        assert m.profit_target == pytest.approx(5_000.0)
        assert m.daily_loss_limit == pytest.approx(4_000.0)
        assert m.trades == 0
        assert m.win_rate == 0.0

    def test_funded_phase_falls_back_to_defaults(self):
        account = _account(current_step=2, is_funded=True)
        m = compute_phase_metrics(account, [_trade("win", 20_000.0, phase=4)], 4, TODAY)
        assert m.profit_target == pytest.approx(10_000.0)
        assert m.daily_loss_limit == pytest.approx(5_000.0)
        assert m.can_advance is False
