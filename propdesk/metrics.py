"""Read-only performance reporting over a phase's trades."""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable

import numpy as np

from propdesk.models import FUNDED_PHASE, Account, Trade
from propdesk.time_utils import utc_day
from propdesk.types import TradeOutcome


__all__ = [
    "PhaseMetrics",
    "StrategyStats",
    "compute_phase_metrics",
    "daily_pnl",
    "equity_curve",
    "max_drawdown",
    "monthly_pnl",
    "strategy_breakdown",
]


# Fallbacks used when the viewed phase has no step config (e.g. funded).
DEFAULT_PROFIT_TARGET_PCT = 10.0
DEFAULT_DAILY_DRAWDOWN_PCT = 5.0


@dataclass(frozen=True)
class PhaseMetrics:
    """Progress of one account through one phase."""
    phase: int
    trades: int
    wins: int
    losses: int
    break_even: int
    win_rate: float  # percent
    pnl: float
    profit_target: float
    target_progress: float  # fraction of target reached, floored at 0
    daily_pnl: float
    daily_loss_limit: float
    max_drawdown_limit: float
    current_drawdown: float
    equity_max_drawdown: float  # <= 0
    can_advance: bool


@dataclass(frozen=True)
class StrategyStats:
    strategy: str
    entry_model: str
    count: int
    wins: int
    win_rate: float  # percent
    pnl: float
    avg_risk_reward: float


def equity_curve(starting_balance: float, trades: Iterable[Trade]) -> np.ndarray:
    """Balance after each trade, with the starting balance as the first point."""
    pnl = np.fromiter((t.profit_amount for t in trades), dtype=np.float64)
    return np.concatenate(([float(starting_balance)], float(starting_balance) + np.cumsum(pnl)))


def max_drawdown(equity: np.ndarray | list[float]) -> float:
    """Largest peak-to-trough fall of an equity curve (negative number, 0 if none)."""
    eq = np.asarray(equity, dtype=np.float64)
    if eq.size == 0:
        return 0.0
    peaks = np.maximum.accumulate(eq)
    return float(np.min(eq - peaks))


def daily_pnl(trades: Iterable[Trade]) -> dict[date, float]:
    """Net P&L per UTC calendar day, in date order."""
    by_day: dict[date, float] = defaultdict(float)
    for t in trades:
        by_day[utc_day(t.date)] += t.profit_amount
    return dict(sorted(by_day.items()))


def monthly_pnl(trades: Iterable[Trade], year: int, month: int) -> float:
    return float(
        sum(v for d, v in daily_pnl(trades).items() if d.year == year and d.month == month)
    )


def strategy_breakdown(trades: Iterable[Trade]) -> list[StrategyStats]:
    """Group trades by (strategy, entry model), best P&L first."""
    groups: dict[tuple[str, str], list[Trade]] = defaultdict(list)
    for t in trades:
        groups[(t.strategy, t.entry_model)].append(t)

    out: list[StrategyStats] = []
    for (strategy, model), group in groups.items():
        wins = sum(1 for t in group if t.outcome is TradeOutcome.WIN)
        out.append(
            StrategyStats(
                strategy=strategy,
                entry_model=model,
                count=len(group),
                wins=wins,
                win_rate=wins / len(group) * 100.0,
                pnl=float(sum(t.profit_amount for t in group)),
                avg_risk_reward=float(np.mean([t.risk_reward for t in group])),
            )
        )
    out.sort(key=lambda s: s.pnl, reverse=True)
    return out


def compute_phase_metrics(
    account: Account, trades: Iterable[Trade], phase: int, today: date
) -> PhaseMetrics:
    """
    Dashboard figures for *account* in *phase*.

    Args:
        account: The account being reported on
        trades: Any trades; only those of this account stamped with *phase* count
        phase: 1-3 for a step, 4 for funded
        today: UTC date used for the daily figures

    Returns:
        PhaseMetrics for the phase
    """
    phase_trades = [t for t in trades if t.account_id == account.id and t.phase == phase]

    wins = sum(1 for t in phase_trades if t.outcome is TradeOutcome.WIN)
    losses = sum(1 for t in phase_trades if t.outcome is TradeOutcome.LOSS)
    be = sum(1 for t in phase_trades if t.outcome is TradeOutcome.BREAK_EVEN)
    n = len(phase_trades)
    pnl = float(sum(t.profit_amount for t in phase_trades))

    cfg = account.step_targets.for_step(phase) if phase != FUNDED_PHASE else None
    target_pct = cfg.profit_target if cfg else DEFAULT_PROFIT_TARGET_PCT
    dd_pct = cfg.daily_drawdown_limit if cfg else DEFAULT_DAILY_DRAWDOWN_PCT

    target = account.starting_balance * target_pct / 100.0
    today_pnl = float(sum(t.profit_amount for t in phase_trades if utc_day(t.date) == today))

    is_current = phase == account.stage
    curve = equity_curve(account.starting_balance, phase_trades)

    return PhaseMetrics(
        phase=phase,
        trades=n,
        wins=wins,
        losses=losses,
        break_even=be,
        win_rate=(wins / n * 100.0) if n else 0.0,
        pnl=pnl,
        profit_target=target,
        target_progress=max(0.0, pnl / target) if target > 0 else 0.0,
        daily_pnl=today_pnl,
        daily_loss_limit=account.daily_starting_balance * dd_pct / 100.0,
        max_drawdown_limit=account.starting_balance * account.max_drawdown_percent / 100.0,
        current_drawdown=abs(min(0.0, pnl)),
        equity_max_drawdown=max_drawdown(curve),
        can_advance=is_current and not account.is_funded and pnl >= target,
    )
