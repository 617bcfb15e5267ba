"""Daily behavioural risk guard.

Stateless: the status is recomputed from the trade journal on every call.
"Today" is a UTC calendar date.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from propdesk.models import Account, Trade
from propdesk.time_utils import parse_timestamp
from propdesk.types import AlertSeverity, TradeOutcome

log = logging.getLogger(__name__)


__all__ = [
    "RiskStatus",
    "consecutive_losses",
    "evaluate",
    "today_trades",
]


@dataclass(frozen=True)
class RiskStatus:
    message: str
    severity: AlertSeverity

    @property
    def is_locked(self) -> bool:
        """Critical alerts lock further execution for the day."""
        return self.severity is AlertSeverity.CRITICAL

    @classmethod
    def clear(cls) -> "RiskStatus":
        return cls(message="", severity=AlertSeverity.NONE)


def today_trades(account_id: str, trades: Iterable[Trade], today: date) -> list[Trade]:
    """Trades of *account_id* dated on *today* (UTC), oldest first.

    Ordered by trade timestamp; trades with equal timestamps keep log order.
    """
    dated = [
        (parse_timestamp(t.date), i, t)
        for i, t in enumerate(trades)
        if t.account_id == account_id
    ]
    return [t for ts, _, t in sorted(dated, key=lambda x: (x[0], x[1])) if ts.date() == today]


def consecutive_losses(trades: Sequence[Trade]) -> int:
    """
    Length of the current losing streak, walking newest to oldest.

    Only a win ends the streak. Break-even and pending entries are stepped
    over without resetting it.
    """
    streak = 0
    for t in reversed(trades):
        if t.outcome is TradeOutcome.LOSS:
            streak += 1
        elif t.outcome is TradeOutcome.WIN:
            break
    return streak


def evaluate(account: Account, trades: Iterable[Trade], today: date) -> RiskStatus:
    """
    Classify the account's behavioural risk for *today*.

    Checks run in priority order and the first match wins:
      1. trade count at or above ``max_trades_per_day`` (critical)
      2. losses at or above ``max_losses_per_day`` (critical)
      3. losing streak at or above ``max_consecutive_losses`` (warning)
    """
    limits = account.risk_limits
    todays = today_trades(account.id, trades, today)
    losses = sum(1 for t in todays if t.outcome is TradeOutcome.LOSS)

    if len(todays) >= limits.max_trades_per_day:
        status = RiskStatus(
            message=f"Daily trade limit ({limits.max_trades_per_day}) reached. Execution locked.",
            severity=AlertSeverity.CRITICAL,
        )
    elif losses >= limits.max_losses_per_day:
        status = RiskStatus(
            message=f"Daily loss limit ({limits.max_losses_per_day}) reached. Risk guard active.",
            severity=AlertSeverity.CRITICAL,
        )
    else:
        streak = consecutive_losses(todays)
        if streak >= limits.max_consecutive_losses:
            status = RiskStatus(
                message=f"Loss streak: {streak} in a row. Take a 30-minute break.",
                severity=AlertSeverity.WARNING,
            )
        else:
            status = RiskStatus.clear()

    log.debug(
        "Risk status for %s on %s: %s (%d trades, %d losses)",
        account.id, today.isoformat(), status.severity.value, len(todays), losses,
    )
    return status
