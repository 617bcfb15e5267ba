"""Closed enumerations shared across the evaluation engine."""

from enum import Enum


class ChallengeType(str, Enum):
    """Funding program type.

    Values are the labels used by the UI and in persisted workspaces.
    """
    INSTANT = "Instant"
    TWO_STEP = "2-Step"
    THREE_STEP = "3-Step"
    PERSONAL = "Personal"

    @property
    def required_steps(self) -> int:
        """Number of step configs an account of this type must carry."""
        if self is ChallengeType.TWO_STEP:
            return 2
        if self is ChallengeType.THREE_STEP:
            return 3
        return 1


class TradeOutcome(str, Enum):
    """Result of a logged trade."""
    WIN = "win"
    LOSS = "loss"
    BREAK_EVEN = "be"
    PENDING = "pending"

    def signed_profit(self, amount: float) -> float:
        """
        Force *amount* onto the sign convention for this outcome.

        loss -> negative, win -> non-negative, be -> zero, pending -> unchanged.
        """
        if self is TradeOutcome.LOSS:
            return -abs(float(amount))
        if self is TradeOutcome.WIN:
            return abs(float(amount))
        if self is TradeOutcome.BREAK_EVEN:
            return 0.0
        return float(amount)


class AlertSeverity(str, Enum):
    NONE = "none"
    WARNING = "warning"
    CRITICAL = "critical"
