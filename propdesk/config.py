from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from propdesk.errors import ValidationError
from propdesk.models import RiskLimits, StepConfig, StepTargets
from propdesk.types import ChallengeType


DEFAULT_MAX_DRAWDOWN_PERCENT = 10.0
DEFAULT_RISK_LIMITS = RiskLimits(
    max_losses_per_day=3,
    max_consecutive_losses=2,
    daily_profit_goal=500.0,
    max_trades_per_day=5,
)


def _positive(value: Any, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{what} is missing or not numeric") from exc
    if number <= 0.0:
        raise ValidationError(f"{what} must be greater than zero")
    return number


def _step(raw: Mapping[str, Any] | StepConfig | None, step: int) -> StepConfig:
    if not raw:
        raise ValidationError(f"Step {step} profit target and daily drawdown are required")
    if isinstance(raw, StepConfig):
        raw = {"profit_target": raw.profit_target, "daily_drawdown_limit": raw.daily_drawdown_limit}
    elif not isinstance(raw, Mapping):
        raise ValidationError(f"Step {step} targets must be a mapping, got {type(raw).__name__}")
    return StepConfig(
        profit_target=_positive(raw.get("profit_target"), f"Step {step} profit target"),
        daily_drawdown_limit=_positive(raw.get("daily_drawdown_limit"), f"Step {step} daily drawdown"),
    )


@dataclass(frozen=True)
class AccountConfig:
    """Validated account-creation input."""
    name: str
    type: ChallengeType
    starting_balance: float
    step_targets: StepTargets
    max_drawdown_percent: float = DEFAULT_MAX_DRAWDOWN_PERCENT

    @classmethod
    def from_raw(
        cls,
        *,
        name: str | None = None,
        type: str | ChallengeType | None = None,
        starting_balance: Any = None,
        step_targets: Mapping[str, Any] | None = None,
        max_drawdown_percent: Any = DEFAULT_MAX_DRAWDOWN_PERCENT,
    ) -> AccountConfig:
        """Validate and construct from raw form values.

        Raises ``ValidationError`` with a user-facing message on bad or
        missing values instead of letting ``KeyError`` or ``TypeError``
        propagate. Step configs beyond what the program type uses are
        ignored.
        """
        if not name or not str(name).strip():
            raise ValidationError("Account name is required")

        if type is None:
            raise ValidationError("Account type is required")
        try:
            challenge = ChallengeType(type)
        except ValueError as exc:
            raise ValidationError(f"Unknown account type: {type!r}") from exc

        try:
            balance = float(starting_balance)
        except (TypeError, ValueError) as exc:
            raise ValidationError("Valid starting balance is required") from exc
        if balance <= 0.0:
            raise ValidationError("Valid starting balance is required")

        steps = step_targets or {}
        if isinstance(steps, StepTargets):
            steps = {"step1": steps.step1, "step2": steps.step2, "step3": steps.step3}
        if not isinstance(steps, Mapping):
            raise ValidationError("Step targets must be a mapping of step1..step3")
        if challenge is ChallengeType.THREE_STEP and not all(steps.get(f"step{n}") for n in (1, 2, 3)):
            raise ValidationError("All 3 steps' profit targets and daily drawdowns are required")

        step1 = _step(steps.get("step1"), 1)
        step2 = _step(steps.get("step2"), 2) if challenge.required_steps >= 2 else None
        step3 = _step(steps.get("step3"), 3) if challenge.required_steps >= 3 else None

        return cls(
            name=str(name).strip(),
            type=challenge,
            starting_balance=balance,
            step_targets=StepTargets(step1=step1, step2=step2, step3=step3),
            max_drawdown_percent=_positive(max_drawdown_percent, "Max drawdown"),
        )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> AccountConfig:
        """Validate a raw form mapping. Absent fields are reported as missing
        and keys that are not account fields are ignored.
        """
        if not isinstance(raw, Mapping):
            raise ValidationError("Account details must be a mapping")
        return cls.from_raw(
            name=raw.get("name"),
            type=raw.get("type"),
            starting_balance=raw.get("starting_balance"),
            step_targets=raw.get("step_targets"),
            max_drawdown_percent=raw.get("max_drawdown_percent", DEFAULT_MAX_DRAWDOWN_PERCENT),
        )


@dataclass(frozen=True)
class EngineConfig:
    # Edits never re-check phase completion unless this is set.
    reevaluate_on_edit: bool = False
    default_risk_limits: RiskLimits = field(default_factory=lambda: DEFAULT_RISK_LIMITS)
