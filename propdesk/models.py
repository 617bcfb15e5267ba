"""Account and trade records.

Every record is a frozen dataclass. The engine hands out these values and
replaces them wholesale on mutation (``dataclasses.replace``), so nothing a
caller holds can alias engine state.

``to_dict()`` / ``from_dict()`` produce plain JSON-compatible dicts for the
workspace journal.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable

from propdesk.types import ChallengeType, TradeOutcome


__all__ = [
    "FUNDED_PHASE",
    "Account",
    "RiskLimits",
    "StepConfig",
    "StepTargets",
    "Trade",
    "TradeDraft",
]


FUNDED_PHASE = 4


@dataclass(frozen=True)
class StepConfig:
    """Targets for one evaluation step, both in percent of starting balance."""
    profit_target: float
    daily_drawdown_limit: float

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StepConfig:
        return cls(
            profit_target=float(d["profit_target"]),
            daily_drawdown_limit=float(d["daily_drawdown_limit"]),
        )


@dataclass(frozen=True)
class StepTargets:
    step1: StepConfig
    step2: StepConfig | None = None
    step3: StepConfig | None = None

    def for_step(self, step: int) -> StepConfig | None:
        """Config for *step* (1-3), or ``None`` if that step is not part of the program."""
        if step == 1:
            return self.step1
        if step == 2:
            return self.step2
        if step == 3:
            return self.step3
        return None

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StepTargets:
        def _opt(key: str) -> StepConfig | None:
            raw = d.get(key)
            return StepConfig.from_dict(raw) if raw else None

        return cls(step1=StepConfig.from_dict(d["step1"]), step2=_opt("step2"), step3=_opt("step3"))


@dataclass(frozen=True)
class RiskLimits:
    """Daily behavioural limits, fixed when the account is created."""
    max_losses_per_day: int = 3
    max_consecutive_losses: int = 2
    daily_profit_goal: float = 500.0
    max_trades_per_day: int = 5

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> RiskLimits:
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class Account:
    """One funding-program instance.

    ``balance`` is phase-relative: it restarts from ``starting_balance`` each
    time the account advances. ``last_passed_step`` is the highest step whose
    target already fired a pass; it never decreases.
    """
    id: str
    name: str
    type: ChallengeType
    starting_balance: float
    balance: float
    daily_starting_balance: float
    max_drawdown_percent: float
    step_targets: StepTargets
    current_step: int = 1
    last_passed_step: int | None = None
    is_funded: bool = False
    risk_limits: RiskLimits = field(default_factory=RiskLimits)

    @property
    def stage(self) -> int:
        """Phase number stamped on new trades: the current step, or 4 once funded."""
        return FUNDED_PHASE if self.is_funded else self.current_step

    @property
    def current_step_config(self) -> StepConfig | None:
        return self.step_targets.for_step(self.current_step)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["type"] = self.type.value
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Account:
        return cls(
            id=str(d["id"]),
            name=str(d["name"]),
            type=ChallengeType(d["type"]),
            starting_balance=float(d["starting_balance"]),
            balance=float(d["balance"]),
            daily_starting_balance=float(d.get("daily_starting_balance", d["starting_balance"])),
            max_drawdown_percent=float(d.get("max_drawdown_percent", 10.0)),
            step_targets=StepTargets.from_dict(d["step_targets"]),
            current_step=int(d.get("current_step", 1)),
            last_passed_step=d.get("last_passed_step"),
            is_funded=bool(d.get("is_funded", False)),
            risk_limits=RiskLimits.from_dict(d.get("risk_limits") or {}),
        )


@dataclass(frozen=True)
class Trade:
    """A journal entry. ``phase`` is stamped at creation and never changes."""
    id: str
    account_id: str
    date: str  # ISO instant
    symbol: str
    strategy: str
    entry_model: str
    outcome: TradeOutcome
    profit_amount: float  # signed, agrees with outcome
    phase: int  # 1-3 for steps, 4 for funded
    entry_price: float = 0.0
    stop_loss: float = 0.0
    take_profit: float = 0.0
    confluences: tuple[str, ...] = ()
    notes: str = ""

    @property
    def risk_reward(self) -> float:
        """Planned reward-to-risk ratio from entry, stop and target (0 if the stop is at entry)."""
        risk = abs(self.entry_price - self.stop_loss)
        if risk <= 0.0:
            return 0.0
        return abs(self.take_profit - self.entry_price) / risk

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["outcome"] = self.outcome.value
        d["confluences"] = list(self.confluences)
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Trade:
        kwargs = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        kwargs["outcome"] = TradeOutcome(kwargs["outcome"])
        kwargs["confluences"] = tuple(kwargs.get("confluences") or ())
        return cls(**kwargs)


def _split_confluences(value: str | Iterable[str] | None) -> tuple[str, ...]:
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(c.strip() for c in items if c and c.strip())


@dataclass(frozen=True)
class TradeDraft:
    """User input for logging or editing a trade.

    ``profit_amount`` may be given as a bare magnitude; the ledger applies the
    outcome's sign convention. ``date`` of ``None`` means "now".
    """
    outcome: TradeOutcome = TradeOutcome.PENDING
    profit_amount: float = 0.0
    symbol: str = ""
    strategy: str = ""
    entry_model: str = ""
    entry_price: float = 0.0
    stop_loss: float = 0.0
    take_profit: float = 0.0
    confluences: tuple[str, ...] = ()
    date: str | None = None
    account_id: str | None = None
    notes: str = ""

    def __post_init__(self):
        object.__setattr__(self, "outcome", TradeOutcome(self.outcome))
        object.__setattr__(self, "profit_amount", float(self.profit_amount or 0.0))
        object.__setattr__(self, "confluences", _split_confluences(self.confluences))

    @classmethod
    def from_trade(cls, trade: Trade, **changes: Any) -> TradeDraft:
        """Start an edit from an existing trade, overriding *changes*."""
        base = dict(
            outcome=trade.outcome,
            profit_amount=trade.profit_amount,
            symbol=trade.symbol,
            strategy=trade.strategy,
            entry_model=trade.entry_model,
            entry_price=trade.entry_price,
            stop_loss=trade.stop_loss,
            take_profit=trade.take_profit,
            confluences=trade.confluences,
            date=trade.date,
            account_id=trade.account_id,
            notes=trade.notes,
        )
        base.update(changes)
        return cls(**base)
