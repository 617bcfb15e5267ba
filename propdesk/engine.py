"""
Evaluation engine: the single owner of a workspace's accounts and trades.

All mutation goes through the operations below. Each one runs to
completion before returning: a recorded trade's balance update and its
phase check are applied together, and events are published only after the
new state is in place.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Mapping

from propdesk import guard
from propdesk.config import AccountConfig, EngineConfig
from propdesk.errors import NoActiveAccount
from propdesk.events import EventDispatcher, PhaseAdvancedEvent, PhasePassedEvent
from propdesk.journal import WorkspaceSnapshot
from propdesk.ledger import Ledger
from propdesk.metrics import PhaseMetrics, compute_phase_metrics
from propdesk.models import Account, Trade, TradeDraft
from propdesk.phase import PhaseEvaluator
from propdesk.time_utils import now_utc, parse_timestamp

log = logging.getLogger(__name__)


__all__ = ["EvaluationEngine", "TradeResult"]


def _uuid_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class TradeResult:
    """Outcome of a trade create/edit.

    ``phase_passed`` is set when this call pushed the account over its
    current step's target for the first time.
    """
    trade: Trade
    account: Account
    phase_passed: PhasePassedEvent | None = None


class EvaluationEngine:
    """
    Orchestrates the ledger, phase evaluator and risk guard for one workspace.

    Dependencies are injected so tests can pin them:
      - ``id_factory``: returns a new unique id (default: random UUID hex)
      - ``clock``: returns the current time (default: now in UTC)
      - ``dispatcher``: receives phase events (default: a private dispatcher)
    """

    def __init__(
        self,
        *,
        config: EngineConfig | None = None,
        id_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] | None = None,
        dispatcher: EventDispatcher | None = None,
        phase_evaluator: PhaseEvaluator | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.dispatcher = dispatcher or EventDispatcher()
        self._new_id = id_factory or _uuid_id
        self._clock = clock or now_utc
        self._phases = phase_evaluator or PhaseEvaluator()
        self._ledger = Ledger(clock=self._now)
        self._accounts: dict[str, Account] = {}
        self._selected_id: str | None = None
        self.last_active_tab: str | None = None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_account(self, config: AccountConfig | Mapping[str, Any]) -> Account:
        """Validate *config* and open a new account at step 1.

        Raises:
            ValidationError: on missing or invalid fields (nothing is created)
        """
        if not isinstance(config, AccountConfig):
            config = AccountConfig.from_mapping(config)

        account = Account(
            id=self._new_id(),
            name=config.name,
            type=config.type,
            starting_balance=config.starting_balance,
            balance=config.starting_balance,
            daily_starting_balance=config.starting_balance,
            max_drawdown_percent=config.max_drawdown_percent,
            step_targets=config.step_targets,
            current_step=1,
            last_passed_step=None,
            is_funded=False,
            risk_limits=self.config.default_risk_limits,
        )
        self._accounts[account.id] = account
        if self._selected_id is None:
            self._selected_id = account.id

        log.info(
            "Created %s account %s (%s) with starting balance %.2f",
            account.type.value, account.id, account.name, account.starting_balance,
        )
        return account

    def record_trade(self, draft: TradeDraft, account_id: str | None = None) -> TradeResult:
        """Log a new trade and check whether it passes the account's current step.

        The target account is *account_id*, else ``draft.account_id``, else
        the selected account, else the first account.

        Raises:
            NoActiveAccount: when there is no account to record against
        """
        account = self._resolve(account_id or draft.account_id)

        trade, updated = self._ledger.record_trade(account, draft, self._new_id())
        updated, passed = self._phases.check(
            updated, self._ledger.trades_for(updated.id, updated.stage), at=self._now()
        )
        self._accounts[updated.id] = updated

        if passed is not None:
            self.dispatcher.publish(passed)
        return TradeResult(trade=trade, account=updated, phase_passed=passed)

    def edit_trade(self, trade_id: str, draft: TradeDraft) -> TradeResult:
        """Replace a trade's details and apply the P&L difference to its account.

        The trade keeps its id, account and phase. Phase completion is not
        re-checked unless ``EngineConfig.reevaluate_on_edit`` is set.

        Raises:
            TradeNotFound: when *trade_id* is unknown
        """
        old = self._ledger.get(trade_id)
        account = self._accounts.get(old.account_id)
        if account is None:
            raise NoActiveAccount(f"Account {old.account_id!r} for trade {trade_id!r} no longer exists")

        trade, updated = self._ledger.edit_trade(account, trade_id, draft)

        passed = None
        if self.config.reevaluate_on_edit and trade.phase == updated.stage:
            updated, passed = self._phases.check(
                updated, self._ledger.trades_for(updated.id, updated.stage), at=self._now()
            )
        self._accounts[updated.id] = updated

        if passed is not None:
            self.dispatcher.publish(passed)
        return TradeResult(trade=trade, account=updated, phase_passed=passed)

    def advance_phase(self, account_id: str | None = None) -> Account:
        """Move the account to its next step (or to funded), resetting its balance.

        A funded account is returned unchanged.
        """
        account = self._require(account_id)
        advanced = self._phases.advance(account)
        if advanced is account:
            return account

        self._accounts[advanced.id] = advanced
        self.dispatcher.publish(
            PhaseAdvancedEvent(
                account_id=advanced.id,
                from_step=account.current_step,
                to_step=advanced.stage,
                is_funded=advanced.is_funded,
                timestamp=self._now(),
            )
        )
        return advanced

    def current_risk_status(self, account_id: str | None = None) -> guard.RiskStatus:
        """Today's risk-guard status, recomputed from the journal on every call."""
        account = self._require(account_id)
        return guard.evaluate(account, self._ledger.trades_for(account.id), self._today())

    # ------------------------------------------------------------------
    # Queries and selection
    # ------------------------------------------------------------------

    @property
    def accounts(self) -> list[Account]:
        return list(self._accounts.values())

    @property
    def selected_account(self) -> Account | None:
        return self._accounts.get(self._selected_id) if self._selected_id else None

    def get_account(self, account_id: str) -> Account:
        return self._require(account_id)

    def select_account(self, account_id: str) -> Account:
        account = self._require(account_id)
        self._selected_id = account.id
        return account

    def trades(self, account_id: str | None = None, phase: int | None = None) -> list[Trade]:
        """Trades of an account (default: selected), optionally limited to one phase."""
        account = self._require(account_id)
        return self._ledger.trades_for(account.id, phase)

    def phase_report(self, account_id: str | None = None, phase: int | None = None) -> PhaseMetrics:
        """Dashboard metrics for a phase (default: the account's current stage)."""
        account = self._require(account_id)
        return compute_phase_metrics(
            account,
            self._ledger.trades_for(account.id),
            account.stage if phase is None else phase,
            self._today(),
        )

    def export_trades_csv(self, path: Path, account_id: str | None = None) -> None:
        self._ledger.write_trades_csv(path, account_id)

    # ------------------------------------------------------------------
    # Workspace snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> WorkspaceSnapshot:
        return WorkspaceSnapshot(
            accounts=self.accounts,
            trades=list(self._ledger),
            last_active_account_id=self._selected_id,
            last_active_tab=self.last_active_tab,
        )

    @classmethod
    def from_snapshot(cls, snapshot: WorkspaceSnapshot, **kwargs: Any) -> "EvaluationEngine":
        """Rehydrate an engine; *kwargs* are passed to the constructor."""
        engine = cls(**kwargs)
        engine._accounts = {a.id: a for a in snapshot.accounts}
        engine._ledger = Ledger(trades=list(snapshot.trades), clock=engine._now)
        if snapshot.last_active_account_id in engine._accounts:
            engine._selected_id = snapshot.last_active_account_id
        elif snapshot.accounts:
            engine._selected_id = snapshot.accounts[0].id
        engine.last_active_tab = snapshot.last_active_tab
        log.debug(
            "Engine restored: %d accounts, %d trades", len(engine._accounts), len(engine._ledger)
        )
        return engine

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return parse_timestamp(self._clock())

    def _today(self) -> date:
        return self._now().date()

    def _resolve(self, account_id: str | None) -> Account | None:
        if account_id and account_id in self._accounts:
            return self._accounts[account_id]
        if account_id:
            log.warning("Unknown account %s; falling back to the selected account", account_id)
        if self.selected_account is not None:
            return self.selected_account
        return next(iter(self._accounts.values()), None)

    def _require(self, account_id: str | None) -> Account:
        if account_id is None:
            account = self.selected_account
            if account is None:
                raise NoActiveAccount("No account selected. Create an account first.")
            return account
        try:
            return self._accounts[account_id]
        except KeyError:
            raise NoActiveAccount(f"Unknown account: {account_id!r}") from None
