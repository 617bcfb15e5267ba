import csv
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from datetime import datetime
from typing import Callable, Iterator

from propdesk.errors import NoActiveAccount, TradeNotFound
from propdesk.models import Account, Trade, TradeDraft
from propdesk.time_utils import now_utc
from propdesk.types import TradeOutcome

log = logging.getLogger(__name__)


DEFAULT_SYMBOL = "UNKNOWN"
DEFAULT_STRATEGY = "No Strategy"
DEFAULT_ENTRY_MODEL = "No Model"

CSV_COLUMNS = [
    "id",
    "account_id",
    "date",
    "phase",
    "symbol",
    "strategy",
    "entry_model",
    "outcome",
    "profit_amount",
    "entry_price",
    "stop_loss",
    "take_profit",
    "confluences",
    "notes",
]


def normalise_profit(outcome: TradeOutcome | str, amount: float) -> float:
    """Apply the outcome sign convention to a raw profit magnitude."""
    return TradeOutcome(outcome).signed_profit(amount)


@dataclass
class Ledger:
    """Append-only trade journal and the balance effect of each entry.

    The ledger owns the trades; accounts are passed in and a replacement
    account with the updated balance is handed back. ``clock`` stamps
    drafts that carry no date.
    """

    trades: list[Trade] = field(default_factory=list)
    clock: Callable[[], datetime] = now_utc

    def __len__(self) -> int:
        return len(self.trades)

    def __iter__(self) -> Iterator[Trade]:
        return iter(list(self.trades))

    def get(self, trade_id: str) -> Trade:
        for t in self.trades:
            if t.id == trade_id:
                return t
        raise TradeNotFound(trade_id)

    def trades_for(self, account_id: str, phase: int | None = None) -> list[Trade]:
        """Trades of *account_id* in log order, optionally only those stamped with *phase*."""
        return [
            t for t in self.trades
            if t.account_id == account_id and (phase is None or t.phase == phase)
        ]

    def record_trade(
        self, account: Account | None, draft: TradeDraft, trade_id: str
    ) -> tuple[Trade, Account]:
        if account is None:
            raise NoActiveAccount("No active account found. Create an account first.")

        trade = self._build(
            draft, trade_id=trade_id, account_id=account.id, phase=account.stage,
            date=self.clock().isoformat(),
        )
        updated = replace(account, balance=account.balance + trade.profit_amount)
        self.trades.append(trade)

        log.debug(
            "Recorded trade %s on %s phase %d: %s %.2f (balance %.2f -> %.2f)",
            trade.id, account.id, trade.phase, trade.outcome.value,
            trade.profit_amount, account.balance, updated.balance,
        )
        return trade, updated

    def edit_trade(
        self, account: Account, trade_id: str, draft: TradeDraft
    ) -> tuple[Trade, Account]:
        old = self.get(trade_id)
        # id, account and phase always come from the original entry
        trade = self._build(
            draft, trade_id=old.id, account_id=old.account_id, phase=old.phase, date=old.date
        )
        diff = trade.profit_amount - old.profit_amount
        updated = replace(account, balance=account.balance + diff)

        idx = self.trades.index(old)
        self.trades[idx] = trade

        log.debug(
            "Edited trade %s on %s: profit %.2f -> %.2f (diff %.2f)",
            trade.id, account.id, old.profit_amount, trade.profit_amount, diff,
        )
        return trade, updated

    def write_trades_csv(self, path: Path, account_id: str | None = None) -> None:
        """Export the journal, or one account's part of it, to CSV."""
        rows = self.trades if account_id is None else self.trades_for(account_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="") as f:
            w = csv.writer(f)
            w.writerow(CSV_COLUMNS)
            for t in rows:
                w.writerow(
                    [
                        t.id,
                        t.account_id,
                        t.date,
                        t.phase,
                        t.symbol,
                        t.strategy,
                        t.entry_model,
                        t.outcome.value,
                        round(t.profit_amount, 2),
                        t.entry_price,
                        t.stop_loss,
                        t.take_profit,
                        ";".join(t.confluences),
                        t.notes,
                    ]
                )

    @staticmethod
    def _build(draft: TradeDraft, *, trade_id: str, account_id: str, phase: int, date: str) -> Trade:
        return Trade(
            id=trade_id,
            account_id=account_id,
            date=draft.date or date,
            symbol=draft.symbol.strip().upper() or DEFAULT_SYMBOL,
            strategy=draft.strategy.strip() or DEFAULT_STRATEGY,
            entry_model=draft.entry_model.strip() or DEFAULT_ENTRY_MODEL,
            outcome=draft.outcome,
            profit_amount=normalise_profit(draft.outcome, draft.profit_amount),
            phase=phase,
            entry_price=float(draft.entry_price),
            stop_loss=float(draft.stop_loss),
            take_profit=float(draft.take_profit),
            confluences=draft.confluences,
            notes=draft.notes,
        )
