"""Phase pass detection and step advancement."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from propdesk.events import PhasePassedEvent
from propdesk.models import FUNDED_PHASE, Account, Trade
from propdesk.time_utils import now_utc
from propdesk.types import ChallengeType

log = logging.getLogger(__name__)


__all__ = ["PhaseEvaluator"]


class PhaseEvaluator:
    """
    Decides when an account's current step is passed and moves it on.

    Pass detection runs after each new trade. It fires at most once per step:
    ``last_passed_step`` records the step that already fired, and further
    winners in that step are ignored even as phase P&L keeps rising.

    Advancement is a separate, explicit call. Every step (and the funded
    stage) restarts the live balance from ``starting_balance``; earlier trades
    keep their original phase tag.
    """

    @staticmethod
    def phase_pnl(account: Account, trades: Iterable[Trade]) -> float:
        """Sum of P&L over *account*'s trades stamped with its current stage."""
        return sum(
            t.profit_amount for t in trades
            if t.account_id == account.id and t.phase == account.stage
        )

    @staticmethod
    def target_amount(account: Account) -> float | None:
        """Profit needed to pass the current step, or ``None`` if the step has no config."""
        cfg = account.current_step_config
        if cfg is None:
            return None
        return account.starting_balance * cfg.profit_target / 100.0

    @staticmethod
    def has_next_step(account: Account) -> bool:
        return account.step_targets.for_step(account.current_step + 1) is not None

    @staticmethod
    def is_final_step(account: Account) -> bool:
        """Whether passing the current step leads to the funded stage."""
        if account.type is ChallengeType.INSTANT:
            return True
        if account.type is ChallengeType.TWO_STEP:
            return account.current_step >= 2
        if account.type is ChallengeType.THREE_STEP:
            return account.current_step >= 3
        return not PhaseEvaluator.has_next_step(account)

    @staticmethod
    def available_phases(account: Account) -> list[int]:
        phases = [1]
        if account.step_targets.step2 is not None or account.current_step >= 2:
            phases.append(2)
        if account.step_targets.step3 is not None or account.current_step >= 3:
            phases.append(3)
        if account.is_funded:
            phases.append(FUNDED_PHASE)
        return phases

    def check(
        self, account: Account, trades: Iterable[Trade], *, at: datetime | None = None
    ) -> tuple[Account, PhasePassedEvent | None]:
        """
        Check whether the current step's target has just been reached.

        Args:
            account: The account after the triggering trade was applied
            trades: Trades to consider (filtered here to the account's current stage)
            at: Event timestamp (default: now in UTC)

        Returns:
            The account (with ``last_passed_step`` bumped when the step passes)
            and the pass event, or ``None`` when nothing fired.
        """
        target = self.target_amount(account)
        if target is None or account.is_funded:
            return account, None
        if (account.last_passed_step or 0) >= account.current_step:
            return account, None

        pnl = self.phase_pnl(account, trades)
        if pnl < target:
            return account, None

        passed = replace(account, last_passed_step=account.current_step)
        log.info(
            "Account %s passed step %d: phase P&L %.2f >= target %.2f",
            account.id, account.current_step, pnl, target,
        )
        return passed, PhasePassedEvent(
            account_id=account.id,
            step=account.current_step,
            phase_pnl=pnl,
            target=target,
            is_final_step=self.is_final_step(account),
            timestamp=at or now_utc(),
        )

    def advance(self, account: Account) -> Account:
        """Move to the next step, or to funded when no further step is configured."""
        if account.is_funded:
            log.warning("Account %s is already funded; advance ignored", account.id)
            return account

        reset = dict(balance=account.starting_balance, daily_starting_balance=account.starting_balance)
        if self.has_next_step(account):
            advanced = replace(account, current_step=account.current_step + 1, **reset)
            log.info("Account %s advanced to step %d", account.id, advanced.current_step)
        else:
            advanced = replace(account, is_funded=True, **reset)
            log.info("Account %s is now funded", account.id)
        return advanced
