# examples/evaluation_session.py
"""Walk a 2-Step account through a pass, persisting the workspace after each change."""
from pathlib import Path
import logging

from propdesk import EvaluationEngine, PairType, PhasePassedEvent, TradeDraft, WorkspaceJournal, lot_size
from propdesk.log import configure_logging

log = logging.getLogger(__name__)

USER_ID = "demo-trader"


def on_phase_passed(event: PhasePassedEvent) -> None:
    """A UI would open its celebration dialog here."""
    if event.is_final_step:
        log.info("🏆 %s passed the final step. Claim the funded account.", event.account_id)
    else:
        log.info("🟢 %s passed step %d (%.2f / %.2f)", event.account_id, event.step, event.phase_pnl, event.target)


def main(journal_dir: Path) -> None:
    journal = WorkspaceJournal(journal_dir)

    snapshot = journal.load(USER_ID)
    engine = EvaluationEngine.from_snapshot(snapshot) if snapshot else EvaluationEngine()
    engine.dispatcher.subscribe(PhasePassedEvent, on_phase_passed)

    if not engine.accounts:
        engine.create_account(
            {
                "name": "Demo 100k",
                "type": "2-Step",
                "starting_balance": 100_000,
                "step_targets": {
                    "step1": {"profit_target": 8, "daily_drawdown_limit": 5},
                    "step2": {"profit_target": 5, "daily_drawdown_limit": 5},
                },
            }
        )
        journal.save(USER_ID, engine.snapshot())

    for outcome, amount in [("win", 3_000), ("loss", 1_000), ("win", 6_500)]:
        size = lot_size(
            balance=engine.selected_account.balance, risk_percent=1.0,
            entry_price=2_350.0, stop_loss=2_340.0, take_profit=2_380.0, pair_type=PairType.GOLD,
        )
        log.info("Sizing %.2f lots (%.0f pips, R:R %.1f)", size.lot_size, size.pips, size.risk_reward)

        result = engine.record_trade(
            TradeDraft(
                outcome=outcome, profit_amount=amount, symbol="xauusd", strategy="Breakout",
                entry_price=2_350.0, stop_loss=2_340.0, take_profit=2_380.0,
            )
        )
        journal.save(USER_ID, engine.snapshot())

        status = engine.current_risk_status()
        log.info("Balance %.2f, risk: %s %s", result.account.balance, status.severity.value, status.message)

        if result.phase_passed is not None:
            account = engine.advance_phase()
            journal.save(USER_ID, engine.snapshot())
            log.info("Now on phase %d with balance %.2f", account.stage, account.balance)


if __name__ == "__main__":
    configure_logging("DEBUG")
    main(Path("workspace"))
