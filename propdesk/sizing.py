"""Position sizing utilities."""

from dataclasses import dataclass
from enum import Enum


class PairType(str, Enum):
    STANDARD = "Standard"
    JPY = "JPY"
    GOLD = "Gold"
    CRYPTO = "Crypto"

    @property
    def contract_units(self) -> float:
        """Units of the instrument in one lot."""
        if self is PairType.GOLD:
            return 100.0
        if self is PairType.CRYPTO:
            return 1.0
        return 100_000.0

    @property
    def pip_size(self) -> float:
        if self is PairType.JPY:
            return 0.01
        if self is PairType.GOLD:
            return 0.1
        if self is PairType.CRYPTO:
            return 1.0
        return 0.0001


@dataclass(frozen=True)
class SizingResult:
    lot_size: float
    risk_amount: float
    reward_amount: float
    risk_reward: float
    pips: float


def lot_size(
    *,
    balance: float,
    risk_percent: float,
    entry_price: float,
    stop_loss: float,
    take_profit: float,
    pair_type: PairType | str = PairType.STANDARD,
) -> SizingResult:
    """
    Calculate lot size for a fixed-percentage risk per trade.

    Lot size is calculated as: risk_amount / (|entry - stop| * contract_units)
    A stop placed at the entry price gives zero size and zero R:R.

    Args:
        balance: Account balance the risk percentage applies to
        risk_percent: Percent of balance to lose if the stop is hit
        entry_price: Planned entry
        stop_loss: Planned stop
        take_profit: Planned target
        pair_type: Instrument class, selects contract size and pip size

    Returns:
        SizingResult with the lot size, money at risk and reward, R:R and stop distance in pips
    """
    pair = PairType(pair_type)
    risk_amount = float(balance) * float(risk_percent) / 100.0
    stop_distance = abs(float(entry_price) - float(stop_loss))

    if stop_distance <= 0.0:
        return SizingResult(lot_size=0.0, risk_amount=risk_amount, reward_amount=0.0, risk_reward=0.0, pips=0.0)

    rr = abs(float(take_profit) - float(entry_price)) / stop_distance
    return SizingResult(
        lot_size=risk_amount / (stop_distance * pair.contract_units),
        risk_amount=risk_amount,
        reward_amount=risk_amount * rr,
        risk_reward=rr,
        pips=stop_distance / pair.pip_size,
    )
