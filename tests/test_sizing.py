"""Tests for propdesk.sizing – lot size calculator."""

import pytest

from propdesk.sizing import PairType, lot_size


class TestPairType:

    @pytest.mark.parametrize(
        "pair, units, pip",
        [
            (PairType.STANDARD, 100_000.0, 0.0001),
            (PairType.JPY, 100_000.0, 0.01),
            (PairType.GOLD, 100.0, 0.1),
            (PairType.CRYPTO, 1.0, 1.0),
        ],
    )
    def test_contract_and_pip_size(self, pair, units, pip):
        assert pair.contract_units == units
        assert pair.pip_size == pip


class TestLotSize:

    def test_standard_pair(self):
        r = lot_size(
            balance=10_000.0, risk_percent=1.0,
            entry_price=1.1000, stop_loss=1.0950, take_profit=1.1100,
        )
        assert r.risk_amount == pytest.approx(100.0)
        assert r.lot_size == pytest.approx(0.2)
        assert r.risk_reward == pytest.approx(2.0)
        assert r.reward_amount == pytest.approx(200.0)
        assert r.pips == pytest.approx(50.0)

    def test_jpy_pair(self):
        r = lot_size(
            balance=10_000.0, risk_percent=1.0,
            entry_price=150.00, stop_loss=149.50, take_profit=151.00, pair_type=PairType.JPY,
        )
        assert r.lot_size == pytest.approx(0.002)
        assert r.pips == pytest.approx(50.0)

    def test_gold_accepts_string_pair_type(self):
        r = lot_size(
            balance=10_000.0, risk_percent=1.0,
            entry_price=2_000.0, stop_loss=1_990.0, take_profit=2_030.0, pair_type="Gold",
        )
        assert r.lot_size == pytest.approx(0.1)
        assert r.pips == pytest.approx(100.0)
        assert r.risk_reward == pytest.approx(3.0)

    def test_short_trade_uses_absolute_distances(self):
        r = lot_size(
            balance=10_000.0, risk_percent=2.0,
            entry_price=1.1000, stop_loss=1.1050, take_profit=1.0900,
        )
        assert r.lot_size == pytest.approx(0.4)
        assert r.risk_reward == pytest.approx(2.0)

    def test_stop_at_entry_gives_zero_size(self):
        r = lot_size(
            balance=10_000.0, risk_percent=1.0,
            entry_price=1.1000, stop_loss=1.1000, take_profit=1.1100,
        )
        assert r.lot_size == 0.0
        assert r.risk_reward == 0.0
        assert r.pips == 0.0
        assert r.risk_amount == pytest.approx(100.0)

    def test_unknown_pair_type_rejected(self):
        with pytest.raises(ValueError):
            lot_size(
                balance=1.0, risk_percent=1.0,
                entry_price=1.0, stop_loss=0.5, take_profit=2.0, pair_type="Index",
            )


def test_sizing_is_exported_from_package():
    import propdesk

    assert propdesk.lot_size is lot_size
    assert propdesk.PairType is PairType
