"""Tests for option contract and market snapshot models."""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from strategy_engine.exceptions import NoContractsAvailable
from strategy_engine.models.chain import MarketSnapshot, OptionType
from tests.builders import FAR_EXP, NEAR_EXP, SPOT, make_chain, make_contract, make_snapshot


class TestOptionContract:
    def test_mid_is_bid_ask_midpoint(self) -> None:
        c = make_contract(OptionType.PUT, 210, "1.20", "1.30")
        assert c.mid == Decimal("1.25")

    def test_intrinsic_value(self) -> None:
        call = make_contract(OptionType.CALL, 220, "10.9", "11.1")
        put = make_contract(OptionType.PUT, 220, "0.9", "1.1")
        assert call.intrinsic_value(SPOT) == Decimal("10")
        assert put.intrinsic_value(SPOT) == Decimal("0")

    def test_is_otm(self) -> None:
        assert make_contract(OptionType.CALL, 240, "1", "1.1").is_otm(SPOT)
        assert make_contract(OptionType.PUT, 220, "1", "1.1").is_otm(SPOT)
        assert not make_contract(OptionType.PUT, 240, "10", "10.1").is_otm(SPOT)


class TestMarketSnapshot:
    def test_from_contracts_groups_by_expiration(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP), make_chain(FAR_EXP))
        assert snap.expirations == [NEAR_EXP, FAR_EXP]
        assert len(snap.side(NEAR_EXP, OptionType.CALL)) == 11
        assert len(snap.side(FAR_EXP, OptionType.PUT)) == 11

    def test_side_sorted_by_strike(self) -> None:
        contracts = list(reversed(make_chain(NEAR_EXP)))
        snap = MarketSnapshot.from_contracts("XYZ", SPOT, contracts)
        strikes = [c.strike for c in snap.side(NEAR_EXP, OptionType.PUT)]
        assert strikes == sorted(strikes)

    def test_missing_expiration_raises(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP))
        with pytest.raises(NoContractsAvailable, match="No put contracts"):
            snap.side(date(2027, 1, 15), OptionType.PUT)

    def test_empty_side_raises(self) -> None:
        calls_only = [c for c in make_chain(NEAR_EXP) if c.option_type == OptionType.CALL]
        snap = MarketSnapshot.from_contracts("XYZ", SPOT, calls_only)
        with pytest.raises(NoContractsAvailable):
            snap.strikes(NEAR_EXP, OptionType.PUT)

    def test_contract_at(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP))
        assert snap.contract_at(NEAR_EXP, OptionType.CALL, Decimal("250")).strike == Decimal("250")
        assert snap.contract_at(NEAR_EXP, OptionType.CALL, Decimal("255")) is None

    def test_rejects_non_positive_price(self) -> None:
        with pytest.raises(ValidationError):
            MarketSnapshot(symbol="XYZ", current_price=Decimal("0"))


class TestContractsNear:
    def test_closest_first(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP))
        near = snap.contracts_near(NEAR_EXP, OptionType.CALL, Decimal("232"), 3)
        assert [c.strike for c in near] == [Decimal("230"), Decimal("240"), Decimal("220")]

    def test_ties_break_lower_strike_first(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP))
        near = snap.contracts_near(NEAR_EXP, OptionType.PUT, Decimal("235"), 2)
        assert [c.strike for c in near] == [Decimal("230"), Decimal("240")]

    def test_count_larger_than_side(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP))
        assert len(snap.contracts_near(NEAR_EXP, OptionType.PUT, SPOT, 50)) == 11

    def test_absent_expiration_raises(self) -> None:
        snap = make_snapshot(make_chain(NEAR_EXP))
        with pytest.raises(NoContractsAvailable):
            snap.contracts_near(FAR_EXP, OptionType.CALL, SPOT, 3)
