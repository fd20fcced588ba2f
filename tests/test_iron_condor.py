"""Tests for iron condor valuation."""

from decimal import Decimal

import pytest

from strategy_engine.exceptions import (
    InsufficientStrikes,
    InvalidStrikeOrdering,
    NegativeCreditError,
)
from strategy_engine.models.chain import OptionType
from strategy_engine.models.position import CustomStrikes, RiskProfile, StrategyType
from strategy_engine.strategies.iron_condor import IronCondorCalculator
from tests.builders import make_chain, make_inputs, make_snapshot

_SCENARIO_OVERRIDES = {
    (OptionType.PUT, 220): ("1.25", "1.35"),
    (OptionType.PUT, 210): ("0.75", "0.85"),
    (OptionType.CALL, 240): ("1.20", "1.30"),
    (OptionType.CALL, 250): ("0.70", "0.80"),
}


def _scenario_inputs():
    return make_inputs(
        StrategyType.IRON_CONDOR,
        custom=CustomStrikes(
            put_strike=Decimal("220"), call_strike=Decimal("240"),
            put_wing_strike=Decimal("210"), call_wing_strike=Decimal("250"),
        ),
    )


class TestIronCondorScenario:
    def test_credit_and_risk(self, dispatcher) -> None:
        snap = make_snapshot(make_chain(overrides=_SCENARIO_OVERRIDES))
        result = dispatcher.calculate_position(StrategyType.IRON_CONDOR, _scenario_inputs(), snap)
        assert result.net_credit == Decimal("1.00")
        assert result.max_profit == Decimal("1.00")
        assert result.wing_width == Decimal("10")
        assert result.max_loss == Decimal("9.00")
        assert result.lower_breakeven == Decimal("219.00")
        assert result.upper_breakeven == Decimal("241.00")
        assert result.risk_profile == RiskProfile.LOW

    def test_identity_holds(self, dispatcher) -> None:
        snap = make_snapshot(make_chain(overrides=_SCENARIO_OVERRIDES))
        result = dispatcher.calculate_position(StrategyType.IRON_CONDOR, _scenario_inputs(), snap)
        assert result.max_loss + result.max_profit == result.wing_width


class TestIronCondorAutomatic:
    def test_strike_layout(self, snapshot) -> None:
        result = IronCondorCalculator().calculate(make_inputs(StrategyType.IRON_CONDOR), snapshot)
        strikes = {leg.label: leg.strike for leg in result.legs}
        # 20 DTE: inner 8% (18.4), wing 5% (11.5) beyond the short strike
        assert strikes == {
            "long_put": Decimal("190"),
            "short_put": Decimal("210"),
            "short_call": Decimal("250"),
            "long_call": Decimal("270"),
        }
        assert result.net_credit == Decimal("3.80")
        assert result.wing_width == Decimal("20")
        assert result.max_loss == Decimal("16.20")

    def test_strikes_strictly_ordered(self, snapshot) -> None:
        for dte in (5, 20, 60):
            legs = IronCondorCalculator().select_legs(
                make_inputs(StrategyType.IRON_CONDOR, days_to_expiry=dte), snapshot,
            )
            lp, sp, sc, lc = (leg.strike for leg in legs)
            assert lp < sp < sc < lc

    def test_unequal_wings_use_narrower(self) -> None:
        snap = make_snapshot(make_chain())
        inputs = make_inputs(
            StrategyType.IRON_CONDOR,
            custom=CustomStrikes(
                put_strike=Decimal("210"), call_strike=Decimal("250"),
                put_wing_strike=Decimal("190"), call_wing_strike=Decimal("260"),
            ),
        )
        result = IronCondorCalculator().calculate(inputs, snap)
        assert result.wing_width == Decimal("10")
        assert result.max_loss == result.wing_width - result.net_credit

    def test_custom_shorts_derive_wings(self) -> None:
        snap = make_snapshot(make_chain())
        inputs = make_inputs(
            StrategyType.IRON_CONDOR,
            custom=CustomStrikes(put_strike=Decimal("220"), call_strike=Decimal("240")),
        )
        legs = IronCondorCalculator().select_legs(inputs, snap)
        assert [leg.strike for leg in legs] == [
            Decimal("200"), Decimal("220"), Decimal("240"), Decimal("260"),
        ]


class TestIronCondorErrors:
    def test_two_strike_chain(self, dispatcher) -> None:
        snap = make_snapshot(make_chain(strikes=[Decimal("220"), Decimal("240")]))
        with pytest.raises(InsufficientStrikes, match="at least 4"):
            dispatcher.calculate_position(
                StrategyType.IRON_CONDOR, make_inputs(StrategyType.IRON_CONDOR), snap,
            )

    def test_wing_inside_short_strike(self) -> None:
        snap = make_snapshot(make_chain())
        inputs = make_inputs(
            StrategyType.IRON_CONDOR,
            custom=CustomStrikes(
                put_strike=Decimal("210"), call_strike=Decimal("250"),
                put_wing_strike=Decimal("220"), call_wing_strike=Decimal("260"),
            ),
        )
        with pytest.raises(InvalidStrikeOrdering):
            IronCondorCalculator().calculate(inputs, snap)

    def test_custom_shorts_inverted(self) -> None:
        inputs = make_inputs(
            StrategyType.IRON_CONDOR,
            custom=CustomStrikes(put_strike=Decimal("250"), call_strike=Decimal("210")),
        )
        with pytest.raises(InvalidStrikeOrdering, match="below short call strike"):
            IronCondorCalculator().select_legs(inputs, make_snapshot(make_chain()))

    def test_non_positive_credit(self) -> None:
        snap = make_snapshot(make_chain(overrides={
            (OptionType.PUT, 210): ("0.45", "0.55"),
            (OptionType.PUT, 190): ("0.55", "0.65"),
            (OptionType.CALL, 250): ("0.45", "0.55"),
            (OptionType.CALL, 270): ("0.55", "0.65"),
        }))
        with pytest.raises(NegativeCreditError):
            IronCondorCalculator().calculate(make_inputs(StrategyType.IRON_CONDOR), snap)
