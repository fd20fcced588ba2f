"""Tests for call butterfly valuation."""

from decimal import Decimal

import pytest

from strategy_engine.exceptions import InsufficientStrikes, InvalidDebitError
from strategy_engine.models.chain import OptionType
from strategy_engine.models.position import CustomStrikes, LegRole, RiskProfile, StrategyType
from strategy_engine.strategies.butterfly import ButterflyCalculator
from tests.builders import make_chain, make_inputs, make_snapshot


class TestButterflyLegs:
    def test_structure(self, snapshot) -> None:
        legs = ButterflyCalculator().select_legs(make_inputs(StrategyType.BUTTERFLY_SPREAD), snapshot)
        assert [(leg.label, leg.role, leg.quantity) for leg in legs] == [
            ("lower_wing", LegRole.LONG, 1),
            ("center", LegRole.SHORT, 2),
            ("upper_wing", LegRole.LONG, 1),
        ]
        assert all(leg.option_type == OptionType.CALL for leg in legs)

    def test_symmetric_wings_around_center(self, snapshot) -> None:
        # spot 230 -> increment 10; 20 DTE -> 3 steps
        legs = ButterflyCalculator().select_legs(make_inputs(StrategyType.BUTTERFLY_SPREAD), snapshot)
        assert [leg.strike for leg in legs] == [Decimal("200"), Decimal("230"), Decimal("260")]

    def test_center_nearest_spot(self) -> None:
        snap = make_snapshot(make_chain(spot=Decimal("233")), spot=Decimal("233"))
        inputs = make_inputs(StrategyType.BUTTERFLY_SPREAD, current_price=Decimal("233"), days_to_expiry=10)
        legs = ButterflyCalculator().select_legs(inputs, snap)
        assert legs[1].strike == Decimal("230")
        assert legs[2].strike - legs[1].strike == legs[1].strike - legs[0].strike

    def test_wing_widens_to_next_symmetric_listing(self) -> None:
        # 200 has no 260 partner, so the wings step out to 190/270
        strikes = [Decimal(k) for k in (190, 200, 215, 230, 245, 270)]
        snap = make_snapshot(make_chain(strikes=strikes))
        legs = ButterflyCalculator().select_legs(make_inputs(StrategyType.BUTTERFLY_SPREAD), snap)
        assert [leg.strike for leg in legs] == [Decimal("190"), Decimal("230"), Decimal("270")]

    def test_no_symmetric_wings(self) -> None:
        strikes = [Decimal(k) for k in (200, 230, 250)]
        snap = make_snapshot(make_chain(strikes=strikes))
        with pytest.raises(InsufficientStrikes, match="symmetric"):
            ButterflyCalculator().select_legs(make_inputs(StrategyType.BUTTERFLY_SPREAD), snap)

    def test_too_few_strikes(self) -> None:
        snap = make_snapshot(make_chain(strikes=[Decimal("220"), Decimal("240")]))
        with pytest.raises(InsufficientStrikes, match="at least 3"):
            ButterflyCalculator().select_legs(make_inputs(StrategyType.BUTTERFLY_SPREAD), snap)

    def test_custom_strikes_ignored(self, snapshot, caplog) -> None:
        inputs = make_inputs(
            StrategyType.BUTTERFLY_SPREAD,
            custom=CustomStrikes(put_strike=Decimal("210"), call_strike=Decimal("250")),
        )
        legs = ButterflyCalculator().select_legs(inputs, snapshot)
        assert legs[1].strike == Decimal("230")
        assert "custom strikes are not supported" in caplog.text


class TestButterflyResult:
    def test_risk_figures(self, snapshot) -> None:
        result = ButterflyCalculator().calculate(make_inputs(StrategyType.BUTTERFLY_SPREAD), snapshot)
        # 31.00 + 1.00 - 2 * 4.00
        assert result.net_debit == Decimal("24.00")
        assert result.max_loss == Decimal("24.00")
        assert result.wing_width == Decimal("60")
        assert result.max_profit == Decimal("6.00")
        assert result.lower_breakeven == Decimal("224.00")
        assert result.upper_breakeven == Decimal("236.00")
        assert result.risk_profile == RiskProfile.LOW

    def test_payoff_peaks_at_center(self, snapshot) -> None:
        calc = ButterflyCalculator()
        result = calc.calculate(make_inputs(StrategyType.BUTTERFLY_SPREAD), snapshot)
        assert calc.payoff(Decimal("230"), result.legs) == result.max_profit

    @pytest.mark.parametrize("price", ["150", "200", "260", "320"])
    def test_payoff_at_or_beyond_wings(self, snapshot, price) -> None:
        calc = ButterflyCalculator()
        result = calc.calculate(make_inputs(StrategyType.BUTTERFLY_SPREAD), snapshot)
        assert calc.payoff(Decimal(price), result.legs) == -result.net_debit

    def test_non_positive_debit(self) -> None:
        snap = make_snapshot(make_chain(overrides={
            (OptionType.CALL, 200): ("29.95", "30.05"),
            (OptionType.CALL, 230): ("15.45", "15.55"),
        }))
        with pytest.raises(InvalidDebitError):
            ButterflyCalculator().calculate(make_inputs(StrategyType.BUTTERFLY_SPREAD), snap)
