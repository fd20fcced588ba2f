"""Call butterfly: buy one lower wing, sell two at the center, buy one upper wing.

Pins a target price. Max profit when the underlying expires at the center
strike; the net debit is lost at or beyond either wing.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from strategy_engine.exceptions import InsufficientStrikes, InvalidDebitError
from strategy_engine.models.chain import OptionType
from strategy_engine.models.position import (
    LegRole,
    PositionResult,
    RiskProfile,
    StrategyProfile,
    StrategyType,
)
from strategy_engine.strategies._selection import (
    build_leg,
    check_outer_beyond_inner,
    listed_contract,
    nearest_strike,
    require_strikes,
    tier_for_dte,
    to_decimal,
)
from strategy_engine.strategies.base import StrategyCalculator, find_leg

if TYPE_CHECKING:
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import Leg, StrategyInputs

logger = logging.getLogger(__name__)


class ButterflyCalculator(StrategyCalculator):
    strategy_type = StrategyType.BUTTERFLY_SPREAD
    profile = StrategyProfile(
        name="Butterfly Spread",
        description="Long one lower and one upper wing, short two at the center, for a low-cost pin bet",
        market_outlook="Price expected to settle near the center strike",
        optimal_days_to_expiry=21,
        risk_level=RiskProfile.LOW,
        complexity="advanced",
        capital_requirement="low",
        directionality="neutral",
        entry_rules=[
            "Clear price target or strong pinning level",
            "Debit no more than a quarter of the wing width",
            "Low expected movement into expiration",
        ],
        exit_rules=[
            "Take profit at 25-50% of max profit",
            "Close a week before expiration if the price is away from center",
        ],
        risk_management=[
            "Max loss is the debit paid",
            "Wider wings raise the probability of profit but also the cost",
        ],
    )

    def required_sides(
        self, inputs: StrategyInputs, snapshot: MarketSnapshot,
    ) -> list[tuple[date, OptionType]]:
        return [(inputs.expiration_date, OptionType.CALL)]

    def select_legs(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> list[Leg]:
        cfg = self._settings.butterfly
        if inputs.custom_strikes is not None:
            logger.warning(
                "%s butterfly: custom strikes are not supported, using automatic selection",
                inputs.symbol,
            )

        exp = inputs.expiration_date
        strikes = snapshot.strikes(exp, OptionType.CALL)
        require_strikes(strikes, cfg.min_strikes, inputs.symbol, "Butterfly")

        center = nearest_strike(strikes, inputs.current_price)
        target = self._strike_increment(inputs.current_price) * tier_for_dte(
            cfg.wing_step_tiers, inputs.days_to_expiry
        ).steps
        listed = set(strikes)
        distances = sorted(
            center - k for k in strikes
            if k < center and center - k >= target and center + (center - k) in listed
        )
        if not distances:
            raise InsufficientStrikes(
                inputs.symbol,
                f"No symmetric wings at least {target} from center {center}",
            )
        lower, upper = center - distances[0], center + distances[0]
        check_outer_beyond_inner(center, lower, OptionType.PUT)
        check_outer_beyond_inner(center, upper, OptionType.CALL)
        logger.debug("%s butterfly strikes: %s/%s/%s", inputs.symbol, lower, center, upper)

        dte, sym = inputs.days_to_expiry, inputs.symbol
        return [
            build_leg(listed_contract(snapshot, exp, OptionType.CALL, lower),
                      LegRole.LONG, "lower_wing", dte, sym),
            build_leg(listed_contract(snapshot, exp, OptionType.CALL, center),
                      LegRole.SHORT, "center", dte, sym, quantity=2),
            build_leg(listed_contract(snapshot, exp, OptionType.CALL, upper),
                      LegRole.LONG, "upper_wing", dte, sym),
        ]

    def build_result(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        lower = find_leg(legs, "lower_wing")
        center = find_leg(legs, "center")
        upper = find_leg(legs, "upper_wing")

        debit = lower.premium + upper.premium - 2 * center.premium
        if debit <= 0:
            raise InvalidDebitError(
                f"{inputs.symbol} butterfly: net debit {debit} is not positive "
                f"(wings {lower.premium}/{upper.premium}, center {center.premium})"
            )
        wing_width = upper.strike - lower.strike

        return PositionResult(
            strategy_type=self.strategy_type,
            symbol=inputs.symbol,
            current_price=inputs.current_price,
            expiration_date=inputs.expiration_date,
            days_to_expiry=inputs.days_to_expiry,
            implied_volatility=inputs.implied_volatility,
            iv_percentile=inputs.iv_percentile,
            legs=legs,
            max_loss=debit,
            max_profit=wing_width / 2 - debit,
            lower_breakeven=lower.strike + debit,
            upper_breakeven=upper.strike - debit,
            net_debit=debit,
            wing_width=wing_width,
            risk_profile=self.profile.risk_level,
        )

    def _strike_increment(self, price: Decimal) -> Decimal:
        for tier in self._settings.butterfly.increment_tiers:
            if tier.max_price is None or price < to_decimal(tier.max_price):
                return to_decimal(tier.increment)
        raise ValueError(f"No strike increment configured for price {price}")
