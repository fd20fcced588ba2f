"""Iron condor: short strangle inside, long strangle outside, one expiration.

Sell an OTM put + OTM call, buy further OTM wings for protection.
Defined risk, max profit is the net credit received.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from strategy_engine.exceptions import InvalidStrikeOrdering, NegativeCreditError
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
    require_strikes,
    strike_at_or_beyond,
    target_distance,
    tier_for_dte,
)
from strategy_engine.strategies.base import StrategyCalculator, find_leg

if TYPE_CHECKING:
    from decimal import Decimal

    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import Leg, StrategyInputs

logger = logging.getLogger(__name__)


class IronCondorCalculator(StrategyCalculator):
    strategy_type = StrategyType.IRON_CONDOR
    profile = StrategyProfile(
        name="Iron Condor",
        description="Sell an OTM put spread and an OTM call spread for a defined-risk credit",
        market_outlook="Range-bound, low to moderate volatility",
        optimal_days_to_expiry=30,
        risk_level=RiskProfile.LOW,
        complexity="advanced",
        capital_requirement="medium",
        directionality="neutral",
        entry_rules=[
            "IV percentile above 50",
            "Underlying trading inside a well-defined range",
            "Credit of at least a third of the wing width",
        ],
        exit_rules=[
            "Take profit at 25-50% of max profit",
            "Close at 21 DTE if not at target",
            "Close the tested side if price breaches a short strike",
        ],
        risk_management=[
            "Max loss is wing width minus credit; size from it",
            "Avoid holding through earnings",
        ],
    )

    def select_legs(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> list[Leg]:
        cfg = self._settings.iron_condor
        exp = inputs.expiration_date
        price = inputs.current_price
        tier = tier_for_dte(cfg.tiers, inputs.days_to_expiry)

        puts = snapshot.strikes(exp, OptionType.PUT)
        calls = snapshot.strikes(exp, OptionType.CALL)
        require_strikes(puts, cfg.min_strikes_per_side, inputs.symbol, "Iron condor put side")
        require_strikes(calls, cfg.min_strikes_per_side, inputs.symbol, "Iron condor call side")

        wing = target_distance(price, tier.wing_width_pct)
        custom = inputs.custom_strikes
        if custom is not None and custom.put_strike is not None:
            short_put, short_call = custom.put_strike, custom.call_strike
            if short_put >= short_call:
                raise InvalidStrikeOrdering(
                    f"Short put strike {short_put} must be below short call strike {short_call}"
                )
        else:
            inner = target_distance(price, tier.short_distance_pct)
            short_put = strike_at_or_beyond(puts, price - inner, "below", inputs.symbol)
            short_call = strike_at_or_beyond(calls, price + inner, "above", inputs.symbol)

        long_put: Decimal
        long_call: Decimal
        if custom is not None and custom.put_wing_strike is not None:
            long_put, long_call = custom.put_wing_strike, custom.call_wing_strike
        else:
            long_put = strike_at_or_beyond(puts, short_put - wing, "below", inputs.symbol)
            long_call = strike_at_or_beyond(calls, short_call + wing, "above", inputs.symbol)

        check_outer_beyond_inner(short_put, long_put, OptionType.PUT)
        check_outer_beyond_inner(short_call, long_call, OptionType.CALL)
        logger.debug(
            "%s iron condor strikes: %s/%s puts, %s/%s calls",
            inputs.symbol, long_put, short_put, short_call, long_call,
        )

        dte, sym = inputs.days_to_expiry, inputs.symbol
        return [
            build_leg(listed_contract(snapshot, exp, OptionType.PUT, long_put),
                      LegRole.LONG, "long_put", dte, sym),
            build_leg(listed_contract(snapshot, exp, OptionType.PUT, short_put),
                      LegRole.SHORT, "short_put", dte, sym),
            build_leg(listed_contract(snapshot, exp, OptionType.CALL, short_call),
                      LegRole.SHORT, "short_call", dte, sym),
            build_leg(listed_contract(snapshot, exp, OptionType.CALL, long_call),
                      LegRole.LONG, "long_call", dte, sym),
        ]

    def build_result(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        long_put = find_leg(legs, "long_put")
        short_put = find_leg(legs, "short_put")
        short_call = find_leg(legs, "short_call")
        long_call = find_leg(legs, "long_call")

        credit = (short_put.premium + short_call.premium) - (long_put.premium + long_call.premium)
        if credit <= 0:
            raise NegativeCreditError(
                f"{inputs.symbol} iron condor: net credit {credit} is not positive "
                f"(wings cost more than the short strikes collect)"
            )

        wing_width = min(
            short_put.strike - long_put.strike,
            long_call.strike - short_call.strike,
        )

        return PositionResult(
            strategy_type=self.strategy_type,
            symbol=inputs.symbol,
            current_price=inputs.current_price,
            expiration_date=inputs.expiration_date,
            days_to_expiry=inputs.days_to_expiry,
            implied_volatility=inputs.implied_volatility,
            iv_percentile=inputs.iv_percentile,
            legs=legs,
            max_loss=wing_width - credit,
            max_profit=credit,
            lower_breakeven=short_put.strike - credit,
            upper_breakeven=short_call.strike + credit,
            net_credit=credit,
            wing_width=wing_width,
            risk_profile=self.profile.risk_level,
        )
