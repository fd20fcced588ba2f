"""Long strangle: buy an OTM put and an OTM call on the same expiration.

Debit structure that profits from a large move either way. Loss is capped at
the premium paid; upside is unbounded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from strategy_engine.models.position import (
    UNBOUNDED,
    LegRole,
    PositionResult,
    RiskProfile,
    StrategyProfile,
    StrategyType,
)
from strategy_engine.strategies._selection import (
    build_leg,
    select_strangle_contracts,
    tier_for_dte,
)
from strategy_engine.strategies.base import StrategyCalculator, find_leg

if TYPE_CHECKING:
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import Leg, StrategyInputs


class LongStrangleCalculator(StrategyCalculator):
    strategy_type = StrategyType.LONG_STRANGLE
    profile = StrategyProfile(
        name="Long Strangle",
        description="Buy an OTM put and an OTM call to profit from a large move in either direction",
        market_outlook="High volatility expected, direction unknown",
        optimal_days_to_expiry=45,
        risk_level=RiskProfile.MEDIUM,
        complexity="simple",
        capital_requirement="low",
        directionality="volatile",
        entry_rules=[
            "IV percentile below 30 so premium is cheap",
            "Ahead of a known catalyst (earnings, FDA, macro print)",
            "Underlying in a tight range that is likely to resolve",
        ],
        exit_rules=[
            "Take profit at 50-100% gain on premium paid",
            "Exit 7-10 days before expiration to limit theta decay",
            "Exit after the catalyst if the move did not materialize",
        ],
        risk_management=[
            "Size for a full loss of premium",
            "Avoid entry when IV is already elevated",
        ],
    )

    def select_legs(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> list[Leg]:
        tier = tier_for_dte(self._settings.long_strangle.distance_tiers, inputs.days_to_expiry)
        put, call = select_strangle_contracts(inputs, snapshot, tier.distance_pct)
        return [
            build_leg(put, LegRole.LONG, "long_put", inputs.days_to_expiry, inputs.symbol),
            build_leg(call, LegRole.LONG, "long_call", inputs.days_to_expiry, inputs.symbol),
        ]

    def build_result(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        put = find_leg(legs, "long_put")
        call = find_leg(legs, "long_call")
        total = put.premium + call.premium

        return PositionResult(
            strategy_type=self.strategy_type,
            symbol=inputs.symbol,
            current_price=inputs.current_price,
            expiration_date=inputs.expiration_date,
            days_to_expiry=inputs.days_to_expiry,
            implied_volatility=inputs.implied_volatility,
            iv_percentile=inputs.iv_percentile,
            legs=legs,
            max_loss=total,
            max_profit=UNBOUNDED,
            lower_breakeven=put.strike - total,
            upper_breakeven=call.strike + total,
            net_debit=total,
            risk_profile=self.profile.risk_level,
        )
