"""Short strangle: sell an OTM put and an OTM call on the same expiration.

Credit structure with undefined risk on both sides. Strikes sit further out
than the long strangle's at every DTE.
"""

from __future__ import annotations

import logging
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
    to_decimal,
)
from strategy_engine.strategies.base import StrategyCalculator, find_leg

if TYPE_CHECKING:
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import Leg, StrategyInputs

logger = logging.getLogger(__name__)


class ShortStrangleCalculator(StrategyCalculator):
    strategy_type = StrategyType.SHORT_STRANGLE
    profile = StrategyProfile(
        name="Short Strangle",
        description="Sell an OTM put and an OTM call to collect premium in a range-bound market",
        market_outlook="Low volatility expected, price stays between the strikes",
        optimal_days_to_expiry=45,
        risk_level=RiskProfile.UNLIMITED,
        complexity="intermediate",
        capital_requirement="high",
        directionality="neutral",
        entry_rules=[
            "IV percentile above 50 so premium is rich",
            "No scheduled catalyst before expiration",
            "Underlying range-bound with defined support and resistance",
        ],
        exit_rules=[
            "Take profit at 50% of credit received",
            "Close or roll the tested side when a strike is breached",
            "Exit at 21 DTE to avoid gamma risk",
        ],
        risk_management=[
            "Undefined risk: keep size to a small fraction of the portfolio",
            "Stop loss at 2x the credit received",
            "Requires margin; check buying power before entry",
        ],
    )

    def select_legs(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> list[Leg]:
        tier = tier_for_dte(self._settings.short_strangle.distance_tiers, inputs.days_to_expiry)
        put, call = select_strangle_contracts(inputs, snapshot, tier.distance_pct)
        return [
            build_leg(put, LegRole.SHORT, "short_put", inputs.days_to_expiry, inputs.symbol),
            build_leg(call, LegRole.SHORT, "short_call", inputs.days_to_expiry, inputs.symbol),
        ]

    def build_result(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        put = find_leg(legs, "short_put")
        call = find_leg(legs, "short_call")
        credit = put.premium + call.premium

        notes: list[str] = []
        width = call.strike - put.strike
        threshold = to_decimal(self._settings.short_strangle.min_premium_to_width)
        if width > 0 and credit / width < threshold:
            logger.warning(
                "%s short strangle: credit %s is thin for a %s-point width",
                inputs.symbol, credit, width,
            )
            notes.append(
                f"Credit {credit} is below {threshold:.0%} of the {width}-point strike width"
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
            max_loss=UNBOUNDED,
            max_profit=credit,
            lower_breakeven=put.strike - credit,
            upper_breakeven=call.strike + credit,
            net_credit=credit,
            risk_profile=self.profile.risk_level,
            notes=notes,
        )
