"""Diagonal calendar: sell a near-term OTM option, buy a longer-dated one.

Same side (calls by default), different strikes and expirations. The far leg
still carries time value when the near leg expires, so every figure here is a
rule-of-thumb estimate centred on the average of the two strikes:

- max profit: near premium plus half the strike spread
- breakevens: average strike plus or minus twice the debit
- P&L: most of the near premium kept (less the debit) while spot stays close
  to the average strike, the whole debit lost outside that zone
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from strategy_engine.exceptions import InsufficientMarketData, InvalidDebitError
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
    listed_contract,
    strike_at_or_beyond,
    target_distance,
    to_decimal,
)
from strategy_engine.strategies.base import StrategyCalculator

if TYPE_CHECKING:
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import Leg, StrategyInputs

logger = logging.getLogger(__name__)

ESTIMATE_NOTE = (
    "Estimated figures: the far leg still has time value at near-leg expiration, "
    "so max profit, breakevens and P&L are approximations around the average strike"
)


class DiagonalCalendarCalculator(StrategyCalculator):
    strategy_type = StrategyType.DIAGONAL_CALENDAR
    profile = StrategyProfile(
        name="Diagonal Calendar",
        description="Short a near-term OTM option against a longer-dated option at a different strike",
        market_outlook="Slow drift toward the short strike with stable volatility",
        optimal_days_to_expiry=35,
        risk_level=RiskProfile.MEDIUM,
        complexity="advanced",
        capital_requirement="medium",
        directionality="neutral",
        entry_rules=[
            "Near-term IV at or above far-term IV",
            "Expected slow move toward the short strike",
            "No earnings between the two expirations",
        ],
        exit_rules=[
            "Close or roll the short leg as it approaches expiration",
            "Take profit at 25-40% of the debit",
            "Exit if the underlying moves well past the short strike",
        ],
        risk_management=[
            "Max loss is the debit paid",
            "A volatility collapse in the far month hurts the long leg",
        ],
    )

    def required_sides(
        self, inputs: StrategyInputs, snapshot: MarketSnapshot,
    ) -> list[tuple[date, OptionType]]:
        near_exp, far_exp = self._pick_expirations(inputs, snapshot)
        return [(near_exp, inputs.option_side), (far_exp, inputs.option_side)]

    def select_legs(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> list[Leg]:
        cfg = self._settings.diagonal
        if inputs.custom_strikes is not None:
            logger.warning(
                "%s diagonal: custom strikes are not supported, using automatic selection",
                inputs.symbol,
            )

        near_exp, far_exp = self._pick_expirations(inputs, snapshot)
        side = inputs.option_side
        price = inputs.current_price
        if side == OptionType.CALL:
            direction = "above"
            near_target = price + target_distance(price, cfg.near_distance_pct)
            far_target = price + target_distance(price, cfg.far_distance_pct)
        else:
            direction = "below"
            near_target = price - target_distance(price, cfg.near_distance_pct)
            far_target = price - target_distance(price, cfg.far_distance_pct)

        near_strike = strike_at_or_beyond(
            snapshot.strikes(near_exp, side), near_target, direction, inputs.symbol,
        )
        far_strike = strike_at_or_beyond(
            snapshot.strikes(far_exp, side), far_target, direction, inputs.symbol,
        )
        logger.debug(
            "%s diagonal: short %s %s %s, long %s %s %s",
            inputs.symbol, near_exp, near_strike, side.value, far_exp, far_strike, side.value,
        )

        as_of = inputs.as_of
        return [
            build_leg(
                listed_contract(snapshot, near_exp, side, near_strike),
                LegRole.SHORT, f"near_short_{side.value}", (near_exp - as_of).days, inputs.symbol,
            ),
            build_leg(
                listed_contract(snapshot, far_exp, side, far_strike),
                LegRole.LONG, f"far_long_{side.value}", (far_exp - as_of).days, inputs.symbol,
            ),
        ]

    def build_result(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        cfg = self._settings.diagonal
        near, far = self._split_legs(legs)
        debit = far.premium - near.premium
        if debit <= 0:
            raise InvalidDebitError(
                f"{inputs.symbol} diagonal: far premium {far.premium} does not exceed "
                f"near premium {near.premium}"
            )

        center = (near.strike + far.strike) / 2
        breakeven_offset = debit * to_decimal(cfg.breakeven_debit_multiple)
        max_profit = near.premium + abs(far.strike - near.strike) * to_decimal(cfg.strike_spread_share)

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
            max_profit=max_profit,
            lower_breakeven=center - breakeven_offset,
            upper_breakeven=center + breakeven_offset,
            net_debit=debit,
            risk_profile=self.profile.risk_level,
            is_estimate=True,
            notes=[ESTIMATE_NOTE],
        )

    def payoff(self, price: Decimal, legs: list[Leg]) -> Decimal:
        """Estimated per-share P&L at the near leg's expiration."""
        cfg = self._settings.diagonal
        near, far = self._split_legs(legs)
        debit = far.premium - near.premium
        center = (near.strike + far.strike) / 2
        if abs(price - center) <= center * to_decimal(cfg.profit_zone_pct) / 100:
            return self._quantize(near.premium * to_decimal(cfg.near_premium_kept) - debit)
        return -debit

    # --- Internals ---

    def _pick_expirations(
        self, inputs: StrategyInputs, snapshot: MarketSnapshot,
    ) -> tuple[date, date]:
        cfg = self._settings.diagonal
        as_of = inputs.as_of
        listed = [exp for exp in snapshot.expirations if exp >= as_of]
        if not listed:
            raise InsufficientMarketData(inputs.symbol, f"No expirations listed on or after {as_of}")

        def first_in(bounds: list[int]) -> date | None:
            lo, hi = bounds
            return next((e for e in listed if lo <= (e - as_of).days <= hi), None)

        near = first_in(cfg.near_dte_range) or listed[0]
        far = first_in(cfg.far_dte_range) or listed[-1]
        if near >= far:
            raise InsufficientMarketData(
                inputs.symbol,
                f"Diagonal needs a near expiration before the far one (near {near}, far {far})",
            )
        return near, far

    @staticmethod
    def _split_legs(legs: list[Leg]) -> tuple[Leg, Leg]:
        shorts = [leg for leg in legs if leg.role == LegRole.SHORT]
        longs = [leg for leg in legs if leg.role == LegRole.LONG]
        if len(shorts) != 1 or len(longs) != 1:
            raise ValueError("Diagonal needs exactly one short near leg and one long far leg")
        return shorts[0], longs[0]
