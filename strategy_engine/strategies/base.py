"""Abstract strategy calculator and the payoff helpers every strategy shares.

One subclass per strategy type. A calculator reads a MarketSnapshot, picks its
legs, and builds a PositionResult; it never fetches or mutates market data.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar

from strategy_engine.config import get_settings
from strategy_engine.exceptions import InvalidPositionError
from strategy_engine.models.chain import OptionType
from strategy_engine.models.position import LegRole

if TYPE_CHECKING:
    from strategy_engine.config import Settings
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import (
        Leg,
        PositionResult,
        StrategyInputs,
        StrategyProfile,
        StrategyType,
    )

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


# --- Payoff helpers ---


def intrinsic(option_type: OptionType, strike: Decimal, price: Decimal) -> Decimal:
    if option_type == OptionType.CALL:
        return max(price - strike, _ZERO)
    return max(strike - price, _ZERO)


def expiration_payoff(price: Decimal, legs: list[Leg]) -> Decimal:
    """Per-share P&L at expiration for legs that all expire together."""
    total = _ZERO
    for leg in legs:
        value = intrinsic(leg.option_type, leg.strike, price)
        if leg.role == LegRole.LONG:
            total += leg.quantity * (value - leg.premium)
        else:
            total += leg.quantity * (leg.premium - value)
    return total


def find_leg(legs: list[Leg], label: str) -> Leg:
    for leg in legs:
        if leg.label == label:
            return leg
    raise ValueError(f"Position has no {label!r} leg (legs: {[leg.label for leg in legs]})")


# --- Calculator ABC ---


class StrategyCalculator(ABC):
    """Values one strategy type against a market snapshot."""

    strategy_type: ClassVar[StrategyType]
    profile: ClassVar[StrategyProfile]

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def required_sides(
        self, inputs: StrategyInputs, snapshot: MarketSnapshot,
    ) -> list[tuple[date, OptionType]]:
        """(expiration, side) pairs the calculator reads. Both sides of one expiration by default."""
        return [(inputs.expiration_date, OptionType.PUT), (inputs.expiration_date, OptionType.CALL)]

    @abstractmethod
    def select_legs(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> list[Leg]:
        """Pick strikes and premiums from the snapshot."""
        ...

    @abstractmethod
    def build_result(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        """Derive max loss/profit, breakevens and net premium from the legs."""
        ...

    def payoff(self, price: Decimal, legs: list[Leg]) -> Decimal:
        """Per-share P&L at ``price`` when the position expires."""
        return expiration_payoff(price, legs)

    def calculate(self, inputs: StrategyInputs, snapshot: MarketSnapshot) -> PositionResult:
        return self.price(inputs, self.select_legs(inputs, snapshot))

    def price(self, inputs: StrategyInputs, legs: list[Leg]) -> PositionResult:
        """Build and sanity-check the result for legs already selected."""
        if any(leg.low_confidence for leg in legs):
            logger.warning(
                "%s %s: priced with last-trade premiums", inputs.symbol, self.strategy_type,
            )
        result = self.build_result(inputs, legs)
        check_result(result)
        return result

    def _quantize(self, value: Decimal) -> Decimal:
        return value.quantize(Decimal(1).scaleb(-self._settings.pricing.price_places))


def check_result(result: PositionResult) -> None:
    """Reject results whose risk figures contradict each other."""
    lower, upper = result.lower_breakeven, result.upper_breakeven
    if lower is not None and upper is not None and lower >= upper:
        raise InvalidPositionError(
            f"{result.strategy_type}: lower breakeven {lower} is not below upper breakeven {upper}"
        )
    if not result.is_unbounded_loss and result.max_loss <= 0:
        raise InvalidPositionError(
            f"{result.strategy_type}: max loss {result.max_loss} must be positive"
        )
    if not result.is_estimate and not result.is_unbounded_profit and result.max_profit <= 0:
        raise InvalidPositionError(
            f"{result.strategy_type}: max profit {result.max_profit} must be positive"
        )
