"""StrategyDispatcher: route valuation requests to the right calculator.

Also owns position sizing, P&L curves and strategy metadata lookups.
"""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal
from typing import TYPE_CHECKING

from strategy_engine.config import get_settings
from strategy_engine.exceptions import (
    InsufficientMarketData,
    StrategyEngineError,
    UnsupportedStrategy,
)
from strategy_engine.models.position import (
    PayoffPoint,
    PositionSize,
    RiskProfile,
    StrategyType,
)
from strategy_engine.service.validator import validate_chain, validate_legs
from strategy_engine.strategies import CALCULATORS
from strategy_engine.strategies._selection import to_decimal

if TYPE_CHECKING:
    from strategy_engine.config import Settings
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import (
        Leg,
        PositionResult,
        StrategyInputs,
        StrategyProfile,
        ValidationResult,
    )
    from strategy_engine.strategies.base import StrategyCalculator

logger = logging.getLogger(__name__)


def resolve_strategy_type(strategy_type: StrategyType | str) -> StrategyType:
    """Map a tag to StrategyType; unknown tags raise UnsupportedStrategy."""
    try:
        resolved = StrategyType(strategy_type)
    except ValueError:
        raise UnsupportedStrategy(str(strategy_type)) from None
    if resolved not in CALCULATORS:
        raise UnsupportedStrategy(resolved.value)
    return resolved


class StrategyDispatcher:
    """Single entry point for pricing, sizing and describing strategies.

    Stateless between calls apart from the settings it was built with.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def get_calculator(self, strategy_type: StrategyType | str) -> StrategyCalculator:
        return CALCULATORS[resolve_strategy_type(strategy_type)](self._settings)

    # --- Valuation ---

    def calculate_position(
        self,
        strategy_type: StrategyType | str,
        inputs: StrategyInputs,
        snapshot: MarketSnapshot,
    ) -> PositionResult:
        """Check the chain, select and validate legs, then compute the risk profile.

        Raises:
            UnsupportedStrategy: unknown strategy tag.
            InsufficientMarketData: chain failed validation or lacks usable data.
            StrategyEngineError: any other pricing failure, re-raised as-is.
        """
        resolved = resolve_strategy_type(strategy_type)
        calculator = self.get_calculator(resolved)
        if inputs.strategy_type != resolved:
            inputs = inputs.model_copy(update={"strategy_type": resolved})
        if inputs.symbol != snapshot.symbol:
            raise ValueError(
                f"Inputs are for {inputs.symbol!r} but the snapshot is for {snapshot.symbol!r}"
            )
        if inputs.current_price != snapshot.current_price:
            raise ValueError(
                f"Inputs give {inputs.symbol} spot {inputs.current_price} but the snapshot "
                f"has {snapshot.current_price}"
            )

        try:
            sides = calculator.required_sides(inputs, snapshot)
            self._require_valid(resolved, inputs.symbol, validate_chain(snapshot, sides))
            legs = calculator.select_legs(inputs, snapshot)
            validation = validate_legs(snapshot, legs, self._settings)
            for warning in validation.warnings:
                logger.warning("%s: %s", inputs.symbol, warning)
            self._require_valid(resolved, inputs.symbol, validation)
            result = calculator.price(inputs, legs)
        except StrategyEngineError as e:
            logger.warning("Cannot price %s for %s: %s", resolved, inputs.symbol, e)
            raise

        if validation.warnings:
            result = result.model_copy(update={"notes": result.notes + validation.warnings})
        logger.info(
            "%s %s: max_loss=%s max_profit=%s breakevens=%s/%s",
            inputs.symbol, resolved, result.max_loss, result.max_profit,
            result.lower_breakeven, result.upper_breakeven,
        )
        return result

    @staticmethod
    def _require_valid(
        strategy_type: StrategyType, symbol: str, validation: ValidationResult,
    ) -> None:
        if not validation.is_valid:
            raise InsufficientMarketData(
                symbol, f"Market data failed validation for {strategy_type}", validation.issues,
            )

    def get_profit_loss_at_price(
        self, strategy_type: StrategyType | str, price: Decimal, legs: list[Leg],
    ) -> Decimal:
        """Per-share P&L of ``legs`` at ``price`` using the strategy's payoff."""
        return self.get_calculator(strategy_type).payoff(price, legs)

    def calculate_pl_curve(
        self,
        strategy_type: StrategyType | str,
        legs: list[Leg],
        price_min: Decimal,
        price_max: Decimal,
        points: int = 50,
    ) -> list[PayoffPoint]:
        """Sample the payoff at ``points`` evenly spaced prices, both ends included."""
        if points < 2:
            raise ValueError(f"points must be >= 2, got {points}")
        if price_min >= price_max:
            raise ValueError(f"price_min {price_min} must be below price_max {price_max}")

        calculator = self.get_calculator(strategy_type)
        step = (price_max - price_min) / (points - 1)
        curve = []
        for i in range(points):
            price = price_max if i == points - 1 else price_min + step * i
            curve.append(PayoffPoint(price=price, profit_loss=calculator.payoff(price, legs)))
        return curve

    # --- Sizing ---

    def get_recommended_position_size(
        self,
        strategy_type: StrategyType | str,
        portfolio_value: Decimal,
        position: PositionResult | None = None,
    ) -> PositionSize:
        """Dollar budget (and contracts, for defined risk) for one position.

        Undefined-risk structures are capped at ``unlimited_risk_cap_pct``.
        """
        if portfolio_value <= 0:
            raise ValueError(f"portfolio_value must be positive, got {portfolio_value}")

        resolved = resolve_strategy_type(strategy_type)
        cfg = self._settings.sizing
        risk = position.risk_profile if position is not None else CALCULATORS[resolved].profile.risk_level
        level = cfg.levels[risk.value]

        max_pct = to_decimal(level.max_pct)
        rec_pct = to_decimal(level.recommended_pct)
        unbounded = risk == RiskProfile.UNLIMITED or (position is not None and position.is_unbounded_loss)
        if unbounded:
            max_pct = min(max_pct, to_decimal(cfg.unlimited_risk_cap_pct))
            rec_pct = min(rec_pct, max_pct)

        max_size = portfolio_value * max_pct
        rec_size = portfolio_value * rec_pct
        reasoning = level.reasoning

        max_contracts = rec_contracts = None
        if position is not None and not position.is_unbounded_loss:
            per_contract = position.max_loss * self._settings.pricing.contract_multiplier
            max_contracts = int((max_size / per_contract).to_integral_value(ROUND_FLOOR))
            rec_contracts = int((rec_size / per_contract).to_integral_value(ROUND_FLOOR))
            reasoning += f". Max loss {per_contract} per contract → {rec_contracts} contracts recommended"

        return PositionSize(
            strategy_type=resolved,
            portfolio_value=portfolio_value,
            max_position_size=max_size,
            recommended_size=rec_size,
            max_contracts=max_contracts,
            recommended_contracts=rec_contracts,
            reasoning=reasoning,
        )

    # --- Metadata ---

    def available_strategies(self) -> dict[StrategyType, StrategyProfile]:
        return {st: calc.profile for st, calc in CALCULATORS.items()}

    def get_strategy_profile(self, strategy_type: StrategyType | str) -> StrategyProfile:
        return CALCULATORS[resolve_strategy_type(strategy_type)].profile

    def validate_strategy_inputs(
        self, strategy_type: StrategyType | str, inputs: StrategyInputs,
    ) -> bool:
        """True when the strategy is supported and the inputs were built for it."""
        try:
            resolved = resolve_strategy_type(strategy_type)
        except UnsupportedStrategy as e:
            logger.warning("%s", e)
            return False
        if inputs.strategy_type != resolved:
            logger.warning(
                "Inputs are for %s, not %s", inputs.strategy_type, resolved,
            )
            return False
        return True


def calculate_position(
    strategy_type: StrategyType | str,
    inputs: StrategyInputs,
    snapshot: MarketSnapshot,
) -> PositionResult:
    """Price one position with default settings."""
    return StrategyDispatcher().calculate_position(strategy_type, inputs, snapshot)
