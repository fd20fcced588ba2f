"""Pydantic models for strategy inputs, priced positions and sizing."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import Literal, Union

from pydantic import BaseModel, Field, model_validator

from strategy_engine.models.chain import OptionType


class StrategyType(StrEnum):
    """Closed set of strategies the engine can value."""

    LONG_STRANGLE = "long_strangle"
    SHORT_STRANGLE = "short_strangle"
    IRON_CONDOR = "iron_condor"
    BUTTERFLY_SPREAD = "butterfly_spread"
    DIAGONAL_CALENDAR = "diagonal_calendar"


class LegRole(StrEnum):
    LONG = "long"
    SHORT = "short"


class RiskProfile(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNLIMITED = "unlimited"


# Tagged "no upper bound" marker for max_loss / max_profit.  Arithmetic with a
# Decimal raises TypeError.
UNBOUNDED: Literal["unbounded"] = "unbounded"

# Finite stand-in for consumers that need a numeric column (persistence).
UNBOUNDED_SENTINEL = Decimal("999999999")

RiskAmount = Union[Decimal, Literal["unbounded"]]


class CustomStrikes(BaseModel):
    """Caller-pinned strikes, used instead of the automatic selection.

    ``put_strike``/``call_strike`` are the strangle strikes or the condor's
    short strikes; the wing strikes are the condor's protective longs.
    """

    put_strike: Decimal | None = None
    call_strike: Decimal | None = None
    put_wing_strike: Decimal | None = None
    call_wing_strike: Decimal | None = None

    @model_validator(mode="after")
    def _pairs_complete(self) -> CustomStrikes:
        if (self.put_strike is None) != (self.call_strike is None):
            raise ValueError("put_strike and call_strike must be given together")
        if (self.put_wing_strike is None) != (self.call_wing_strike is None):
            raise ValueError("put_wing_strike and call_wing_strike must be given together")
        if self.put_wing_strike is not None and self.put_strike is None:
            raise ValueError("wing strikes require put_strike and call_strike")
        return self


class StrategyInputs(BaseModel):
    """Caller-supplied valuation request.

    ``implied_volatility`` is a decimal fraction (0.25 for 25%). Percent-style
    values are rejected rather than guessed at.
    """

    strategy_type: StrategyType
    symbol: str = Field(min_length=1)
    current_price: Decimal = Field(gt=0)
    expiration_date: date
    days_to_expiry: int = Field(ge=0)
    implied_volatility: Decimal = Field(ge=0, le=1)
    iv_percentile: Decimal = Field(default=Decimal("50"), ge=0, le=100)
    custom_strikes: CustomStrikes | None = None
    option_side: OptionType = OptionType.CALL  # diagonal calendar only

    @property
    def as_of(self) -> date:
        """Valuation date implied by the expiration and its DTE."""
        return self.expiration_date - timedelta(days=self.days_to_expiry)


class Leg(BaseModel):
    """One bought or sold option inside a priced position."""

    role: LegRole
    option_type: OptionType
    strike: Decimal
    premium: Decimal  # per share
    expiration: date
    days_to_expiry: int
    quantity: int = 1
    label: str  # "long_put", "short_call", "lower_wing", "near_short_call", ...
    low_confidence: bool = False  # premium came from last trade, not bid/ask


class PositionResult(BaseModel):
    """Full risk profile for one strategy, all amounts per share."""

    strategy_type: StrategyType
    symbol: str
    current_price: Decimal
    expiration_date: date
    days_to_expiry: int
    implied_volatility: Decimal
    iv_percentile: Decimal
    legs: list[Leg]
    max_loss: RiskAmount
    max_profit: RiskAmount
    lower_breakeven: Decimal | None = None
    upper_breakeven: Decimal | None = None
    net_credit: Decimal | None = None
    net_debit: Decimal | None = None
    wing_width: Decimal | None = None
    risk_profile: RiskProfile
    is_estimate: bool = False  # True when max_profit/breakevens come from a heuristic
    notes: list[str] = []

    @model_validator(mode="after")
    def _credit_xor_debit(self) -> PositionResult:
        if (self.net_credit is None) == (self.net_debit is None):
            raise ValueError("exactly one of net_credit / net_debit must be set")
        return self

    @property
    def is_unbounded_loss(self) -> bool:
        return self.max_loss == UNBOUNDED

    @property
    def is_unbounded_profit(self) -> bool:
        return self.max_profit == UNBOUNDED

    @property
    def max_loss_value(self) -> Decimal:
        """Numeric max loss; ``UNBOUNDED_SENTINEL`` when unbounded."""
        return UNBOUNDED_SENTINEL if self.is_unbounded_loss else self.max_loss

    @property
    def max_profit_value(self) -> Decimal:
        """Numeric max profit; ``UNBOUNDED_SENTINEL`` when unbounded."""
        return UNBOUNDED_SENTINEL if self.is_unbounded_profit else self.max_profit


class PositionSize(BaseModel):
    """Position sizing recommendation."""

    strategy_type: StrategyType
    portfolio_value: Decimal
    max_position_size: Decimal      # Dollars at risk, ceiling
    recommended_size: Decimal       # Dollars at risk, suggested
    max_contracts: int | None = None
    recommended_contracts: int | None = None
    reasoning: str


class ValidationResult(BaseModel):
    """Outcome of a market data sanity check."""

    is_valid: bool
    issues: list[str] = []    # Block valuation
    warnings: list[str] = []  # Reported, never block


class StrategyProfile(BaseModel):
    """Static description and trading rules for a strategy."""

    name: str
    description: str
    market_outlook: str
    optimal_days_to_expiry: int
    risk_level: RiskProfile
    complexity: str            # "simple" | "intermediate" | "advanced"
    capital_requirement: str   # "low" | "medium" | "high"
    directionality: str        # "bullish" | "bearish" | "neutral" | "volatile"
    entry_rules: list[str] = []
    exit_rules: list[str] = []
    risk_management: list[str] = []


class PayoffPoint(BaseModel):
    price: Decimal
    profit_loss: Decimal


class ExpectedMove(BaseModel):
    """One-standard-deviation price range implied by IV over a horizon."""

    current_price: Decimal
    days_to_expiry: int
    move: Decimal
    move_pct: Decimal
    low: Decimal
    high: Decimal
