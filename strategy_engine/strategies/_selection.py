"""Strike and premium selection shared by every strategy calculator.

Pure functions: no data fetching, no side effects beyond logging.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, TypeVar

from strategy_engine.exceptions import (
    InsufficientMarketData,
    InsufficientStrikes,
    InvalidStrikeOrdering,
)
from strategy_engine.models.chain import OptionContract, OptionType
from strategy_engine.models.position import Leg, LegRole

if TYPE_CHECKING:
    from strategy_engine.models.chain import MarketSnapshot
    from strategy_engine.models.position import StrategyInputs

logger = logging.getLogger(__name__)

T = TypeVar("T")


def to_decimal(value: float | int) -> Decimal:
    """Config floats → Decimal via their repr, so 0.1 stays 0.1."""
    return Decimal(str(value))


def tier_for_dte(tiers: list[T], days_to_expiry: int) -> T:
    """First tier whose ``max_dte`` covers ``days_to_expiry``; None is the catch-all."""
    for tier in tiers:
        if tier.max_dte is None or days_to_expiry <= tier.max_dte:
            return tier
    raise ValueError(f"No configured tier covers {days_to_expiry} DTE")


def target_distance(current_price: Decimal, distance_pct: float) -> Decimal:
    """Distance from spot in points for a percent-of-spot setting."""
    return current_price * to_decimal(distance_pct) / 100


def leg_premium(contract: OptionContract, symbol: str) -> tuple[Decimal, bool]:
    """Usable premium for a contract: (premium, low_confidence).

    Midpoint of bid/ask. ``last`` is only used when both bid and ask are zero,
    and the premium is then flagged low-confidence.
    """
    if contract.bid > 0 or contract.ask > 0:
        return contract.mid, False
    if contract.last > 0:
        logger.warning(
            "%s %s %s %s: no bid/ask, using last trade %s (low confidence)",
            symbol, contract.expiration, contract.strike, contract.option_type.value, contract.last,
        )
        return contract.last, True
    raise InsufficientMarketData(
        symbol,
        f"No usable premium for {contract.strike} {contract.option_type.value} "
        f"expiring {contract.expiration}: bid, ask and last are all zero",
    )


def nearest_strike(strikes: list[Decimal], target: Decimal) -> Decimal:
    """Listed strike closest to target, lower strike on ties."""
    if not strikes:
        raise ValueError("No strikes provided")
    return min(strikes, key=lambda k: (abs(k - target), k))


def strike_at_or_beyond(
    strikes: list[Decimal],
    target: Decimal,
    direction: str,
    symbol: str,
) -> Decimal:
    """Nearest listed strike at or beyond ``target``, never inside it.

    direction: "below" walks down from target (puts), "above" walks up (calls).
    """
    if direction == "below":
        candidates = [k for k in strikes if k <= target]
        if candidates:
            return max(candidates)
    else:
        candidates = [k for k in strikes if k >= target]
        if candidates:
            return min(candidates)
    raise InsufficientStrikes(symbol, f"No listed strike at or {direction} {target}")


def require_strikes(strikes: list[Decimal], minimum: int, symbol: str, shape: str) -> None:
    if len(strikes) < minimum:
        raise InsufficientStrikes(
            symbol,
            f"{shape} needs at least {minimum} listed strikes, found {len(strikes)}",
        )


def check_outer_beyond_inner(inner: Decimal, outer: Decimal, side: OptionType) -> None:
    """Protective strike must sit strictly further from spot than the inner strike."""
    beyond = outer < inner if side == OptionType.PUT else outer > inner
    if not beyond:
        raise InvalidStrikeOrdering(
            f"Outer {side.value} strike {outer} must be strictly "
            f"{'below' if side == OptionType.PUT else 'above'} inner strike {inner}"
        )


def listed_contract(
    snapshot: MarketSnapshot,
    expiration: date,
    option_type: OptionType,
    strike: Decimal,
) -> OptionContract:
    contract = snapshot.contract_at(expiration, option_type, strike)
    if contract is None:
        raise InsufficientStrikes(
            snapshot.symbol,
            f"No {option_type.value} listed at strike {strike} for {expiration}",
        )
    return contract


def build_leg(
    contract: OptionContract,
    role: LegRole,
    label: str,
    days_to_expiry: int,
    symbol: str,
    quantity: int = 1,
) -> Leg:
    premium, low_confidence = leg_premium(contract, symbol)
    return Leg(
        role=role,
        option_type=contract.option_type,
        strike=contract.strike,
        premium=premium,
        expiration=contract.expiration,
        days_to_expiry=days_to_expiry,
        quantity=quantity,
        label=label,
        low_confidence=low_confidence,
    )


def select_strangle_contracts(
    inputs: StrategyInputs,
    snapshot: MarketSnapshot,
    distance_pct: float,
) -> tuple[OptionContract, OptionContract]:
    """Put below and call above spot for the strangle family: (put, call).

    Custom strikes, when supplied, are used as-is and must be listed.
    """
    exp = inputs.expiration_date
    custom = inputs.custom_strikes
    if custom is not None and custom.put_strike is not None:
        put_strike, call_strike = custom.put_strike, custom.call_strike
        if put_strike >= call_strike:
            raise InvalidStrikeOrdering(
                f"Put strike {put_strike} must be below call strike {call_strike}"
            )
    else:
        distance = target_distance(inputs.current_price, distance_pct)
        put_strike = strike_at_or_beyond(
            snapshot.strikes(exp, OptionType.PUT), inputs.current_price - distance, "below", inputs.symbol,
        )
        call_strike = strike_at_or_beyond(
            snapshot.strikes(exp, OptionType.CALL), inputs.current_price + distance, "above", inputs.symbol,
        )

    logger.debug("%s strangle strikes: put %s, call %s", inputs.symbol, put_strike, call_strike)
    return (
        listed_contract(snapshot, exp, OptionType.PUT, put_strike),
        listed_contract(snapshot, exp, OptionType.CALL, call_strike),
    )
