"""One-standard-deviation expected move from implied volatility."""

from __future__ import annotations

from decimal import Decimal

from strategy_engine.config import get_settings
from strategy_engine.models.position import ExpectedMove

_DAYS_PER_YEAR = Decimal("365")


def calculate_expected_move(
    current_price: Decimal,
    implied_volatility: Decimal,
    days_to_expiry: int,
) -> ExpectedMove:
    """Expected move = price * iv * sqrt(dte / 365).

    Args:
        current_price: Spot price, must be positive.
        implied_volatility: Annualized IV as a decimal fraction (0.25 = 25%).
        days_to_expiry: Calendar days to the horizon.
    """
    if current_price <= 0:
        raise ValueError(f"current_price must be positive, got {current_price}")
    if not 0 <= implied_volatility <= 1:
        raise ValueError(
            f"implied_volatility must be a decimal fraction in [0, 1], got {implied_volatility}"
        )
    if days_to_expiry < 0:
        raise ValueError(f"days_to_expiry must be >= 0, got {days_to_expiry}")

    quantum = Decimal(1).scaleb(-get_settings().pricing.price_places)
    move = current_price * implied_volatility * (Decimal(days_to_expiry) / _DAYS_PER_YEAR).sqrt()
    move = move.quantize(quantum)
    return ExpectedMove(
        current_price=current_price,
        days_to_expiry=days_to_expiry,
        move=move,
        move_pct=(move / current_price * 100).quantize(Decimal("0.01")),
        low=current_price - move,
        high=current_price + move,
    )
