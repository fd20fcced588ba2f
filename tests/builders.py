"""Synthetic option chain builders shared across test modules.

Chains are priced as intrinsic + a time value that decays linearly with
distance from spot, with a 0.10 bid/ask spread around the mid.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from strategy_engine.models.chain import MarketSnapshot, OptionContract, OptionType
from strategy_engine.models.position import CustomStrikes, StrategyInputs, StrategyType

SYMBOL = "XYZ"
SPOT = Decimal("230")
AS_OF = date(2026, 10, 31)
NEAR_EXP = date(2026, 11, 20)   # 20 DTE from AS_OF
FAR_EXP = date(2026, 12, 30)    # 60 DTE from AS_OF
STRIKES = [Decimal(k) for k in range(180, 290, 10)]

_HALF_SPREAD = Decimal("0.05")


def _time_value(strike: Decimal, spot: Decimal, scale: Decimal) -> Decimal:
    tv = max(Decimal("4.00") - Decimal("0.10") * abs(strike - spot), Decimal("0.10"))
    return (tv * scale).quantize(Decimal("0.01"))


def make_contract(
    option_type: OptionType,
    strike: Decimal | str | int,
    bid: Decimal | str,
    ask: Decimal | str,
    expiration: date = NEAR_EXP,
    last: Decimal | str = "0",
) -> OptionContract:
    return OptionContract(
        option_type=option_type,
        strike=Decimal(str(strike)),
        bid=Decimal(str(bid)),
        ask=Decimal(str(ask)),
        last=Decimal(str(last)),
        expiration=expiration,
    )


def make_chain(
    expiration: date = NEAR_EXP,
    spot: Decimal = SPOT,
    strikes: list[Decimal] | None = None,
    tv_scale: Decimal = Decimal("1"),
    overrides: dict[tuple[OptionType, int], tuple[str, str]] | None = None,
) -> list[OptionContract]:
    """Calls and puts at every strike; ``overrides`` pins (bid, ask) per (type, strike)."""
    overrides = overrides or {}
    contracts = []
    for strike in strikes if strikes is not None else STRIKES:
        for option_type in (OptionType.CALL, OptionType.PUT):
            pinned = overrides.get((option_type, int(strike)))
            if pinned is not None:
                bid, ask = Decimal(pinned[0]), Decimal(pinned[1])
            else:
                if option_type == OptionType.CALL:
                    intrinsic = max(spot - strike, Decimal("0"))
                else:
                    intrinsic = max(strike - spot, Decimal("0"))
                mid = intrinsic + _time_value(strike, spot, tv_scale)
                bid, ask = mid - _HALF_SPREAD, mid + _HALF_SPREAD
            contracts.append(make_contract(option_type, strike, bid, ask, expiration))
    return contracts


def make_snapshot(*chains: list[OptionContract], spot: Decimal = SPOT) -> MarketSnapshot:
    contracts = [c for chain in chains for c in chain]
    if not chains:
        contracts = make_chain()
    return MarketSnapshot.from_contracts(SYMBOL, spot, contracts)


def make_inputs(
    strategy_type: StrategyType,
    days_to_expiry: int = 20,
    expiration: date = NEAR_EXP,
    custom: CustomStrikes | None = None,
    **kwargs,
) -> StrategyInputs:
    return StrategyInputs(
        strategy_type=strategy_type,
        symbol=SYMBOL,
        current_price=kwargs.pop("current_price", SPOT),
        expiration_date=expiration,
        days_to_expiry=days_to_expiry,
        implied_volatility=kwargs.pop("implied_volatility", Decimal("0.25")),
        custom_strikes=custom,
        **kwargs,
    )
