"""Market data sanity checks run before a strategy result is built.

Issues block valuation; warnings are reported and never block.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from strategy_engine.config import get_settings
from strategy_engine.exceptions import NoContractsAvailable
from strategy_engine.models.position import ValidationResult
from strategy_engine.strategies._selection import to_decimal

if TYPE_CHECKING:
    from strategy_engine.config import Settings
    from strategy_engine.models.chain import MarketSnapshot, OptionContract, OptionType
    from strategy_engine.models.position import Leg

logger = logging.getLogger(__name__)


def _label(contract: OptionContract) -> str:
    return f"{contract.expiration} {contract.strike}{contract.option_type.value[0].upper()}"


def validate_contract(
    contract: OptionContract,
    underlying_price: Decimal,
    settings: Settings | None = None,
) -> ValidationResult:
    """Check one contract's quote against itself and the underlying.

    Rules:
        - bid above ask: issue
        - spread wider than ``max_spread_pct`` of mid: warning
        - OTM premium above ``max_otm_premium_pct`` of spot: issue
        - ITM premium below intrinsic by more than ``intrinsic_tolerance_pct``: issue
    """
    cfg = (settings or get_settings()).validation
    issues: list[str] = []
    warnings: list[str] = []
    name = _label(contract)

    if contract.bid > contract.ask:
        issues.append(f"{name}: bid {contract.bid} above ask {contract.ask}")

    mid = contract.mid
    if contract.bid == 0 and contract.ask == 0:
        warnings.append(f"{name}: no bid/ask quote")
    elif mid > 0:
        spread_pct = (contract.ask - contract.bid) / mid * 100
        if spread_pct > to_decimal(cfg.max_spread_pct):
            warnings.append(f"{name}: wide spread ({spread_pct:.0f}% of mid)")

        if contract.is_otm(underlying_price):
            if mid > underlying_price * to_decimal(cfg.max_otm_premium_pct) / 100:
                issues.append(
                    f"{name}: OTM premium {mid} exceeds {cfg.max_otm_premium_pct:.0f}% "
                    f"of spot {underlying_price}"
                )
        else:
            intrinsic = contract.intrinsic_value(underlying_price)
            floor = intrinsic * (1 - to_decimal(cfg.intrinsic_tolerance_pct) / 100)
            if intrinsic > 0 and mid < floor:
                issues.append(f"{name}: premium {mid} below intrinsic value {intrinsic}")

    return ValidationResult(is_valid=not issues, issues=issues, warnings=warnings)


def validate_chain(
    snapshot: MarketSnapshot,
    sides: list[tuple[date, OptionType]],
) -> ValidationResult:
    """Check that each (expiration, side) a strategy reads is listed.

    A missing expiration or an empty side is an issue. Quotes are checked
    separately, once legs are known, by ``validate_legs``.
    """
    issues: list[str] = []
    for exp, option_type in sides:
        try:
            snapshot.side(exp, option_type)
        except NoContractsAvailable as e:
            issues.append(str(e))

    if issues:
        logger.debug("%s chain validation: %d issues", snapshot.symbol, len(issues))
    return ValidationResult(is_valid=not issues, issues=issues)


def validate_legs(
    snapshot: MarketSnapshot,
    legs: list[Leg],
    settings: Settings | None = None,
) -> ValidationResult:
    """Validate the listed contract behind each selected leg."""
    issues: list[str] = []
    warnings: list[str] = []
    for leg in legs:
        contract = snapshot.contract_at(leg.expiration, leg.option_type, leg.strike)
        if contract is None:
            issues.append(f"{leg.label}: {leg.expiration} {leg.strike} {leg.option_type.value} is not listed")
            continue
        result = validate_contract(contract, snapshot.current_price, settings)
        issues.extend(result.issues)
        warnings.extend(result.warnings)
    return ValidationResult(is_valid=not issues, issues=issues, warnings=warnings)


def check_broker_accuracy(
    contract: OptionContract,
    expected_bid: Decimal | None = None,
    expected_ask: Decimal | None = None,
    settings: Settings | None = None,
) -> bool:
    """True when bid and ask sit within ``broker_tolerance_pct`` of a broker's quote.

    Without a usable reference (missing or zero bid/ask) there is nothing to
    compare against and the quote is accepted.
    """
    if not expected_bid or not expected_ask:
        return True
    tolerance = to_decimal((settings or get_settings()).validation.broker_tolerance_pct) / 100
    bid_diff = abs(contract.bid - expected_bid) / expected_bid
    ask_diff = abs(contract.ask - expected_ask) / expected_ask
    if bid_diff > tolerance or ask_diff > tolerance:
        logger.warning(
            "%s diverges from broker: expected %s/%s, got %s/%s",
            _label(contract), expected_bid, expected_ask, contract.bid, contract.ask,
        )
        return False
    return True


def select_best_contract(
    candidates: list[tuple[str, OptionContract]],
    underlying_price: Decimal,
    settings: Settings | None = None,
) -> tuple[str, OptionContract] | None:
    """Pick the best quote for one contract among several data sources.

    Invalid quotes are dropped; of the rest, the tightest spread relative to
    mid wins (first source on ties). Returns None when nothing is valid.
    """
    best: tuple[str, OptionContract] | None = None
    best_spread: Decimal | None = None
    for source, contract in candidates:
        if not validate_contract(contract, underlying_price, settings).is_valid:
            logger.debug("Dropping %s quote from %s: failed validation", _label(contract), source)
            continue
        mid = contract.mid
        spread = (contract.ask - contract.bid) / mid if mid > 0 else None
        if spread is None:
            continue
        if best_spread is None or spread < best_spread:
            best, best_spread = (source, contract), spread
    return best
