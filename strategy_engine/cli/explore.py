"""Exploration harness: price one strategy against a snapshot file.

Usage (after pip install):
    engine-explore snapshot.yaml --strategy iron_condor
    engine-explore snapshot.yaml --strategy diagonal_calendar --side put --dte 20

The snapshot file is YAML:
    symbol: XYZ
    current_price: 230
    contracts:
      - {option_type: call, strike: 250, bid: 1.15, ask: 1.25, expiration: 2026-11-20}
"""

from __future__ import annotations

import argparse
from datetime import date
from decimal import Decimal
from pathlib import Path

import yaml
from tabulate import tabulate

from strategy_engine.config import get_settings
from strategy_engine.exceptions import StrategyEngineError
from strategy_engine.models.chain import MarketSnapshot, OptionContract, OptionType
from strategy_engine.models.position import PositionResult, StrategyInputs, StrategyType
from strategy_engine.service.dispatcher import StrategyDispatcher
from strategy_engine.service.expected_move import calculate_expected_move


def print_section(title: str) -> None:
    print(f"\n{'=' * 72}")
    print(f"  {title}")
    print(f"{'=' * 72}")


def _decimals(row: dict) -> dict:
    # YAML floats go through str so 1.15 stays 1.15
    return {k: str(v) if isinstance(v, float) else v for k, v in row.items()}


def load_snapshot(path: Path) -> MarketSnapshot:
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    contracts = [OptionContract(**_decimals(c)) for c in raw.get("contracts", [])]
    return MarketSnapshot.from_contracts(
        symbol=raw["symbol"],
        current_price=Decimal(str(raw["current_price"])),
        contracts=contracts,
    )


def print_position(result: PositionResult) -> None:
    print_section(f"{result.symbol} {result.strategy_type} @ {result.current_price}")

    print("\n--- Legs ---")
    rows = [
        {
            "Leg": leg.label,
            "Role": leg.role.value,
            "Type": leg.option_type.value,
            "Strike": leg.strike,
            "Expiration": leg.expiration.isoformat(),
            "DTE": leg.days_to_expiry,
            "Qty": leg.quantity,
            "Premium": f"{leg.premium}{' *' if leg.low_confidence else ''}",
        }
        for leg in result.legs
    ]
    print(tabulate(rows, headers="keys", tablefmt="simple", stralign="right"))

    print("\n--- Risk ---")
    metrics = [
        ("Net credit" if result.net_credit is not None else "Net debit",
         result.net_credit if result.net_credit is not None else result.net_debit),
        ("Max loss", result.max_loss),
        ("Max profit", result.max_profit),
        ("Lower breakeven", result.lower_breakeven if result.lower_breakeven is not None else "-"),
        ("Upper breakeven", result.upper_breakeven if result.upper_breakeven is not None else "-"),
        ("Wing width", result.wing_width if result.wing_width is not None else "-"),
        ("Risk profile", result.risk_profile.value),
        ("Estimate", "yes" if result.is_estimate else "no"),
    ]
    print(tabulate(metrics, tablefmt="plain"))
    for note in result.notes:
        print(f"  note: {note}")


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Price an options strategy against a snapshot file")
    parser.add_argument("snapshot", type=Path, help="YAML snapshot file")
    parser.add_argument(
        "--strategy", required=True, choices=[s.value for s in StrategyType],
        help="Strategy to price",
    )
    parser.add_argument("--expiration", type=date.fromisoformat, help="Expiration (default: earliest listed)")
    parser.add_argument("--dte", type=int, help="Days to expiration (default: from today)")
    parser.add_argument("--iv", type=Decimal, default=Decimal("0.25"), help="Implied volatility, decimal (default 0.25)")
    parser.add_argument("--iv-percentile", type=Decimal, default=Decimal("50"))
    parser.add_argument("--side", choices=[t.value for t in OptionType], default=OptionType.CALL.value,
                        help="Diagonal calendar side (default call)")
    parser.add_argument("--portfolio", type=Decimal, default=Decimal("100000"), help="Portfolio value for sizing")
    parser.add_argument("--points", type=int, default=11, help="P&L curve samples")
    parser.add_argument("--range-pct", type=Decimal, default=Decimal("15"),
                        help="P&L curve span around spot, percent (default 15)")
    args = parser.parse_args(argv)

    try:
        snapshot = load_snapshot(args.snapshot)
    except (OSError, KeyError, ValueError) as e:
        print(f"\n  ERROR loading {args.snapshot}: {e}")
        return 1
    if not snapshot.expirations:
        print(f"\n  ERROR: {args.snapshot} lists no contracts")
        return 1

    expiration = args.expiration or snapshot.expirations[0]
    dte = args.dte if args.dte is not None else max((expiration - date.today()).days, 0)

    dispatcher = StrategyDispatcher(settings)
    try:
        inputs = StrategyInputs(
            strategy_type=args.strategy,
            symbol=snapshot.symbol,
            current_price=snapshot.current_price,
            expiration_date=expiration,
            days_to_expiry=dte,
            implied_volatility=args.iv,
            iv_percentile=args.iv_percentile,
            option_side=args.side,
        )
        result = dispatcher.calculate_position(args.strategy, inputs, snapshot)
    except (StrategyEngineError, ValueError) as e:
        print(f"\n  ERROR: {e}")
        return 1

    print_position(result)

    multiplier = settings.pricing.contract_multiplier
    print("\n--- Sizing ---")
    size = dispatcher.get_recommended_position_size(args.strategy, args.portfolio, result)
    print(f"  Max position     ${size.max_position_size:,.2f}")
    print(f"  Recommended      ${size.recommended_size:,.2f}")
    if size.recommended_contracts is not None:
        print(f"  Contracts        {size.recommended_contracts} (max {size.max_contracts})")
    print(f"  {size.reasoning}")

    move = calculate_expected_move(snapshot.current_price, args.iv, dte)
    print(f"\n  Expected move    ±{move.move} ({move.move_pct}%)  range {move.low} - {move.high}")

    print("\n--- P&L at expiration (per contract) ---")
    span = snapshot.current_price * args.range_pct / 100
    curve = dispatcher.calculate_pl_curve(
        args.strategy, result.legs,
        snapshot.current_price - span, snapshot.current_price + span, args.points,
    )
    rows = [
        {"Price": f"{p.price:.2f}", "P&L": f"{p.profit_loss * multiplier:,.2f}"}
        for p in curve
    ]
    print(tabulate(rows, headers="keys", tablefmt="simple", stralign="right"))

    print_section("Done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
