"""Typed exceptions for the valuation engine."""

from __future__ import annotations

from datetime import date


class StrategyEngineError(Exception):
    """Base class for every engine failure."""


class InsufficientMarketData(StrategyEngineError):
    """Chain is missing the strikes/expirations a strategy needs, or failed validation."""

    def __init__(self, symbol: str, message: str, issues: list[str] | None = None) -> None:
        self.symbol = symbol
        self.issues = list(issues or [])
        detail = f" ({'; '.join(self.issues)})" if self.issues else ""
        super().__init__(f"[{symbol}] {message}{detail}")


class InsufficientStrikes(InsufficientMarketData):
    """Fewer listed strikes than the strategy shape requires."""


class NoContractsAvailable(StrategyEngineError):
    """Lookup on an absent expiration or an empty side of the chain."""

    def __init__(self, expiration: date, side: str) -> None:
        self.expiration = expiration
        self.side = side
        super().__init__(f"No {side} contracts listed for expiration {expiration.isoformat()}")


class InvalidStrikeOrdering(StrategyEngineError):
    """Protective strike is not strictly further from spot than the inner strike."""


class InvalidDebitError(StrategyEngineError):
    """A debit structure priced out at zero or a credit."""


class NegativeCreditError(StrategyEngineError):
    """A credit structure priced out at zero or a debit."""


class InvalidPositionError(StrategyEngineError):
    """Derived risk profile is internally inconsistent."""


class UnsupportedStrategy(StrategyEngineError):
    """Unknown strategy type tag."""

    def __init__(self, strategy_type: object) -> None:
        self.strategy_type = strategy_type
        super().__init__(f"Strategy {strategy_type!r} is not supported")
