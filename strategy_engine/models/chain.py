"""Option contract and market snapshot models."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field

from strategy_engine.exceptions import NoContractsAvailable


class OptionType(StrEnum):
    CALL = "call"
    PUT = "put"


class OptionContract(BaseModel):
    """A single listed option, normalized from whatever the data provider sent."""

    option_type: OptionType
    strike: Decimal
    bid: Decimal
    ask: Decimal
    last: Decimal = Decimal("0")
    expiration: date
    volume: int = 0
    open_interest: int = 0

    @property
    def mid(self) -> Decimal:
        return (self.bid + self.ask) / 2

    def intrinsic_value(self, underlying_price: Decimal) -> Decimal:
        if self.option_type == OptionType.CALL:
            return max(underlying_price - self.strike, Decimal("0"))
        return max(self.strike - underlying_price, Decimal("0"))

    def is_otm(self, underlying_price: Decimal) -> bool:
        if self.option_type == OptionType.CALL:
            return self.strike > underlying_price
        return self.strike < underlying_price


class ExpirationChain(BaseModel):
    """Calls and puts listed for one expiration."""

    calls: list[OptionContract] = []
    puts: list[OptionContract] = []

    def side(self, option_type: OptionType) -> list[OptionContract]:
        return self.calls if option_type == OptionType.CALL else self.puts


class MarketSnapshot(BaseModel):
    """Spot price plus the chain indexed by expiration.

    Owned by the caller for the duration of one valuation; the engine only
    reads from it.
    """

    symbol: str = Field(min_length=1)
    current_price: Decimal = Field(gt=0)
    chains: dict[date, ExpirationChain] = {}

    @classmethod
    def from_contracts(
        cls,
        symbol: str,
        current_price: Decimal,
        contracts: list[OptionContract],
    ) -> MarketSnapshot:
        """Group a flat contract list by expiration and side."""
        grouped: dict[date, dict[str, list[OptionContract]]] = defaultdict(
            lambda: {"calls": [], "puts": []}
        )
        for c in contracts:
            key = "calls" if c.option_type == OptionType.CALL else "puts"
            grouped[c.expiration][key].append(c)
        chains = {exp: ExpirationChain(**sides) for exp, sides in grouped.items()}
        return cls(symbol=symbol, current_price=current_price, chains=chains)

    @property
    def expirations(self) -> list[date]:
        return sorted(self.chains)

    def side(self, expiration: date, option_type: OptionType) -> list[OptionContract]:
        """Contracts on one side of one expiration, sorted by strike.

        Raises:
            NoContractsAvailable: expiration not listed or side empty.
        """
        chain = self.chains.get(expiration)
        contracts = chain.side(option_type) if chain is not None else []
        if not contracts:
            raise NoContractsAvailable(expiration, option_type.value)
        return sorted(contracts, key=lambda c: c.strike)

    def strikes(self, expiration: date, option_type: OptionType) -> list[Decimal]:
        """Distinct listed strikes, ascending."""
        return sorted({c.strike for c in self.side(expiration, option_type)})

    def contract_at(
        self, expiration: date, option_type: OptionType, strike: Decimal,
    ) -> OptionContract | None:
        for c in self.side(expiration, option_type):
            if c.strike == strike:
                return c
        return None

    def contracts_near(
        self,
        expiration: date,
        side: OptionType,
        reference_strike: Decimal,
        count: int,
    ) -> list[OptionContract]:
        """The ``count`` contracts whose strikes are closest to ``reference_strike``.

        Ties are broken by lower strike first. Result is ordered closest first.
        """
        contracts = self.side(expiration, side)
        ranked = sorted(contracts, key=lambda c: (abs(c.strike - reference_strike), c.strike))
        return ranked[:count]
