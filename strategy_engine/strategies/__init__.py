"""Strategy calculators, one per StrategyType."""

from strategy_engine.models.position import StrategyType
from strategy_engine.strategies.base import StrategyCalculator
from strategy_engine.strategies.butterfly import ButterflyCalculator
from strategy_engine.strategies.diagonal_calendar import DiagonalCalendarCalculator
from strategy_engine.strategies.iron_condor import IronCondorCalculator
from strategy_engine.strategies.long_strangle import LongStrangleCalculator
from strategy_engine.strategies.short_strangle import ShortStrangleCalculator

CALCULATORS: dict[StrategyType, type[StrategyCalculator]] = {
    StrategyType.LONG_STRANGLE: LongStrangleCalculator,
    StrategyType.SHORT_STRANGLE: ShortStrangleCalculator,
    StrategyType.IRON_CONDOR: IronCondorCalculator,
    StrategyType.BUTTERFLY_SPREAD: ButterflyCalculator,
    StrategyType.DIAGONAL_CALENDAR: DiagonalCalendarCalculator,
}

__all__ = [
    "CALCULATORS",
    "StrategyCalculator",
    "LongStrangleCalculator",
    "ShortStrangleCalculator",
    "IronCondorCalculator",
    "ButterflyCalculator",
    "DiagonalCalendarCalculator",
]
