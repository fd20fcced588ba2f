"""Strategy engine services."""

from strategy_engine.service.dispatcher import StrategyDispatcher, calculate_position
from strategy_engine.service.expected_move import calculate_expected_move
from strategy_engine.service.validator import (
    check_broker_accuracy,
    select_best_contract,
    validate_chain,
    validate_contract,
    validate_legs,
)

__all__ = [
    "StrategyDispatcher",
    "calculate_position",
    "calculate_expected_move",
    "validate_contract",
    "validate_chain",
    "validate_legs",
    "select_best_contract",
    "check_broker_accuracy",
]
