"""Options strategy valuation engine: leg selection, risk profiles and payoffs."""

# Config
from strategy_engine.config import Settings, get_settings, load_settings, reset_settings

# Errors
from strategy_engine.exceptions import (
    InsufficientMarketData,
    InsufficientStrikes,
    InvalidDebitError,
    InvalidPositionError,
    InvalidStrikeOrdering,
    NegativeCreditError,
    NoContractsAvailable,
    StrategyEngineError,
    UnsupportedStrategy,
)

# Models
from strategy_engine.models.chain import (
    ExpirationChain,
    MarketSnapshot,
    OptionContract,
    OptionType,
)
from strategy_engine.models.position import (
    UNBOUNDED,
    UNBOUNDED_SENTINEL,
    CustomStrikes,
    ExpectedMove,
    Leg,
    LegRole,
    PayoffPoint,
    PositionResult,
    PositionSize,
    RiskProfile,
    StrategyInputs,
    StrategyProfile,
    StrategyType,
    ValidationResult,
)

# Services
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
    # Config
    "Settings",
    "get_settings",
    "load_settings",
    "reset_settings",
    # Errors
    "StrategyEngineError",
    "InsufficientMarketData",
    "InsufficientStrikes",
    "NoContractsAvailable",
    "InvalidStrikeOrdering",
    "InvalidDebitError",
    "NegativeCreditError",
    "InvalidPositionError",
    "UnsupportedStrategy",
    # Models
    "OptionType",
    "OptionContract",
    "ExpirationChain",
    "MarketSnapshot",
    "StrategyType",
    "LegRole",
    "RiskProfile",
    "UNBOUNDED",
    "UNBOUNDED_SENTINEL",
    "CustomStrikes",
    "StrategyInputs",
    "Leg",
    "PositionResult",
    "PositionSize",
    "ValidationResult",
    "StrategyProfile",
    "PayoffPoint",
    "ExpectedMove",
    # Services
    "StrategyDispatcher",
    "calculate_position",
    "calculate_expected_move",
    "validate_contract",
    "validate_chain",
    "validate_legs",
    "select_best_contract",
    "check_broker_accuracy",
]
