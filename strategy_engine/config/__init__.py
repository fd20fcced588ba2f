"""Engine settings: strike tiers, validation thresholds and sizing levels from YAML."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# --- Settings models ---


class DistanceTier(BaseModel):
    """Percent-of-spot strike distance for positions up to ``max_dte`` days.

    ``max_dte`` of None is the catch-all tier and must come last.
    """

    max_dte: int | None = None
    distance_pct: float


class CondorTier(BaseModel):
    max_dte: int | None = None
    short_distance_pct: float
    wing_width_pct: float


class StepTier(BaseModel):
    max_dte: int | None = None
    steps: int


class IncrementTier(BaseModel):
    """Strike increment for underlyings priced below ``max_price``."""

    max_price: float | None = None
    increment: float


class PricingSettings(BaseModel):
    contract_multiplier: int = 100
    price_places: int = 4  # Decimal places kept on derived prices


class LongStrangleSettings(BaseModel):
    distance_tiers: list[DistanceTier] = Field(default_factory=lambda: [
        DistanceTier(max_dte=7, distance_pct=3.0),
        DistanceTier(max_dte=30, distance_pct=5.0),
        DistanceTier(distance_pct=8.0),
    ])


class ShortStrangleSettings(BaseModel):
    distance_tiers: list[DistanceTier] = Field(default_factory=lambda: [
        DistanceTier(max_dte=14, distance_pct=8.0),
        DistanceTier(max_dte=45, distance_pct=12.0),
        DistanceTier(distance_pct=15.0),
    ])
    min_premium_to_width: float = 0.02


class IronCondorSettings(BaseModel):
    tiers: list[CondorTier] = Field(default_factory=lambda: [
        CondorTier(max_dte=14, short_distance_pct=5.0, wing_width_pct=3.0),
        CondorTier(max_dte=30, short_distance_pct=8.0, wing_width_pct=5.0),
        CondorTier(short_distance_pct=12.0, wing_width_pct=8.0),
    ])
    min_strikes_per_side: int = 4


class ButterflySettings(BaseModel):
    increment_tiers: list[IncrementTier] = Field(default_factory=lambda: [
        IncrementTier(max_price=25, increment=1.0),
        IncrementTier(max_price=50, increment=2.5),
        IncrementTier(max_price=200, increment=5.0),
        IncrementTier(max_price=500, increment=10.0),
        IncrementTier(increment=25.0),
    ])
    wing_step_tiers: list[StepTier] = Field(default_factory=lambda: [
        StepTier(max_dte=14, steps=2),
        StepTier(max_dte=30, steps=3),
        StepTier(steps=4),
    ])
    min_strikes: int = 3


class DiagonalSettings(BaseModel):
    near_dte_range: list[int] = Field(default_factory=lambda: [7, 30])
    far_dte_range: list[int] = Field(default_factory=lambda: [45, 90])
    near_distance_pct: float = 5.0
    far_distance_pct: float = 2.0
    strike_spread_share: float = 0.5       # Share of the strike spread added to the near premium for max profit
    breakeven_debit_multiple: float = 2.0  # Breakevens sit this many debits either side of the average strike
    profit_zone_pct: float = 5.0           # Profitable zone half-width, % of the average strike
    near_premium_kept: float = 0.8         # Share of the near premium kept inside the zone


class ValidationSettings(BaseModel):
    max_spread_pct: float = 50.0          # Spread/mid above this is a warning
    max_otm_premium_pct: float = 50.0     # OTM premium above this % of spot is an issue
    intrinsic_tolerance_pct: float = 5.0  # ITM premium may sit this far under intrinsic
    broker_tolerance_pct: float = 5.0     # Max bid/ask drift from a broker reference quote


class RiskLevelSizing(BaseModel):
    max_pct: float
    recommended_pct: float
    reasoning: str


class SizingSettings(BaseModel):
    levels: dict[str, RiskLevelSizing] = Field(default_factory=lambda: {
        "low": RiskLevelSizing(
            max_pct=0.10, recommended_pct=0.05,
            reasoning="Low risk strategy - can size larger positions",
        ),
        "medium": RiskLevelSizing(
            max_pct=0.05, recommended_pct=0.02,
            reasoning="Medium risk strategy - moderate position sizing",
        ),
        "high": RiskLevelSizing(
            max_pct=0.03, recommended_pct=0.01,
            reasoning="High risk strategy - small position sizing required",
        ),
        "unlimited": RiskLevelSizing(
            max_pct=0.01, recommended_pct=0.005,
            reasoning="Unlimited risk strategy - very small positions only",
        ),
    })
    unlimited_risk_cap_pct: float = 0.01  # Hard ceiling for undefined-risk structures


class Settings(BaseModel):
    """All engine settings, one section per component."""

    pricing: PricingSettings = Field(default_factory=PricingSettings)
    long_strangle: LongStrangleSettings = Field(default_factory=LongStrangleSettings)
    short_strangle: ShortStrangleSettings = Field(default_factory=ShortStrangleSettings)
    iron_condor: IronCondorSettings = Field(default_factory=IronCondorSettings)
    butterfly: ButterflySettings = Field(default_factory=ButterflySettings)
    diagonal: DiagonalSettings = Field(default_factory=DiagonalSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    sizing: SizingSettings = Field(default_factory=SizingSettings)


# --- Loading ---

_DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"
_USER_CONFIG_PATH = Path.home() / ".strategy_engine" / "config.yaml"

_cached_settings: Settings | None = None


def _deep_merge(base: dict, override: dict) -> dict:
    """Overlay user keys on the package defaults; nested sections merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_settings(
    user_config_path: Path | None = None,
    _force_reload: bool = False,
) -> Settings:
    """Build engine settings from the packaged tier tables and thresholds.

    A user file (``~/.strategy_engine/config.yaml`` unless ``user_config_path``
    is given) may override any section, e.g. only ``iron_condor.tiers``.
    The result is cached until ``reset_settings`` or ``_force_reload``.
    """
    global _cached_settings
    if _cached_settings is not None and not _force_reload:
        return _cached_settings

    raw = _read_yaml(_DEFAULTS_PATH)
    user_path = user_config_path or _USER_CONFIG_PATH
    if user_path.exists():
        raw = _deep_merge(raw, _read_yaml(user_path))
        logger.debug("Engine settings overridden from %s", user_path)

    _cached_settings = Settings(**raw)
    return _cached_settings


def get_settings() -> Settings:
    """Engine settings shared by calculators, validator and dispatcher."""
    return load_settings()


def reset_settings() -> None:
    """Drop the cached settings; the next lookup re-reads the YAML files."""
    global _cached_settings
    _cached_settings = None
