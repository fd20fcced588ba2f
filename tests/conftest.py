"""Shared test fixtures for strategy_engine tests."""

from decimal import Decimal
from pathlib import Path

import pytest

from strategy_engine.config import Settings, load_settings, reset_settings
from strategy_engine.models.chain import MarketSnapshot
from strategy_engine.service.dispatcher import StrategyDispatcher
from tests.builders import FAR_EXP, NEAR_EXP, make_chain, make_snapshot


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path):
    """Package defaults only, whatever is in the user's home directory."""
    settings = load_settings(user_config_path=tmp_path / "no-user-config.yaml", _force_reload=True)
    yield settings
    reset_settings()


@pytest.fixture
def snapshot() -> MarketSnapshot:
    """Near (20 DTE) and far (60 DTE) chains, 180-280 strikes, spot 230."""
    return make_snapshot(
        make_chain(NEAR_EXP),
        make_chain(FAR_EXP, tv_scale=Decimal("1.5")),
    )


@pytest.fixture
def dispatcher(isolated_settings: Settings) -> StrategyDispatcher:
    return StrategyDispatcher(isolated_settings)
