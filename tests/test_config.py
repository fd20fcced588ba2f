"""Tests for YAML settings loading."""

from pathlib import Path

import yaml

from strategy_engine.config import Settings, _deep_merge, get_settings, load_settings, reset_settings


class TestDefaults:
    def test_package_defaults_match_model_defaults(self, isolated_settings) -> None:
        assert isolated_settings == Settings()

    def test_tier_values(self, isolated_settings) -> None:
        tiers = isolated_settings.long_strangle.distance_tiers
        assert [(t.max_dte, t.distance_pct) for t in tiers] == [(7, 3.0), (30, 5.0), (None, 8.0)]
        assert isolated_settings.iron_condor.min_strikes_per_side == 4
        assert isolated_settings.sizing.levels["unlimited"].max_pct == 0.01

    def test_short_tiers_at_least_as_wide_as_long(self, isolated_settings) -> None:
        def pct(tiers, dte):
            return next(t.distance_pct for t in tiers if t.max_dte is None or dte <= t.max_dte)

        for dte in range(0, 120):
            assert pct(isolated_settings.short_strangle.distance_tiers, dte) >= pct(
                isolated_settings.long_strangle.distance_tiers, dte
            )


class TestLoading:
    def test_user_file_deep_merged(self, tmp_path: Path) -> None:
        user = tmp_path / "config.yaml"
        user.write_text(yaml.safe_dump({
            "validation": {"max_spread_pct": 25.0},
            "pricing": {"contract_multiplier": 10},
        }))
        settings = load_settings(user_config_path=user, _force_reload=True)
        assert settings.validation.max_spread_pct == 25.0
        assert settings.validation.max_otm_premium_pct == 50.0
        assert settings.pricing.contract_multiplier == 10
        assert settings.pricing.price_places == 4

    def test_cached_until_reset(self, tmp_path: Path) -> None:
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        load_settings(user_config_path=tmp_path / "none.yaml")
        assert get_settings() is not first

    def test_deep_merge_does_not_mutate(self) -> None:
        base = {"a": {"x": 1, "y": 2}}
        merged = _deep_merge(base, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}}
        assert base == {"a": {"x": 1, "y": 2}}
