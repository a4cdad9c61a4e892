"""
Tests for engine configuration and environment overrides.
Run with: pytest tests/test_engine_config.py -v
"""

from dataclasses import FrozenInstanceError, replace

import pytest

from backend.core.engine_config import ENV_OVERRIDES, EngineConfig


@pytest.fixture
def clean_env(monkeypatch):
    for name in list(ENV_OVERRIDES) + ["EDGE_DTD_UNAVAILABLE"]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEngineConfig:
    """Canonical constants"""

    def test_nba_defaults(self):
        cfg = EngineConfig.nba()
        assert cfg.usage_core_fraction == 0.20
        assert cfg.core_loss_penalty == 0.15
        assert cfg.b2b_penalty == 0.03
        assert (cfg.min_confidence, cfg.max_confidence) == (30, 95)
        assert cfg.prop_pick_edge_pct == 12.0
        assert cfg.moneyline_pick_edge_pct == 8.0
        assert cfg.day_to_day_unavailable is True

    def test_frozen(self):
        cfg = EngineConfig.nba()
        with pytest.raises(FrozenInstanceError):
            cfg.b2b_penalty = 0.05

    def test_replace_overrides_one_field(self):
        cfg = replace(EngineConfig.nba(), prop_pick_edge_pct=15.0)
        assert cfg.prop_pick_edge_pct == 15.0
        assert cfg.moneyline_pick_edge_pct == 8.0


class TestFromEnv:
    """Environment overrides"""

    def test_no_overrides_returns_defaults(self, clean_env):
        assert EngineConfig.from_env() == EngineConfig.nba()

    def test_numeric_override(self, clean_env):
        clean_env.setenv("EDGE_PROP_PICK_PCT", "15")
        clean_env.setenv("EDGE_HOME_ADVANTAGE", "0.03")
        cfg = EngineConfig.from_env()
        assert cfg.prop_pick_edge_pct == 15.0
        assert cfg.home_advantage == 0.03

    def test_blank_value_is_ignored(self, clean_env):
        clean_env.setenv("EDGE_B2B_PENALTY", "  ")
        assert EngineConfig.from_env().b2b_penalty == 0.03

    def test_bad_number_raises(self, clean_env):
        clean_env.setenv("EDGE_VALUE_THRESHOLD_PCT", "ten")
        with pytest.raises(ValueError):
            EngineConfig.from_env()

    def test_day_to_day_policy_flag(self, clean_env):
        clean_env.setenv("EDGE_DTD_UNAVAILABLE", "false")
        assert EngineConfig.from_env().day_to_day_unavailable is False
        clean_env.setenv("EDGE_DTD_UNAVAILABLE", "1")
        assert EngineConfig.from_env().day_to_day_unavailable is True

    def test_base_config_is_respected(self, clean_env):
        base = replace(EngineConfig.nba(), strength_top_n=5)
        clean_env.setenv("EDGE_MONEYLINE_PICK_PCT", "6")
        cfg = EngineConfig.from_env(base)
        assert cfg.strength_top_n == 5
        assert cfg.moneyline_pick_edge_pct == 6.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
