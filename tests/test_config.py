"""Tests for configuration management."""

from pathlib import Path

from sim_trader.config import Settings
from sim_trader.engine.recommendations import DEFAULT_UNIVERSE


class TestSettings:
    def test_default_values(self):
        settings = Settings(
            _env_file=None,  # Don't read .env in tests
        )
        assert settings.initial_cash == 100_000.0
        assert settings.commission_rate == 0.001
        assert settings.tracked_symbols == DEFAULT_UNIVERSE
        assert settings.analysis_window == 20
        assert settings.analysis_cache_ttl_seconds == 30.0
        assert settings.recommendation_cache_ttl_seconds == 60.0
        assert settings.random_seed is None
        assert settings.max_position_pct == 0.20
        assert settings.daily_loss_limit == 0.02
        assert settings.max_simultaneous_positions == 5
        assert settings.log_dir == Path("logs")

    def test_custom_values(self):
        settings = Settings(
            _env_file=None,
            initial_cash=50_000.0,
            tracked_symbols=["AAPL"],
            random_seed=7,
            max_position_pct=0.10,
        )
        assert settings.initial_cash == 50_000.0
        assert settings.tracked_symbols == ["AAPL"]
        assert settings.random_seed == 7
        assert settings.max_position_pct == 0.10

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("INITIAL_CASH", "25000")
        monkeypatch.setenv("TRACKED_SYMBOLS", '["TSLA", "AMD"]')
        settings = Settings(_env_file=None)
        assert settings.initial_cash == 25_000.0
        assert settings.tracked_symbols == ["TSLA", "AMD"]
