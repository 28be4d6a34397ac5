"""Application configuration via Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All application settings, loaded from .env or environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Ledger ──────────────────────────────────────────────────
    initial_cash: float = Field(default=100_000.0, description="Starting cash balance")
    commission_rate: float = Field(
        default=0.001, description="Proportional commission on trade notional (0.1% = 0.001)"
    )

    # ── Universe ────────────────────────────────────────────────
    tracked_symbols: list[str] = Field(
        default=["NVDA", "GOOGL", "MSFT", "AAPL", "TSLA", "META", "AMD", "AMZN"],
        description="Symbols scanned by the recommendation engine",
    )

    # ── Analysis ────────────────────────────────────────────────
    analysis_window: int = Field(default=20, description="Samples used per market analysis")
    analysis_cache_ttl_seconds: float = Field(
        default=30.0, description="Lifetime of a cached market analysis"
    )
    prediction_tick_seconds: float = Field(
        default=1.0, description="Width of the clock bucket that keys cached predictions"
    )
    recommendation_cache_ttl_seconds: float = Field(
        default=60.0, description="Lifetime of a cached bot analysis"
    )
    sentiment_noise: float = Field(
        default=0.02, description="Amplitude of the perturbation added to the sentiment change"
    )
    prediction_noise: float = Field(
        default=0.02, description="Amplitude of the perturbation added to the predicted change"
    )
    random_seed: int | None = Field(
        default=None, description="Seed for the market simulation and analysis noise"
    )

    # ── Automated Trading ───────────────────────────────────────
    max_position_pct: float = Field(default=0.20, description="Max portfolio % per position")
    max_simultaneous_positions: int = Field(default=5, description="Max number of open positions")
    daily_loss_limit: float = Field(
        default=0.02, description="Max loss from initial cash before halting (2% = 0.02)"
    )
    trading_interval_seconds: float = Field(
        default=5.0, description="Seconds between simulated trading cycles"
    )

    # ── Simulated Market ────────────────────────────────────────
    simulated_history_length: int = Field(
        default=60, description="Daily bars generated per symbol at start-up"
    )
    simulated_step_volatility: float = Field(
        default=0.01, description="Standard deviation of the per-step simulated return"
    )

    # ── Logging ─────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Console logging level")
    log_file_level: str = Field(default="DEBUG", description="JSON log file level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for rotating log files")
    log_max_bytes: int = Field(default=5_000_000, description="Rotate log files at this size")
    log_backup_count: int = Field(default=3, description="Rotated log files to keep")


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
