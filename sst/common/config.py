"""Application configuration via environment variables.

Uses pydantic-settings to load from .env file and environment variables.
All config is centralized here — modules should import `get_settings()`.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─── Database ───
    database_url: str = "sqlite+aiosqlite:///./sst.db"

    # ─── App ───
    environment: str = "development"
    log_level: str = "INFO"

    # ─── Strategy Defaults ───
    default_initial_capital: float = 500_000.0
    default_trade_size_percent: float = 10.0
    default_target_profit_percent: float = 6.0
    default_max_pyramid_levels: int = 3
    default_years_back: int = 3

    # ─── Backtest Orchestration ───
    backtest_max_workers: int = 5
    benchmark_symbol: str = "^NSEI"

    # ─── Scanner ───
    scanner_universe: str = "nifty100"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton.

    Uses lru_cache so Settings is only instantiated once.
    In tests, call `get_settings.cache_clear()` to reset.
    """
    return Settings()
