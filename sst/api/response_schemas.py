"""API response and request schemas -- types used only by the REST layer."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, model_validator

from sst.backtesting.portfolio import AggregateStats, PortfolioDiaryEntry
from sst.backtesting.schemas import BacktestResult, ExitStrategy
from sst.common.config import get_settings
from sst.strategy.targets import TargetPolicy


class BacktestRequest(BaseModel):
    """Request body for running a backtest over one or more symbols.

    Omitted strategy parameters fall back to the configured defaults. Their
    ranges are checked by the engine's config so violations map to 400.
    """

    symbol: str | None = None
    symbols: list[str] = []
    years_back: int = Field(default_factory=lambda: get_settings().default_years_back, ge=1)
    start_date: date | None = None
    end_date: date | None = None
    initial_capital: float = Field(
        default_factory=lambda: get_settings().default_initial_capital
    )
    trade_size_percent: float = Field(
        default_factory=lambda: get_settings().default_trade_size_percent, le=100
    )
    exit_strategy: ExitStrategy = "WEIGHTED_AVERAGE"
    max_pyramid_levels: int = Field(
        default_factory=lambda: get_settings().default_max_pyramid_levels
    )
    target_profit_percent: float = Field(
        default_factory=lambda: get_settings().default_target_profit_percent
    )
    target_policy: TargetPolicy = "FLAT"
    benchmark_symbol: str | None = Field(default_factory=lambda: get_settings().benchmark_symbol)

    @model_validator(mode="after")
    def validate_symbols(self) -> BacktestRequest:
        """Ensure at least one symbol and a sane date range."""
        if not self.symbols and not self.symbol:
            msg = "Symbol or symbols array is required"
            raise ValueError(msg)
        if self.start_date and self.end_date and self.end_date < self.start_date:
            msg = f"end_date ({self.end_date}) must be >= start_date ({self.start_date})"
            raise ValueError(msg)
        return self

    @property
    def target_symbols(self) -> list[str]:
        """Requested symbols, de-duplicated in request order."""
        requested = self.symbols or [self.symbol]
        return list(dict.fromkeys(requested))

    @property
    def per_trade_amount(self) -> float:
        return self.initial_capital * self.trade_size_percent / 100


class BacktestResponse(BaseModel):
    """Per-symbol results plus the combined portfolio view."""

    results: list[BacktestResult]
    aggregate: AggregateStats
    portfolio_diary: list[PortfolioDiaryEntry]
    skipped: list[str] = []
    failed: dict[str, str] = {}
