"""Pydantic schemas — the interface contracts between all modules.

Price bars flow from the data layer into the signal analyzer and the
backtest simulator; analyses flow out to the scanner and the API.

RULES:
- Modules must use these types, never ad-hoc dicts or custom classes.
- If you need a new shared type, add it HERE.
- Bars are always supplied date-ascending, one per trading day per symbol.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

SignalStatus = Literal["NEUTRAL", "TRACKING", "BUY_TRIGGERED"]
ScanFilter = Literal["all", "tracking", "triggered"]


# ─── Price Data (data layer → core) ───


class DailyBar(BaseModel):
    """One trading day's OHLCV record for a symbol.

    Prices must be strictly positive and internally consistent, so the
    rolling-window math in the core never divides by zero.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    date: date
    open: float = Field(gt=0)
    high: float = Field(gt=0)
    low: float = Field(gt=0)
    close: float = Field(gt=0)
    volume: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_price_range(self) -> DailyBar:
        """Ensure low <= open, close <= high."""
        if self.high < self.low:
            msg = f"high ({self.high}) must be >= low ({self.low})"
            raise ValueError(msg)
        for name in ("open", "close"):
            value = getattr(self, name)
            if not self.low <= value <= self.high:
                msg = f"{name} ({value}) must lie within [low, high] ({self.low}, {self.high})"
                raise ValueError(msg)
        return self


class PriceLevels(BaseModel):
    """High/low extremes of a rolling lookback window."""

    high: float
    low: float


# ─── Signal Analysis (core → scanner / API) ───


class StockAnalysis(BaseModel):
    """Current SST regime of one symbol plus a live 20-day snapshot."""

    symbol: str
    status: SignalStatus = "NEUTRAL"
    current_price: float
    twenty_day_high: float
    twenty_day_low: float
    trigger_date: date | None = None  # Last day the 20d low was touched
    buy_trigger_date: date | None = None  # Last breakout while tracking
    distance_to_trigger: float  # % from current price up to the 20d high
