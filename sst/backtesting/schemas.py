"""Pydantic schemas for backtesting configuration and results.

All monetary values are in the instrument's currency (float), prices per share.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from sst.strategy.targets import TargetPolicy

# "LIFO" is the historical name; lots actually exit independently, each at its own target
ExitStrategy = Literal["WEIGHTED_AVERAGE", "LIFO"]
ActivityType = Literal["BUY", "SELL", "SKIPPED"]


# ─── Configuration ───


class BacktestConfig(BaseModel):
    """Strategy parameters for a single-symbol backtest run."""

    initial_capital: float = Field(default=500_000.0, gt=0)
    per_trade_amount: float | None = Field(default=None, gt=0)  # None → capital / 50
    exit_strategy: ExitStrategy = "WEIGHTED_AVERAGE"
    target_profit_percent: float = Field(default=6.0, gt=0)
    max_pyramid_levels: int = Field(default=3, ge=1)  # 1 initial + N-1 re-entries
    target_policy: TargetPolicy = "FLAT"

    @property
    def trade_amount(self) -> float:
        """Capital committed per entry."""
        if self.per_trade_amount is None:
            return self.initial_capital / 50
        return self.per_trade_amount


# ─── Positions & Trades ───


class Lot(BaseModel):
    """One open entry within a pyramided position."""

    entry_date: date
    entry_price: float
    quantity: int = Field(gt=0)
    sequence_number: int = Field(ge=1)
    target_percent: float

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.entry_price

    @property
    def target_price(self) -> float:
        return self.entry_price * (1 + self.target_percent / 100)


class ClosedTrade(BaseModel):
    """A lot that reached its exit, with realized profit."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    entry_date: date
    entry_price: float
    exit_date: date
    exit_price: float
    sequence_number: int
    target_percent: float
    profit: float
    profit_percent: float
    holding_days: int


class OpenPosition(BaseModel):
    """A lot still held at the end of the run, marked at the last close."""

    model_config = ConfigDict(frozen=True)

    entry_date: date
    entry_price: float
    quantity: int
    sequence_number: int
    target_percent: float
    current_price: float
    current_value: float
    pnl: float
    pnl_percent: float


# ─── Daily Ledger ───


class TradeActivity(BaseModel):
    """A BUY, SELL, or SKIPPED entry attempt recorded on a given day."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    type: ActivityType
    price: float
    quantity: int
    amount: float  # Invested amount (BUY) or sale proceeds (SELL)
    sequence_number: int
    date: date
    profit: float | None = None  # SELL only
    holding_days: int | None = None  # SELL only
    reference_entry_date: date | None = None  # SELL only: when the lot was bought


class DailyLedgerEntry(BaseModel):
    """End-of-day account state for one simulated trading day."""

    date: date
    cash: float
    invested: float  # Open lots marked to market at the close
    equity: float
    day_profit: float = 0.0
    activities: list[TradeActivity] = []


# ─── Full Backtest Result ───


class BacktestResult(BaseModel):
    """Complete result of a single-symbol backtest run."""

    symbol: str
    start_date: date
    end_date: date
    initial_capital: float
    final_capital: float
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_profit: float = 0.0  # Realized + unrealized
    total_profit_percent: float = 0.0
    cagr: float = 0.0
    realized_profit: float = 0.0
    unrealized_profit: float = 0.0
    blocked_capital: float = 0.0  # Cost basis of open positions
    max_drawdown: float = 0.0
    trades: list[ClosedTrade] = []
    open_positions: list[OpenPosition] = []
    daily_log: list[DailyLedgerEntry] = []
