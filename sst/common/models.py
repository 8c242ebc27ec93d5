"""SQLAlchemy ORM models — stored symbol universe and daily price history.

Only the data layer touches these models. The screening and backtesting
core receives plain DailyBar schemas and never imports this module.
"""

from __future__ import annotations

import datetime

from sqlalchemy import Boolean, Date, Float, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class Stock(Base):
    """A tradable symbol and the index universes it belongs to."""

    __tablename__ = "stocks"

    symbol: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    is_nifty100: Mapped[bool] = mapped_column(Boolean, default=False)
    is_nifty200: Mapped[bool] = mapped_column(Boolean, default=False)


class DailyCandle(Base):
    """One stored OHLCV bar. Unique per (symbol, date)."""

    __tablename__ = "daily_candles"

    symbol: Mapped[str] = mapped_column(String, primary_key=True)
    date: Mapped[datetime.date] = mapped_column(Date, primary_key=True)
    open: Mapped[float] = mapped_column(Float, nullable=False)
    high: Mapped[float] = mapped_column(Float, nullable=False)
    low: Mapped[float] = mapped_column(Float, nullable=False)
    close: Mapped[float] = mapped_column(Float, nullable=False)
    volume: Mapped[int] = mapped_column(Integer, default=0)
