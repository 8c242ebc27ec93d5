"""Bar repository — the storage seam between the data layer and the core.

The screening and backtesting core take bars as plain input; only the API
layer resolves a repository and loads bars through it. Two implementations:

- InMemoryBarRepository: dict-backed, for tests and scripting.
- SqlBarRepository: SQLAlchemy async, over the stocks / daily_candles tables.

Usage:
    repo = SqlBarRepository(db)
    bars = await repo.get_bars("TCS.NS", start=date(2023, 1, 1))
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sst.common.logging import get_logger
from sst.common.models import DailyCandle, Stock
from sst.common.schemas import DailyBar

logger = get_logger("DATA")

UNIVERSES = ("nifty100", "nifty200")


class BarRepository(Protocol):
    """Read/write access to stored symbols and daily bars."""

    async def get_bars(
        self, symbol: str, start: date | None = None, end: date | None = None
    ) -> list[DailyBar]: ...

    async def upsert_bars(self, bars: Iterable[DailyBar]) -> int: ...

    async def upsert_stock(
        self, symbol: str, name: str = "", universes: Iterable[str] = ()
    ) -> None: ...

    async def list_symbols(self, universe: str | None = None) -> list[str]: ...


def _in_range(day: date, start: date | None, end: date | None) -> bool:
    return (start is None or day >= start) and (end is None or day <= end)


def _validate_universes(universes: Iterable[str]) -> set[str]:
    selected = set(universes)
    unknown = selected - set(UNIVERSES)
    if unknown:
        msg = f"Unknown universe(s): {sorted(unknown)}"
        raise ValueError(msg)
    return selected


class InMemoryBarRepository:
    """Dict-backed repository. Existing (symbol, date) bars are never overwritten."""

    def __init__(self) -> None:
        self._bars: dict[str, dict[date, DailyBar]] = {}
        self._stocks: dict[str, set[str]] = {}

    async def get_bars(
        self, symbol: str, start: date | None = None, end: date | None = None
    ) -> list[DailyBar]:
        stored = self._bars.get(symbol, {})
        return [stored[d] for d in sorted(stored) if _in_range(d, start, end)]

    async def upsert_bars(self, bars: Iterable[DailyBar]) -> int:
        inserted = 0
        for bar in bars:
            per_symbol = self._bars.setdefault(bar.symbol, {})
            if bar.date not in per_symbol:
                per_symbol[bar.date] = bar
                inserted += 1
        return inserted

    async def upsert_stock(
        self, symbol: str, name: str = "", universes: Iterable[str] = ()
    ) -> None:
        self._stocks.setdefault(symbol, set()).update(_validate_universes(universes))

    async def list_symbols(self, universe: str | None = None) -> list[str]:
        if universe is None:
            return sorted(self._stocks)
        return sorted(s for s, u in self._stocks.items() if universe in u)


class SqlBarRepository:
    """SQLAlchemy-backed repository bound to one async session.

    Writes are flushed; committing is the caller's responsibility.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_bars(
        self, symbol: str, start: date | None = None, end: date | None = None
    ) -> list[DailyBar]:
        query = select(DailyCandle).where(DailyCandle.symbol == symbol)
        if start is not None:
            query = query.where(DailyCandle.date >= start)
        if end is not None:
            query = query.where(DailyCandle.date <= end)
        query = query.order_by(DailyCandle.date.asc())

        result = await self._session.execute(query)
        return [
            DailyBar(
                symbol=row.symbol,
                date=row.date,
                open=row.open,
                high=row.high,
                low=row.low,
                close=row.close,
                volume=row.volume or 0,
            )
            for row in result.scalars().all()
        ]

    async def upsert_bars(self, bars: Iterable[DailyBar]) -> int:
        """Insert bars whose (symbol, date) is not stored yet; duplicates are ignored."""
        inserted = 0
        seen: set[tuple[str, date]] = set()
        for bar in bars:
            key = (bar.symbol, bar.date)
            if key in seen:
                continue
            seen.add(key)
            existing = await self._session.get(DailyCandle, key)
            if existing is not None:
                continue
            self._session.add(
                DailyCandle(
                    symbol=bar.symbol,
                    date=bar.date,
                    open=bar.open,
                    high=bar.high,
                    low=bar.low,
                    close=bar.close,
                    volume=bar.volume,
                )
            )
            inserted += 1
        await self._session.flush()

        logger.debug("Stored daily bars", extra={"data": {"inserted": inserted}})
        return inserted

    async def upsert_stock(
        self, symbol: str, name: str = "", universes: Iterable[str] = ()
    ) -> None:
        """Create or update a stock. Universe membership is only ever added."""
        selected = _validate_universes(universes)
        stock = await self._session.get(Stock, symbol)
        if stock is None:
            stock = Stock(symbol=symbol, name=name, is_nifty100=False, is_nifty200=False)
            self._session.add(stock)
        elif name:
            stock.name = name
        if "nifty100" in selected:
            stock.is_nifty100 = True
        if "nifty200" in selected:
            stock.is_nifty200 = True
        await self._session.flush()

    async def list_symbols(self, universe: str | None = None) -> list[str]:
        query = select(Stock.symbol)
        if universe == "nifty100":
            query = query.where(Stock.is_nifty100.is_(True))
        elif universe == "nifty200":
            query = query.where(Stock.is_nifty200.is_(True))
        elif universe is not None:
            return []
        result = await self._session.execute(query.order_by(Stock.symbol))
        return list(result.scalars().all())
