"""Tests for bar repositories — in-memory and SQLAlchemy (aiosqlite)."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from sst.common.models import DailyCandle, Stock
from sst.data.repository import InMemoryBarRepository, SqlBarRepository
from tests.factories import day, make_bar, make_flat_bars

pytestmark = pytest.mark.asyncio


@pytest.fixture(params=["memory", "sql"])
def repo(request, db):
    """Run each test against both implementations."""
    if request.param == "memory":
        return InMemoryBarRepository()
    return SqlBarRepository(db)


class TestBars:
    async def test_round_trip_sorted_ascending(self, repo):
        bars = make_flat_bars(5)
        inserted = await repo.upsert_bars(reversed(bars))
        assert inserted == 5
        stored = await repo.get_bars("TEST.NS")
        assert [b.date for b in stored] == [day(i) for i in range(5)]
        assert stored[0] == bars[0]

    async def test_existing_bars_not_overwritten(self, repo):
        await repo.upsert_bars([make_bar(0, close=100.0)])
        inserted = await repo.upsert_bars(
            [make_bar(0, high=120.0, low=110.0, close=115.0), make_bar(1)]
        )
        assert inserted == 1
        stored = await repo.get_bars("TEST.NS")
        assert stored[0].close == 100.0
        assert len(stored) == 2

    async def test_duplicates_within_one_call(self, repo):
        inserted = await repo.upsert_bars([make_bar(0), make_bar(0)])
        assert inserted == 1

    async def test_date_range_inclusive(self, repo):
        await repo.upsert_bars(make_flat_bars(10))
        stored = await repo.get_bars("TEST.NS", start=day(2), end=day(4))
        assert [b.date for b in stored] == [day(2), day(3), day(4)]

    async def test_symbols_isolated(self, repo):
        await repo.upsert_bars(make_flat_bars(3, symbol="AAA.NS"))
        await repo.upsert_bars(make_flat_bars(2, symbol="BBB.NS"))
        assert len(await repo.get_bars("AAA.NS")) == 3
        assert len(await repo.get_bars("BBB.NS")) == 2
        assert await repo.get_bars("CCC.NS") == []


class TestStocks:
    async def test_list_by_universe(self, repo):
        await repo.upsert_stock("TCS.NS", "Tata Consultancy", universes=["nifty100", "nifty200"])
        await repo.upsert_stock("ZYDUS.NS", "Zydus", universes=["nifty200"])
        await repo.upsert_stock("NEW.NS")

        assert await repo.list_symbols() == ["NEW.NS", "TCS.NS", "ZYDUS.NS"]
        assert await repo.list_symbols("nifty100") == ["TCS.NS"]
        assert await repo.list_symbols("nifty200") == ["TCS.NS", "ZYDUS.NS"]

    async def test_membership_only_added(self, repo):
        await repo.upsert_stock("TCS.NS", universes=["nifty100"])
        await repo.upsert_stock("TCS.NS", universes=["nifty200"])
        assert await repo.list_symbols("nifty100") == ["TCS.NS"]
        assert await repo.list_symbols("nifty200") == ["TCS.NS"]

    async def test_unknown_universe_rejected(self, repo):
        with pytest.raises(ValueError, match="Unknown universe"):
            await repo.upsert_stock("TCS.NS", universes=["sensex"])

    async def test_unknown_universe_lists_nothing(self, repo):
        await repo.upsert_stock("TCS.NS", universes=["nifty100"])
        assert await repo.list_symbols("sensex") == []


class TestSqlStorage:
    async def test_rows_flushed_to_tables(self, db):
        repo = SqlBarRepository(db)
        await repo.upsert_bars(make_flat_bars(4))
        await repo.upsert_stock("TEST.NS", "Test", universes=["nifty100"])

        count = await db.scalar(select(func.count()).select_from(DailyCandle))
        assert count == 4
        stock = await db.get(Stock, "TEST.NS")
        assert stock.name == "Test"
        assert stock.is_nifty100 is True
        assert stock.is_nifty200 is False

    async def test_name_updated_when_given(self, db):
        repo = SqlBarRepository(db)
        await repo.upsert_stock("TEST.NS", "Old")
        await repo.upsert_stock("TEST.NS", "New")
        await repo.upsert_stock("TEST.NS")
        stock = await db.get(Stock, "TEST.NS")
        assert stock.name == "New"
