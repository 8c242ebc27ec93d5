"""Root test configuration — shared fixtures for all test modules.

IMPORTANT: Environment variables are set BEFORE any sst imports
so that config.py can load Settings without a .env file.
"""

from __future__ import annotations

import logging
import os
import sys

os.environ.setdefault("SST_DATABASE_URL", "sqlite+aiosqlite://")  # In-memory SQLite
os.environ.setdefault("SST_ENVIRONMENT", "testing")

# Now safe to import sst modules
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sst.backtesting.schemas import BacktestConfig
from sst.common.config import Settings, get_settings
from sst.common.logging import _loggers
from sst.common.models import Base
from sst.common.schemas import DailyBar
from tests.factories import make_breakout_bars, make_flat_bars, make_pyramid_bars

# ─── Clear cached settings so test env vars are used ───
get_settings.cache_clear()


# ─── Test Database ───


@pytest_asyncio.fixture
async def engine():
    """Create a fresh in-memory database engine per test."""
    test_engine = create_async_engine("sqlite+aiosqlite://", echo=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    """Provide a database session per test with automatic rollback."""
    async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session
        await session.rollback()


# ─── Test Settings ───


@pytest.fixture
def test_settings() -> Settings:
    return get_settings()


# ─── Log Capture ───


@pytest.fixture
def log_output(capfd):
    """capfd with every cached sst log handler writing to the captured stdout.

    Module-level loggers bind sys.stdout at import (collection) time, which
    is not the stream capfd reads.
    """
    # Only the StreamHandler installed by get_logger; pytest may attach its own
    # handlers to these non-propagating loggers. Assign .stream directly because
    # setStream() flushes the old stream, which may already be a closed capture file.
    # capfd restarts its capture (new sys.stdout) for each test phase, so the
    # handler must resolve sys.stdout at write time rather than at fixture setup.
    class _CurrentStdout:
        def write(self, text):
            return sys.stdout.write(text)

        def flush(self):
            sys.stdout.flush()

    def _sst_handlers():
        for adapter in _loggers.values():
            for handler in adapter.logger.handlers:
                if type(handler) is logging.StreamHandler:
                    yield handler

    previous = {}
    for handler in _sst_handlers():
        previous[handler] = handler.stream
        handler.stream = _CurrentStdout()
    try:
        yield capfd
    finally:
        # Loggers first created inside the test bound the capture stream, which closes now
        for handler in _sst_handlers():
            handler.stream = previous.get(handler, sys.__stdout__)


# ─── Sample Data Fixtures ───


@pytest.fixture
def default_config() -> BacktestConfig:
    """Default strategy: 500k capital, 10k per entry, flat 6% target, 3 levels."""
    return BacktestConfig()


@pytest.fixture
def flat_bars() -> list[DailyBar]:
    """30 range-bound bars with no breakout."""
    return make_flat_bars(30)


@pytest.fixture
def breakout_bars() -> list[DailyBar]:
    """25 bars with a single tracked breakout on day 23."""
    return make_breakout_bars()


@pytest.fixture
def pyramid_bars() -> list[DailyBar]:
    """28 bars with two entries in one cycle and two exit days."""
    return make_pyramid_bars()
