"""Tests for backtesting schemas — config validation, lot arithmetic, immutable results."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sst.backtesting.engine import run_backtest
from sst.backtesting.schemas import BacktestConfig, ClosedTrade, Lot, TradeActivity
from tests.factories import day


class TestBacktestConfig:
    def test_defaults(self):
        config = BacktestConfig()
        assert config.initial_capital == 500_000
        assert config.exit_strategy == "WEIGHTED_AVERAGE"
        assert config.target_policy == "FLAT"
        assert config.max_pyramid_levels == 3

    def test_default_trade_amount_is_fiftieth_of_capital(self):
        assert BacktestConfig(initial_capital=100_000).trade_amount == 2_000

    def test_explicit_trade_amount(self):
        assert BacktestConfig(per_trade_amount=7_500).trade_amount == 7_500

    @pytest.mark.parametrize(
        "kwargs",
        [{"initial_capital": 0}, {"per_trade_amount": 0}, {"max_pyramid_levels": 0}],
    )
    def test_rejects_non_positive(self, kwargs):
        with pytest.raises(ValidationError):
            BacktestConfig(**kwargs)


class TestLot:
    def test_cost_and_target(self):
        lot = Lot(
            entry_date=day(0),
            entry_price=200.0,
            quantity=5,
            sequence_number=1,
            target_percent=10.0,
        )
        assert lot.cost_basis == 1_000.0
        assert lot.target_price == pytest.approx(220.0)

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Lot(
                entry_date=day(0),
                entry_price=200.0,
                quantity=0,
                sequence_number=1,
                target_percent=6.0,
            )


class TestResultRecordsImmutable:
    """Trades, positions, and activities cannot be edited after a run."""

    def test_closed_trade_frozen(self):
        trade = ClosedTrade(
            symbol="TEST.NS",
            entry_date=day(0),
            entry_price=100.0,
            exit_date=day(3),
            exit_price=106.0,
            sequence_number=1,
            target_percent=6.0,
            profit=60.0,
            profit_percent=6.0,
            holding_days=3,
        )
        with pytest.raises(ValidationError):
            trade.profit = 1_000.0

    def test_activity_frozen(self):
        activity = TradeActivity(
            symbol="TEST.NS",
            type="BUY",
            price=101.0,
            quantity=99,
            amount=9_999.0,
            sequence_number=1,
            date=day(23),
        )
        with pytest.raises(ValidationError):
            activity.price = 1.0

    def test_run_output_frozen(self, pyramid_bars, breakout_bars):
        trades = run_backtest("TEST.NS", pyramid_bars, exit_strategy="LIFO").trades
        with pytest.raises(ValidationError):
            trades[0].exit_price = 0.0

        position = run_backtest("TEST.NS", breakout_bars).open_positions[0]
        with pytest.raises(ValidationError):
            position.pnl = 0.0
