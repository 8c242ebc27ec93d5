"""Tests for the SST signal analyzer — window levels and regime replay."""

from __future__ import annotations

import pytest

from sst.strategy.signals import analyze_stock, calculate_20_day_levels, window_levels
from tests.factories import day, make_bars, make_flat_bars


class TestWindowLevels:
    """window_levels() looks only at the bars strictly before the index."""

    def test_excludes_current_bar(self, breakout_bars):
        levels = window_levels(breakout_bars, 23)
        # Day 23 itself trades up to 103 but is not part of its own window
        assert levels.high == 101.0
        assert levels.low == 98.0

    def test_custom_lookback(self, breakout_bars):
        levels = window_levels(breakout_bars, 23, lookback=2)
        assert levels.high == 100.5
        assert levels.low == 98.0


class TestCalculate20DayLevels:
    """calculate_20_day_levels() covers the latest 20 bars."""

    def test_flat_history(self):
        levels = calculate_20_day_levels(make_flat_bars(25))
        assert levels is not None
        assert levels.high == 101.0
        assert levels.low == 99.0

    def test_includes_latest_bar(self, breakout_bars):
        levels = calculate_20_day_levels(breakout_bars)
        assert levels.high == 103.0
        assert levels.low == 98.0

    def test_fewer_than_20_bars_returns_none(self):
        assert calculate_20_day_levels(make_flat_bars(19)) is None


class TestAnalyzeStock:
    """analyze_stock() replays the full history to classify the regime."""

    def test_insufficient_data_returns_none(self):
        assert analyze_stock("TEST.NS", make_flat_bars(10)) is None

    def test_twenty_bars_is_not_enough(self):
        assert analyze_stock("TEST.NS", make_flat_bars(20)) is None

    def test_neutral_when_low_never_touched(self):
        bars = make_bars({i: (100.5, 99.5, 100.0) for i in range(20, 30)}, 30)
        analysis = analyze_stock("TEST.NS", bars)
        assert analysis is not None
        assert analysis.status == "NEUTRAL"
        assert analysis.trigger_date is None
        assert analysis.buy_trigger_date is None

    def test_flat_history_keeps_tracking(self):
        """Each flat day re-touches the window low, so the pullback date moves forward."""
        analysis = analyze_stock("TEST.NS", make_flat_bars(25))
        assert analysis.status == "TRACKING"
        assert analysis.trigger_date == day(24)
        assert analysis.buy_trigger_date is None

    def test_breakout_after_low_touch(self, breakout_bars):
        analysis = analyze_stock("TEST.NS", breakout_bars)
        assert analysis.status == "BUY_TRIGGERED"
        assert analysis.trigger_date == day(21)
        assert analysis.buy_trigger_date == day(23)

    def test_live_snapshot_uses_bars_before_latest(self, breakout_bars):
        analysis = analyze_stock("TEST.NS", breakout_bars)
        assert analysis.symbol == "TEST.NS"
        assert analysis.current_price == 102.0
        assert analysis.twenty_day_high == 103.0
        assert analysis.twenty_day_low == 98.0
        assert analysis.distance_to_trigger == pytest.approx((103.0 - 102.0) / 102.0 * 100)

    def test_new_low_after_breakout_tracks_again(self, pyramid_bars):
        analysis = analyze_stock("TEST.NS", pyramid_bars)
        assert analysis.status == "BUY_TRIGGERED"
        assert analysis.trigger_date == day(24)
        assert analysis.buy_trigger_date == day(25)

    def test_breakout_without_prior_low_touch_is_ignored(self):
        bars = make_bars({20: (100.5, 99.5, 100.0), 21: (105.0, 100.0, 104.0)}, 22)
        analysis = analyze_stock("TEST.NS", bars)
        assert analysis.status == "NEUTRAL"
        assert analysis.buy_trigger_date is None

    def test_breakout_and_new_low_on_same_day_while_tracking(self):
        """The low touch is evaluated after the breakout and wins the status."""
        bars = make_bars({20: (100.5, 98.0, 99.0), 21: (102.0, 97.0, 100.0)}, 22)
        analysis = analyze_stock("TEST.NS", bars)
        assert analysis.status == "TRACKING"
        assert analysis.trigger_date == day(21)
        assert analysis.buy_trigger_date == day(21)

    def test_deterministic_for_identical_input(self, pyramid_bars):
        assert analyze_stock("TEST.NS", pyramid_bars) == analyze_stock("TEST.NS", pyramid_bars)
