"""SST signal analyzer — 20-day low touch followed by a 20-day high breakout.

A symbol becomes TRACKING when a day's low touches or breaks the lowest low
of the 20 bars before it, and BUY_TRIGGERED when, while tracking, a day's
high exceeds the highest high of the 20 bars before it.

The regime is always replayed from the start of the supplied history so the
result is deterministic for identical input and no state is carried between
calls.

Usage:
    from sst.strategy.signals import analyze_stock

    analysis = analyze_stock("TCS.NS", bars)  # None if < 21 bars
"""

from __future__ import annotations

from collections.abc import Sequence

from sst.common.schemas import DailyBar, PriceLevels, SignalStatus, StockAnalysis

LOOKBACK_DAYS = 20
MIN_BARS = LOOKBACK_DAYS + 1


def window_levels(
    bars: Sequence[DailyBar], index: int, lookback: int = LOOKBACK_DAYS
) -> PriceLevels:
    """Highest high and lowest low of the `lookback` bars strictly before `index`.

    Args:
        bars: Date-ascending bars.
        index: Position of the day being evaluated (must be >= lookback).
        lookback: Window length in bars.

    Returns:
        PriceLevels of bars[index - lookback : index].
    """
    window = bars[index - lookback : index]
    return PriceLevels(
        high=max(bar.high for bar in window),
        low=min(bar.low for bar in window),
    )


def calculate_20_day_levels(bars: Sequence[DailyBar]) -> PriceLevels | None:
    """Extremes over the most recent 20 bars, including the latest one.

    Returns:
        PriceLevels, or None when fewer than 20 bars are available.
    """
    if len(bars) < LOOKBACK_DAYS:
        return None
    return window_levels(bars, len(bars))


def analyze_stock(symbol: str, bars: Sequence[DailyBar]) -> StockAnalysis | None:
    """Classify the current SST regime of a symbol.

    Args:
        symbol: Stock symbol.
        bars: Daily bars sorted by date ascending (oldest first).

    Returns:
        StockAnalysis, or None when fewer than 21 bars are supplied.
    """
    if len(bars) < MIN_BARS:
        return None

    # Live snapshot: the 20 bars before the latest one
    latest = bars[-1]
    snapshot = window_levels(bars, len(bars) - 1)
    current_price = latest.close
    distance_to_trigger = (snapshot.high - current_price) / current_price * 100

    status: SignalStatus = "NEUTRAL"
    trigger_date = None
    buy_trigger_date = None
    is_tracking = False

    for i in range(LOOKBACK_DAYS, len(bars)):
        day = bars[i]
        levels = window_levels(bars, i)

        if not is_tracking:
            if day.low <= levels.low:
                is_tracking = True
                trigger_date = day.date
                status = "TRACKING"
            continue

        if day.high > levels.high:
            status = "BUY_TRIGGERED"
            buy_trigger_date = day.date
            is_tracking = False
        # A fresh low touch while tracking restarts the pullback
        if day.low <= levels.low:
            trigger_date = day.date
            status = "TRACKING"

    return StockAnalysis(
        symbol=symbol,
        status=status,
        current_price=current_price,
        twenty_day_high=snapshot.high,
        twenty_day_low=snapshot.low,
        trigger_date=trigger_date,
        buy_trigger_date=buy_trigger_date,
        distance_to_trigger=distance_to_trigger,
    )
