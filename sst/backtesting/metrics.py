"""Performance statistics for backtest results.

Computes the scalar statistics attached to a BacktestResult:
- Win/loss classification and win rate
- Compound annual growth rate (CAGR)
- Maximum drawdown of an equity curve
- Day-over-day profit on the daily ledger

Usage:
    from sst.backtesting.metrics import compute_cagr

    cagr = compute_cagr(100_000, 121_000, years=2.0)  # ≈ 10.0
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date

from sst.backtesting.schemas import ClosedTrade, DailyLedgerEntry

DAYS_PER_YEAR = 365.25  # Leap-year adjusted


def years_between(start: date, end: date) -> float:
    """Elapsed calendar time between two dates, in years."""
    return (end - start).days / DAYS_PER_YEAR


def compute_cagr(initial_capital: float, final_capital: float, years: float) -> float:
    """Compute compound annual growth rate as a percentage.

    Args:
        initial_capital: Starting capital.
        final_capital: Ending capital (cash + open positions).
        years: Elapsed time in years.

    Returns:
        CAGR in percent (e.g., 10.0 for 10%), or 0.0 when undefined
        (no elapsed time, or non-positive capital).
    """
    if years <= 0 or initial_capital <= 0 or final_capital <= 0:
        return 0.0
    return ((final_capital / initial_capital) ** (1 / years) - 1) * 100


def compute_win_stats(trades: Sequence[ClosedTrade]) -> tuple[int, int, float]:
    """Count winning and losing trades.

    A trade wins only with strictly positive profit; break-even counts as a loss.

    Returns:
        (winning_trades, losing_trades, win_rate_percent)
    """
    winning = sum(1 for t in trades if t.profit > 0)
    losing = len(trades) - winning
    win_rate = winning / len(trades) * 100 if trades else 0.0
    return winning, losing, win_rate


def compute_max_drawdown(equity_curve: Iterable[float], starting_peak: float) -> float:
    """Largest peak-to-trough decline of an equity curve, in percent.

    Args:
        equity_curve: End-of-day equity values in date order.
        starting_peak: Peak before the first value (usually initial capital).

    Returns:
        Maximum drawdown as a percentage (e.g., 5.2 for 5.2%).
    """
    peak = starting_peak
    max_dd = 0.0
    for equity in equity_curve:
        if equity > peak:
            peak = equity
        if peak > 0:
            max_dd = max(max_dd, (peak - equity) / peak * 100)
    return max_dd


def fill_day_profit(ledger: Sequence[DailyLedgerEntry]) -> None:
    """Set each entry's day_profit to the equity change from the previous day.

    The first entry keeps day_profit = 0. Mutates the entries in place.
    """
    for prev, entry in zip(ledger, ledger[1:]):
        entry.day_profit = entry.equity - prev.equity
