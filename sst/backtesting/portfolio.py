"""Cross-symbol aggregation of backtest results.

Each symbol is simulated with the full initial capital as its own cash pool;
aggregation simply sums the per-symbol profits on top of one shared starting
capital and compares the outcome with a buy-and-hold benchmark.

Usage:
    from sst.backtesting.portfolio import aggregate_results, build_portfolio_diary

    aggregate = aggregate_results(results, initial_capital=500_000, benchmark=benchmark)
    diary = build_portfolio_diary(results, initial_capital=500_000)
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from pydantic import BaseModel

from sst.backtesting.metrics import compute_max_drawdown
from sst.backtesting.schemas import BacktestResult, TradeActivity
from sst.common.schemas import DailyBar


class BenchmarkStats(BaseModel):
    """Buy-and-hold return of a benchmark index over the backtest range."""

    symbol: str
    start_price: float
    end_price: float
    total_return_percent: float
    final_capital: float


class AggregateStats(BaseModel):
    """Summed statistics across all simulated symbols."""

    symbols: int = 0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_profit: float = 0.0
    total_profit_percent: float = 0.0
    realized_profit: float = 0.0
    unrealized_profit: float = 0.0
    blocked_capital: float = 0.0
    final_capital: float = 0.0
    max_drawdown: float = 0.0  # Of the combined portfolio diary
    benchmark: BenchmarkStats | None = None
    excess_return_percent: float | None = None  # Strategy minus benchmark


class PortfolioDiaryEntry(BaseModel):
    """Combined end-of-day state across all symbols."""

    date: date
    cash: float
    invested: float
    portfolio_value: float
    day_profit: float = 0.0
    total_profit: float
    activities: list[TradeActivity] = []


def compute_benchmark(
    symbol: str, bars: Sequence[DailyBar], initial_capital: float
) -> BenchmarkStats | None:
    """Buy at the first close, hold to the last close.

    Returns:
        BenchmarkStats, or None when no bars are available.
    """
    if not bars:
        return None
    start_price = bars[0].close
    end_price = bars[-1].close
    total_return_percent = (end_price - start_price) / start_price * 100
    return BenchmarkStats(
        symbol=symbol,
        start_price=start_price,
        end_price=end_price,
        total_return_percent=total_return_percent,
        final_capital=initial_capital * (1 + total_return_percent / 100),
    )


def aggregate_results(
    results: Sequence[BacktestResult],
    initial_capital: float,
    benchmark: BenchmarkStats | None = None,
    diary: Sequence[PortfolioDiaryEntry] = (),
) -> AggregateStats:
    """Sum per-symbol results into one portfolio-level summary.

    Args:
        results: Per-symbol backtest results.
        initial_capital: Shared starting capital.
        benchmark: Optional buy-and-hold comparison.
        diary: Combined daily diary, used for the portfolio drawdown.

    Returns:
        AggregateStats with totals, win rate, and benchmark excess return.
    """
    total_trades = sum(r.total_trades for r in results)
    winning = sum(r.winning_trades for r in results)
    total_profit = sum(r.total_profit for r in results)
    total_profit_percent = total_profit / initial_capital * 100 if initial_capital > 0 else 0.0

    excess = None
    if benchmark is not None:
        excess = total_profit_percent - benchmark.total_return_percent

    return AggregateStats(
        symbols=len(results),
        total_trades=total_trades,
        winning_trades=winning,
        losing_trades=sum(r.losing_trades for r in results),
        win_rate=winning / total_trades * 100 if total_trades > 0 else 0.0,
        total_profit=total_profit,
        total_profit_percent=total_profit_percent,
        realized_profit=sum(r.realized_profit for r in results),
        unrealized_profit=sum(r.unrealized_profit for r in results),
        blocked_capital=sum(r.blocked_capital for r in results),
        final_capital=initial_capital + total_profit,
        max_drawdown=compute_max_drawdown((d.portfolio_value for d in diary), initial_capital),
        benchmark=benchmark,
        excess_return_percent=excess,
    )


def build_portfolio_diary(
    results: Sequence[BacktestResult], initial_capital: float
) -> list[PortfolioDiaryEntry]:
    """Merge per-symbol daily ledgers into one date-ordered portfolio diary.

    A symbol contributes (equity - its initial capital) as profit on each day
    it was simulated; symbols without a ledger entry for a date contribute
    nothing that day.
    """
    by_date: dict[date, dict] = {}
    for result in results:
        for day in result.daily_log:
            entry = by_date.setdefault(
                day.date, {"invested": 0.0, "total_profit": 0.0, "activities": []}
            )
            entry["invested"] += day.invested
            entry["total_profit"] += day.equity - result.initial_capital
            entry["activities"].extend(day.activities)

    diary: list[PortfolioDiaryEntry] = []
    for day_date in sorted(by_date):
        entry = by_date[day_date]
        portfolio_value = initial_capital + entry["total_profit"]
        diary.append(
            PortfolioDiaryEntry(
                date=day_date,
                cash=portfolio_value - entry["invested"],
                invested=entry["invested"],
                portfolio_value=portfolio_value,
                total_profit=entry["total_profit"],
                activities=entry["activities"],
            )
        )

    for prev, entry in zip(diary, diary[1:]):
        entry.day_profit = entry.portfolio_value - prev.portfolio_value

    return diary
