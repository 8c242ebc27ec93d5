"""Backtest API endpoint — run historical simulations.

POST /api/backtest — accepts BacktestRequest, returns BacktestResponse.
Loads stored bars for each symbol, simulates them concurrently, and
aggregates the results against a buy-and-hold benchmark.
"""

from __future__ import annotations

import asyncio
from datetime import date

from fastapi import APIRouter, Depends

from sst.api.deps import get_bar_repository
from sst.api.response_schemas import BacktestRequest, BacktestResponse
from sst.backtesting.engine import build_config
from sst.backtesting.exceptions import InsufficientDataError
from sst.backtesting.portfolio import (
    aggregate_results,
    build_portfolio_diary,
    compute_benchmark,
)
from sst.backtesting.runner import run_batch
from sst.common.config import get_settings
from sst.common.logging import get_logger
from sst.data.repository import BarRepository

router = APIRouter()
logger = get_logger("API")


def _years_before(day: date, years: int) -> date:
    """Same calendar day `years` earlier (Feb 29 falls back to Feb 28)."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


@router.post("", response_model=BacktestResponse)
async def run_backtest_endpoint(
    request: BacktestRequest,
    repo: BarRepository = Depends(get_bar_repository),
) -> BacktestResponse:
    """Run a backtest simulation for the requested symbols.

    Args:
        request: Symbols, date range, and strategy parameters.
        repo: Bar repository for the request.

    Returns:
        BacktestResponse with per-symbol results, aggregate, and portfolio diary.

    Raises:
        InvalidParameterError: If the strategy parameters are out of range (mapped to 400).
        InsufficientDataError: If no symbol had enough bars (mapped to 422).
    """
    settings = get_settings()
    end_date = request.end_date or date.today()
    start_date = request.start_date or _years_before(end_date, request.years_back)

    config = build_config(
        initial_capital=request.initial_capital,
        per_trade_amount=request.per_trade_amount,
        exit_strategy=request.exit_strategy,
        target_profit_percent=request.target_profit_percent,
        max_pyramid_levels=request.max_pyramid_levels,
        target_policy=request.target_policy,
    )

    bars_by_symbol = {
        symbol: await repo.get_bars(symbol, start=start_date, end=end_date)
        for symbol in request.target_symbols
    }

    batch = await asyncio.to_thread(
        run_batch, bars_by_symbol, config, settings.backtest_max_workers
    )

    if not batch.results:
        raise InsufficientDataError(
            "No valid backtests generated (check data availability)",
            context={
                "symbols": request.target_symbols,
                "start_date": str(start_date),
                "end_date": str(end_date),
            },
        )

    benchmark = None
    if request.benchmark_symbol:
        benchmark_bars = await repo.get_bars(request.benchmark_symbol, start=start_date, end=end_date)
        benchmark = compute_benchmark(
            request.benchmark_symbol, benchmark_bars, request.initial_capital
        )

    diary = build_portfolio_diary(batch.results, request.initial_capital)
    aggregate = aggregate_results(batch.results, request.initial_capital, benchmark, diary)

    logger.info(
        "Backtest completed",
        extra={
            "data": {
                "symbols": len(request.target_symbols),
                "total_trades": aggregate.total_trades,
                "win_rate": round(aggregate.win_rate, 2),
                "total_profit_percent": round(aggregate.total_profit_percent, 2),
                "skipped": batch.skipped,
            }
        },
    )

    return BacktestResponse(
        results=batch.results,
        aggregate=aggregate,
        portfolio_diary=diary,
        skipped=batch.skipped,
        failed=batch.failed,
    )
