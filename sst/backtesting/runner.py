"""Concurrent multi-symbol backtest runner.

Each symbol's simulation is independent (own bars, own cash, own result),
so symbols are fanned out over a bounded thread pool with no locking.
A failure in one symbol is logged and recorded without aborting the batch.

Usage:
    from sst.backtesting.runner import run_batch

    batch = run_batch({"TCS.NS": tcs_bars, "INFY.NS": infy_bars}, config, max_workers=5)
    batch.results  # list[BacktestResult] in input order
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from pydantic import BaseModel

from sst.backtesting.engine import simulate
from sst.backtesting.schemas import BacktestConfig, BacktestResult
from sst.common.logging import get_logger
from sst.common.schemas import DailyBar

logger = get_logger("BACKTEST")


class BatchResult(BaseModel):
    """Outcome of a multi-symbol run."""

    results: list[BacktestResult] = []
    skipped: list[str] = []  # Fewer than 21 bars
    failed: dict[str, str] = {}  # symbol → error message


def run_batch(
    bars_by_symbol: Mapping[str, Sequence[DailyBar]],
    config: BacktestConfig,
    max_workers: int = 5,
) -> BatchResult:
    """Simulate every symbol concurrently with the same strategy config.

    Args:
        bars_by_symbol: Mapping of symbol → date-ascending bars.
        config: Validated strategy parameters shared by all symbols.
        max_workers: Size of the worker pool.

    Returns:
        BatchResult with results in input-symbol order.
    """
    symbols = list(bars_by_symbol)
    by_symbol: dict[str, BacktestResult] = {}
    skipped: list[str] = []
    failed: dict[str, str] = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {
            executor.submit(simulate, sym, bars_by_symbol[sym], config): sym for sym in symbols
        }
        for future in as_completed(futures):
            sym = futures[future]
            try:
                result = future.result()
            except Exception as exc:
                logger.error(
                    "Backtest failed for symbol",
                    extra={"data": {"symbol": sym, "error": str(exc)}},
                )
                failed[sym] = str(exc)
                continue
            if result is None:
                skipped.append(sym)
            else:
                by_symbol[sym] = result

    logger.info(
        "Batch backtest complete",
        extra={
            "data": {
                "symbols": len(symbols),
                "completed": len(by_symbol),
                "skipped": len(skipped),
                "failed": len(failed),
            }
        },
    )

    return BatchResult(
        results=[by_symbol[sym] for sym in symbols if sym in by_symbol],
        skipped=[sym for sym in symbols if sym in skipped],
        failed=failed,
    )
