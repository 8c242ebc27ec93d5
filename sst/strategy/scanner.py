"""Universe scanner — analyze many symbols and rank them by distance to trigger.

Usage:
    from sst.strategy.scanner import scan

    hits = scan({"TCS.NS": tcs_bars, "INFY.NS": infy_bars}, status_filter="tracking")
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from sst.common.logging import get_logger
from sst.common.schemas import DailyBar, ScanFilter, SignalStatus, StockAnalysis
from sst.strategy.signals import analyze_stock

logger = get_logger("SCANNER")

_FILTER_STATUS: dict[str, SignalStatus] = {
    "tracking": "TRACKING",
    "triggered": "BUY_TRIGGERED",
}


def scan(
    bars_by_symbol: Mapping[str, Sequence[DailyBar]],
    status_filter: ScanFilter = "all",
) -> list[StockAnalysis]:
    """Analyze every symbol and return matches closest-to-trigger first.

    Symbols with fewer than 21 bars are skipped.

    Args:
        bars_by_symbol: Mapping of symbol → date-ascending bars.
        status_filter: "all", "tracking" (TRACKING only) or
            "triggered" (BUY_TRIGGERED only).

    Returns:
        Analyses sorted by distance_to_trigger ascending.
    """
    wanted = _FILTER_STATUS.get(status_filter)
    analyses: list[StockAnalysis] = []
    skipped: list[str] = []

    for symbol, bars in bars_by_symbol.items():
        analysis = analyze_stock(symbol, bars)
        if analysis is None:
            skipped.append(symbol)
            continue
        if wanted is not None and analysis.status != wanted:
            continue
        analyses.append(analysis)

    analyses.sort(key=lambda a: a.distance_to_trigger)

    logger.info(
        "Scan complete",
        extra={
            "data": {
                "symbols": len(bars_by_symbol),
                "matches": len(analyses),
                "filter": status_filter,
                "skipped_insufficient_data": skipped,
            }
        },
    )
    return analyses
