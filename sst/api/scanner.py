"""Scanner API endpoint — SST regime of every stock in the configured universe.

GET /api/scanner?filter=all|tracking|triggered
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from sst.api.deps import get_bar_repository
from sst.common.config import get_settings
from sst.common.exceptions import DataNotFoundError
from sst.common.schemas import ScanFilter, StockAnalysis
from sst.data.repository import BarRepository
from sst.strategy.scanner import scan

router = APIRouter()


@router.get("", response_model=list[StockAnalysis])
async def get_scanner(
    status_filter: ScanFilter = Query(default="all", alias="filter"),
    repo: BarRepository = Depends(get_bar_repository),
) -> list[StockAnalysis]:
    """Analyze the universe and return stocks closest to a breakout first.

    Raises:
        DataNotFoundError: If no symbols are stored for the universe (mapped to 404).
    """
    universe = get_settings().scanner_universe
    symbols = await repo.list_symbols(universe)
    if not symbols:
        raise DataNotFoundError("No stocks stored for universe", context={"universe": universe})

    bars_by_symbol = {symbol: await repo.get_bars(symbol) for symbol in symbols}
    return scan(bars_by_symbol, status_filter)
