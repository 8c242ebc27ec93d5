"""Backtesting module — historical simulation of the SST strategy.

Replays daily price bars through the SST entry/exit rules to evaluate
strategy performance without risking real money.
"""

from __future__ import annotations

from sst.backtesting.engine import build_config, run_backtest, simulate
from sst.backtesting.runner import run_batch

__all__ = ["build_config", "run_backtest", "run_batch", "simulate"]
