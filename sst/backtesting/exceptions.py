"""Backtesting-specific exceptions."""

from __future__ import annotations

from sst.common.exceptions import SstBaseException


class InsufficientDataError(SstBaseException):
    """Not enough historical data to run the requested backtest.

    The per-symbol engine signals this as a None result; this exception is
    raised only by callers when no symbol at all could be simulated.
    """
