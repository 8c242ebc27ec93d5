"""SST signal detection — regime analysis, target policies, and scanning.

Public API:
    - signals: 20-day window levels and the TRACKING / BUY_TRIGGERED replay
    - targets: FLAT and TIERED profit-target policies
    - scanner: analyze a universe and rank by distance to trigger
"""

from __future__ import annotations

from sst.strategy.scanner import scan
from sst.strategy.signals import analyze_stock, calculate_20_day_levels, window_levels
from sst.strategy.targets import TargetPolicy, get_target_percent, resolve_target_percent

__all__ = [
    "TargetPolicy",
    "analyze_stock",
    "calculate_20_day_levels",
    "get_target_percent",
    "resolve_target_percent",
    "scan",
    "window_levels",
]
