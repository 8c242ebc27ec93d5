"""Exit policies for open lots.

Both policies use the day's high as the touch price: a target counts as
reached if the price traded through it at any point during the day, and the
fill is assumed at the target itself.

WEIGHTED_AVERAGE:
    All lots share one target, the quantity-weighted average entry price
    raised by the oldest lot's target percent. When it is touched, every lot
    closes together at that price.

LIFO (independent):
    Every lot is checked against its own entry price and target percent and
    closes on its own. Lots are visited in entry order; there is no
    last-in-first-out sequencing despite the historical name.
"""

from __future__ import annotations

from collections.abc import Sequence

from sst.backtesting.schemas import Lot


def weighted_average_target(lots: Sequence[Lot]) -> float | None:
    """Shared exit price for all open lots, or None when nothing is open."""
    if not lots:
        return None
    total_qty = sum(lot.quantity for lot in lots)
    total_cost = sum(lot.cost_basis for lot in lots)
    weighted_avg_price = total_cost / total_qty if total_qty > 0 else 0.0
    base_target_percent = lots[0].target_percent
    return weighted_avg_price * (1 + base_target_percent / 100)


def weighted_average_exit(lots: Sequence[Lot], day_high: float) -> list[tuple[int, float]]:
    """Close every lot at the shared target if the day's high reached it.

    Returns:
        (lot index, exit price) pairs — all lots or none.
    """
    target = weighted_average_target(lots)
    if target is None or day_high < target:
        return []
    return [(idx, target) for idx in range(len(lots))]


def independent_exits(lots: Sequence[Lot], day_high: float) -> list[tuple[int, float]]:
    """Close each lot whose own target the day's high reached.

    Returns:
        (lot index, exit price) pairs in entry order.
    """
    return [(idx, lot.target_price) for idx, lot in enumerate(lots) if day_high >= lot.target_price]
