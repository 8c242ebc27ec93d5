"""Profit-target policies for pyramided entries.

FLAT applies one target percent to every entry of a pyramiding cycle.
TIERED is the manual-trading rule: the first entry aims higher
than the re-entries (10% / 8% / 6%).
"""

from __future__ import annotations

from typing import Literal

TargetPolicy = Literal["FLAT", "TIERED"]

# sequence number → target percent; anything deeper uses the last tier
TIERED_TARGETS: dict[int, float] = {1: 10.0, 2: 8.0}
TIERED_FLOOR = 6.0


def get_target_percent(sequence_number: int) -> float:
    """Tiered target percent for the Nth entry of a cycle."""
    return TIERED_TARGETS.get(sequence_number, TIERED_FLOOR)


def resolve_target_percent(
    sequence_number: int,
    policy: TargetPolicy = "FLAT",
    flat_percent: float = 6.0,
) -> float:
    """Target percent for a new entry under the given policy.

    Args:
        sequence_number: 1-based position of the entry in its pyramiding cycle.
        policy: FLAT or TIERED.
        flat_percent: Target used by the FLAT policy.

    Returns:
        Target profit in percent above the entry price.
    """
    if policy == "TIERED":
        return get_target_percent(sequence_number)
    return flat_percent
