"""Tests for FLAT and TIERED profit-target policies."""

from __future__ import annotations

import pytest

from sst.strategy.targets import get_target_percent, resolve_target_percent


class TestTieredTargets:
    @pytest.mark.parametrize(
        ("sequence_number", "expected"),
        [(1, 10.0), (2, 8.0), (3, 6.0), (7, 6.0)],
    )
    def test_tiers_by_sequence(self, sequence_number, expected):
        assert get_target_percent(sequence_number) == expected


class TestResolveTargetPercent:
    def test_flat_is_default(self):
        assert resolve_target_percent(1) == 6.0
        assert resolve_target_percent(3) == 6.0

    def test_flat_uses_configured_percent(self):
        assert resolve_target_percent(2, "FLAT", flat_percent=4.5) == 4.5

    def test_tiered_ignores_flat_percent(self):
        assert resolve_target_percent(1, "TIERED", flat_percent=4.5) == 10.0
        assert resolve_target_percent(2, "TIERED", flat_percent=4.5) == 8.0
