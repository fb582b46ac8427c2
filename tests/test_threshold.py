"""Tests for the mission control cycles threshold."""

from __future__ import annotations

from orbit.constants import CYCLES_MIN_THRESHOLD
from orbit.status.threshold import effective_threshold, meets_threshold
from orbit.status.types import RawStatus, SegmentStatus, StatusesConfig

F = CYCLES_MIN_THRESHOLD


def _status(cycles: int) -> SegmentStatus:
    raw = RawStatus(cycles=cycles, status_at=1)
    return SegmentStatus(id="mc", status=raw, status_at=raw.status_at)


class TestEffectiveThreshold:
    def test_defaults_to_floor(self):
        assert effective_threshold(StatusesConfig()) == F

    def test_mission_control_threshold_wins(self):
        config = StatusesConfig(cycles_threshold=F * 3, mission_control_cycles_threshold=F * 2)
        assert effective_threshold(config) == F * 2

    def test_falls_back_to_cycles_threshold(self):
        config = StatusesConfig(cycles_threshold=F * 3)
        assert effective_threshold(config) == F * 3

    def test_mission_control_threshold_clamped_to_floor(self):
        config = StatusesConfig(cycles_threshold=F * 3, mission_control_cycles_threshold=10)
        assert effective_threshold(config) == F

    def test_cycles_threshold_clamped_to_floor(self):
        assert effective_threshold(StatusesConfig(cycles_threshold=0)) == F


class TestMeetsThreshold:
    def test_below_floor(self):
        assert meets_threshold(StatusesConfig(), _status(F - 1)) is False

    def test_at_floor(self):
        assert meets_threshold(StatusesConfig(), _status(F)) is True

    def test_above_floor(self):
        assert meets_threshold(StatusesConfig(), _status(F + 1)) is True

    def test_weak_configured_threshold_does_not_lower_floor(self):
        config = StatusesConfig(mission_control_cycles_threshold=1)
        assert meets_threshold(config, _status(F - 1)) is False

    def test_higher_configured_threshold(self):
        config = StatusesConfig(mission_control_cycles_threshold=F * 2)
        assert meets_threshold(config, _status(F + 1)) is False
        assert meets_threshold(config, _status(F * 2)) is True
