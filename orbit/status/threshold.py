"""Cycles threshold gate for the mission control."""

from __future__ import annotations

from orbit.constants import CYCLES_MIN_THRESHOLD
from orbit.status.types import SegmentStatus, StatusesConfig


def effective_threshold(config: StatusesConfig) -> int:
    """Return the cycles threshold actually applied to the mission control.

    ``mission_control_cycles_threshold`` wins over ``cycles_threshold``; a
    configured value below :data:`CYCLES_MIN_THRESHOLD` is raised to it.
    """
    configured = config.mission_control_cycles_threshold
    if configured is None:
        configured = config.cycles_threshold

    if configured is None:
        return CYCLES_MIN_THRESHOLD
    return max(configured, CYCLES_MIN_THRESHOLD)


def meets_threshold(config: StatusesConfig, status: SegmentStatus) -> bool:
    """True if the segment holds at least the effective threshold of cycles."""
    return status.status.cycles >= effective_threshold(config)
