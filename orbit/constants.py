"""Shared constants for Orbit."""

# 0.5 T cycles. Configured thresholds below this floor are raised to it.
CYCLES_MIN_THRESHOLD: int = 500_000_000_000

MISSION_CONTROL_SEGMENT = "mission_control"
SATELLITE_SEGMENT = "satellite"

SEGMENTS: tuple[str, ...] = (MISSION_CONTROL_SEGMENT, SATELLITE_SEGMENT)
