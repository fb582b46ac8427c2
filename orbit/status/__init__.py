"""Orbit — segment status collection.

  - Threshold: cycles gate on the mission control
  - Collector: mission control check, satellite fan-out, aggregate report
  - Client: HTTP status probe
  - Store: last known status and history per segment
  - Scheduler: periodic collection
"""

from orbit.status.collector import StatusCollector
from orbit.status.threshold import effective_threshold, meets_threshold
from orbit.status.types import (
    RawStatus,
    SatelliteConfig,
    SegmentStatus,
    SegmentsStatuses,
    StatusError,
    StatusesConfig,
)

__all__ = [
    "RawStatus",
    "SatelliteConfig",
    "SegmentStatus",
    "SegmentsStatuses",
    "StatusCollector",
    "StatusError",
    "StatusesConfig",
    "effective_threshold",
    "meets_threshold",
]
