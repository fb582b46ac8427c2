"""Mission control and satellites status collection.

The collector checks the mission control first.  If it errors, or holds
fewer cycles than the effective threshold, the satellites are not queried
at all.  Otherwise every enabled satellite is queried concurrently and the
mission control is queried once more so the report carries its latest
status.  Every query is recorded in the status store, success or failure.
"""

from __future__ import annotations

import asyncio
import logging

from orbit.status.threshold import effective_threshold, meets_threshold
from orbit.status.types import (
    RawStatusResult,
    Satellite,
    SatelliteSource,
    SatelliteStatusConfig,
    SegmentStatus,
    SegmentStatusResult,
    SegmentsStatuses,
    StatusError,
    StatusesConfig,
    StatusProbe,
    StatusRecorder,
    UnitId,
    UnitMetadata,
)

logger = logging.getLogger(__name__)


def _to_segment_status(
    unit_id: UnitId,
    metadata: UnitMetadata | None,
    result: RawStatusResult,
) -> SegmentStatusResult:
    if isinstance(result, StatusError):
        return result
    return SegmentStatus(
        id=unit_id,
        metadata=metadata,
        status=result,
        status_at=result.status_at,
    )


def is_satellite_enabled(satellite_id: UnitId, satellites_config: SatelliteStatusConfig) -> bool:
    """Satellites without an entry in the config are enabled."""
    config = satellites_config.get(satellite_id)
    if config is None:
        return True
    return config.enabled


class StatusCollector:
    """Collects the statuses of a mission control and its satellites.

    Args:
        probe:    Queries the raw status of one segment.
        store:    Records every query outcome.
        registry: Lists the known satellites and their metadata.

    The store records the mission control under its own id (see
    :class:`~orbit.status.store.StatusStore`), not the one passed to
    :meth:`collect_statuses`.  Build both from the same setting; a mismatch
    is logged as a warning.
    """

    def __init__(
        self,
        probe: StatusProbe,
        store: StatusRecorder,
        registry: SatelliteSource,
    ) -> None:
        self.probe = probe
        self.store = store
        self.registry = registry

    # ── Entry point ───────────────────────────────────────────────

    async def collect_statuses(
        self,
        mission_control_id: UnitId,
        config: StatusesConfig,
    ) -> SegmentsStatuses:
        """Collect the statuses, skipping the satellites when the mission control is not healthy."""
        recorded_as = getattr(self.store, "mission_control_id", None)
        if isinstance(recorded_as, str) and recorded_as != mission_control_id:
            logger.warning(
                "Mission control %s will be recorded under store id %s",
                mission_control_id, recorded_as,
            )

        mission_control_check = await self.mission_control_status(mission_control_id)

        if isinstance(mission_control_check, StatusError):
            logger.info(
                "Mission control %s status failed, skipping satellites: %s",
                mission_control_id, mission_control_check,
            )
            return SegmentsStatuses(mission_control=mission_control_check, satellites=None)

        if not meets_threshold(config, mission_control_check):
            logger.info(
                "Mission control %s below threshold (%d < %d cycles), skipping satellites",
                mission_control_id,
                mission_control_check.status.cycles,
                effective_threshold(config),
            )
            return SegmentsStatuses(mission_control=mission_control_check, satellites=None)

        satellites = await self.satellites_status(config.satellites)
        # Queried again so the report reflects the state once the satellites are done.
        mission_control = await self.mission_control_status(mission_control_id)

        return SegmentsStatuses(mission_control=mission_control, satellites=satellites)

    # ── Single segment ────────────────────────────────────────────

    async def mission_control_status(self, mission_control_id: UnitId) -> SegmentStatusResult:
        result = await self.probe.query_segment_status(mission_control_id)
        self.store.record_mission_control_status(result)
        logger.debug("Mission control %s status: %s", mission_control_id, result)
        return _to_segment_status(mission_control_id, None, result)

    async def satellite_status(self, satellite_id: UnitId, satellite: Satellite) -> SegmentStatusResult:
        result = await self.probe.query_segment_status(satellite_id)
        self.store.record_satellite_status(satellite_id, result)
        logger.debug("Satellite %s status: %s", satellite_id, result)
        return _to_segment_status(satellite_id, dict(satellite.metadata), result)

    # ── Fan-out ───────────────────────────────────────────────────

    async def satellites_status(
        self,
        satellites_config: SatelliteStatusConfig,
    ) -> list[SegmentStatusResult]:
        """Query every enabled satellite concurrently and wait for all of them."""
        satellites = self.registry.list_satellites()

        tasks = [
            self.satellite_status(satellite_id, satellite)
            for satellite_id, satellite in satellites.items()
            if is_satellite_enabled(satellite_id, satellites_config)
        ]
        results = list(await asyncio.gather(*tasks))

        logger.info(
            "Collected %d satellite status(es), %d skipped by config",
            len(results), len(satellites) - len(results),
        )
        return results
