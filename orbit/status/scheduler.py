"""Status cron job — periodic background status collection."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from orbit.status.collector import StatusCollector
from orbit.status.types import SegmentsStatuses, StatusError, StatusesConfig, UnitId

logger = logging.getLogger(__name__)


class StatusCronJob:
    """Runs :meth:`StatusCollector.collect_statuses` on a fixed interval.

    ``config_provider`` is called before every cycle so that edits to the
    satellites config are picked up without a restart.
    """

    def __init__(
        self,
        collector: StatusCollector,
        mission_control_id: UnitId,
        config_provider: Callable[[], StatusesConfig],
        interval_minutes: int = 60,
    ) -> None:
        self.collector = collector
        self.mission_control_id = mission_control_id
        self.config_provider = config_provider
        self.interval = interval_minutes
        self._running = False
        self._task: asyncio.Task | None = None
        self._last_run: str | None = None
        self._last_result: SegmentsStatuses | None = None

    async def start(self) -> None:
        """Start the background collection loop."""
        if self._running:
            logger.warning("Status cron job is already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("Status cron job started (interval=%d min)", self.interval)

    async def stop(self) -> None:
        """Stop the background collection loop."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Status cron job stopped")

    async def run_once(self) -> SegmentsStatuses:
        """Run a single collection cycle."""
        result = await self.collector.collect_statuses(
            self.mission_control_id, self.config_provider()
        )
        self._last_run = datetime.now(timezone.utc).isoformat()
        self._last_result = result
        return result

    @property
    def running(self) -> bool:
        """Whether the collection loop is currently active."""
        return self._running

    @property
    def last_run(self) -> str | None:
        """ISO timestamp of the last completed cycle, or None."""
        return self._last_run

    @property
    def last_result(self) -> SegmentsStatuses | None:
        return self._last_result

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _loop(self) -> None:
        """Main background loop — collects then sleeps."""
        while self._running:
            try:
                result = await self.run_once()
                satellites = result.satellites
                logger.info(
                    "Status cycle complete: mission control %s, %s",
                    "error" if isinstance(result.mission_control, StatusError) else "ok",
                    f"{len(satellites)} satellite(s)" if satellites is not None else "satellites skipped",
                )
            except Exception as exc:
                logger.error("Status cycle failed: %s", exc)

            await asyncio.sleep(self.interval * 60)
