"""Orbit one-shot status collection.

Usage::

    python -m orbit.status [--data-dir PATH] [--config FILE] [--mission-control ID]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    parser = argparse.ArgumentParser(
        prog="python -m orbit.status",
        description="Collect mission control and satellite statuses once",
    )
    parser.add_argument(
        "--data-dir",
        metavar="PATH",
        default=None,
        help="Override data directory (default: ./data or ORBIT_DATA_DIR env var)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        default=None,
        help="JSON file with per-satellite overrides (default: ORBIT_SATELLITES_CONFIG env var)",
    )
    parser.add_argument(
        "--mission-control",
        metavar="ID",
        default=None,
        help="Mission control id (default: ORBIT_MISSION_CONTROL_ID env var)",
    )
    args = parser.parse_args()

    from orbit.config import Settings
    from orbit.db import get_db, init_db, set_db_path

    settings = Settings.from_env()
    if args.data_dir is not None:
        settings.data_dir = Path(args.data_dir)
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        set_db_path(settings.data_dir / "orbit.db")
    if args.config is not None:
        settings.satellites_config_path = Path(args.config)
    if args.mission_control is not None:
        settings.mission_control_id = args.mission_control

    init_db()
    result = asyncio.run(_collect(settings, get_db()))
    print(json.dumps(result, indent=2))


async def _collect(settings, conn) -> dict:
    from orbit.satellites.registry import SatelliteRegistry
    from orbit.status.client import StatusClient
    from orbit.status.collector import StatusCollector
    from orbit.status.store import StatusStore

    store = StatusStore(conn, mission_control_id=settings.mission_control_id)
    async with StatusClient(
        settings.status_url,
        token=settings.status_token,
        timeout=settings.status_timeout,
    ) as client:
        collector = StatusCollector(client, store, SatelliteRegistry(conn))
        statuses = await collector.collect_statuses(
            settings.mission_control_id, settings.statuses_config()
        )
    return statuses.to_dict()


if __name__ == "__main__":
    main()
