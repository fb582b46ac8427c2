"""Runtime configuration for Orbit.

Settings come from environment variables; the per-collection
:class:`~orbit.status.types.StatusesConfig` can also be parsed from a plain
dict (API request body) or a JSON file (``ORBIT_SATELLITES_CONFIG``).
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from orbit.status.types import SatelliteConfig, SatelliteStatusConfig, StatusesConfig

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    data_dir: Path = Path("./data")
    status_url: str = "http://localhost:5200"
    status_token: str = ""
    status_timeout: float = 10.0
    mission_control_id: str = "mission-control"
    cycles_threshold: int | None = None
    mission_control_cycles_threshold: int | None = None
    status_interval_minutes: int = 60
    satellites_config_path: Path | None = None
    host: str = "0.0.0.0"
    port: int = 5300

    @classmethod
    def from_env(cls) -> Settings:
        sat_path = os.environ.get("ORBIT_SATELLITES_CONFIG")
        return cls(
            data_dir=Path(os.environ.get("ORBIT_DATA_DIR", "./data")),
            status_url=os.environ.get("ORBIT_STATUS_URL", "http://localhost:5200"),
            status_token=os.environ.get("ORBIT_STATUS_TOKEN", ""),
            status_timeout=float(os.environ.get("ORBIT_STATUS_TIMEOUT", "10")),
            mission_control_id=os.environ.get("ORBIT_MISSION_CONTROL_ID", "mission-control"),
            cycles_threshold=_env_int("ORBIT_CYCLES_THRESHOLD"),
            mission_control_cycles_threshold=_env_int("ORBIT_MISSION_CONTROL_CYCLES_THRESHOLD"),
            status_interval_minutes=int(os.environ.get("ORBIT_STATUS_INTERVAL", "60")),
            satellites_config_path=Path(sat_path) if sat_path else None,
            host=os.environ.get("ORBIT_HOST", "0.0.0.0"),
            port=int(os.environ.get("ORBIT_PORT", "5300")),
        )

    def statuses_config(self) -> StatusesConfig:
        """Build the collection config from these settings."""
        satellites: SatelliteStatusConfig = {}
        if self.satellites_config_path is not None:
            satellites = load_satellites_config(self.satellites_config_path)
        return StatusesConfig(
            cycles_threshold=self.cycles_threshold,
            mission_control_cycles_threshold=self.mission_control_cycles_threshold,
            satellites=satellites,
        )


def _env_int(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return value


def satellites_config_from_dict(data: dict[str, Any]) -> SatelliteStatusConfig:
    """Parse ``{"<satellite id>": {"enabled": bool}}``."""
    if not isinstance(data, dict):
        raise ValueError("satellites config must be an object")
    satellites: SatelliteStatusConfig = {}
    for sat_id, entry in data.items():
        if not isinstance(entry, dict):
            raise ValueError(f"config for satellite {sat_id} must be an object")
        enabled = entry.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError(f"'enabled' for satellite {sat_id} must be a boolean")
        satellites[sat_id] = SatelliteConfig(enabled=enabled)
    return satellites


def statuses_config_from_dict(data: dict[str, Any]) -> StatusesConfig:
    """Parse a :class:`StatusesConfig` from its JSON form."""
    return StatusesConfig(
        cycles_threshold=_optional_int(data, "cycles_threshold"),
        mission_control_cycles_threshold=_optional_int(data, "mission_control_cycles_threshold"),
        satellites=satellites_config_from_dict(data.get("satellites") or {}),
    )


def load_satellites_config(path: str | Path) -> SatelliteStatusConfig:
    path = Path(path)
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    satellites = satellites_config_from_dict(data)
    logger.debug("Loaded %d satellite override(s) from %s", len(satellites), path)
    return satellites
