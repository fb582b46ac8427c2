"""Data model for segment status collection.

A *segment* is either the mission control or one of its satellites.  Every
status query produces a :data:`SegmentStatusResult`: a :class:`SegmentStatus`
on success or a :class:`StatusError` on failure.  Failures are values, never
raised out of the collection path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Union

UnitId = str
UnitMetadata = dict[str, str]

STATES: tuple[str, ...] = ("running", "stopping", "stopped")


# ── Status values ─────────────────────────────────────────────────


@dataclass(frozen=True)
class RawStatus:
    """Resource snapshot returned by the status probe for one segment."""

    cycles: int
    status_at: int  # nanoseconds since epoch, probe clock
    memory_size: int = 0
    state: str = "running"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RawStatus:
        """Build from a probe payload. Raises ``ValueError`` when malformed."""
        if not isinstance(data, dict):
            raise ValueError("status payload must be an object")
        try:
            cycles = data["cycles"]
            status_at = data["status_at"]
        except KeyError as exc:
            raise ValueError(f"status payload missing field: {exc.args[0]}") from exc

        memory_size = data.get("memory_size", 0)
        state = data.get("status", "running")

        for name, value in (("cycles", cycles), ("status_at", status_at), ("memory_size", memory_size)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"status field {name!r} must be an integer")
        if state not in STATES:
            raise ValueError(f"unknown segment state: {state!r}")

        return cls(cycles=cycles, status_at=status_at, memory_size=memory_size, state=state)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycles": self.cycles,
            "memory_size": self.memory_size,
            "status": self.state,
            "status_at": self.status_at,
        }


@dataclass(frozen=True)
class SegmentStatus:
    """Normalised status of one segment, tagged with its id and metadata."""

    id: UnitId
    status: RawStatus
    status_at: int
    metadata: UnitMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "metadata": dict(self.metadata) if self.metadata is not None else None,
            "status": self.status.to_dict(),
            "status_at": self.status_at,
        }


@dataclass(frozen=True)
class StatusError:
    """Why a status query failed (unreachable, not found, rejected, ...)."""

    message: str

    def __str__(self) -> str:
        return self.message


SegmentStatusResult = Union[SegmentStatus, StatusError]

# What the probe returns, before it is tagged with the segment's id.
RawStatusResult = Union[RawStatus, StatusError]


def result_to_dict(result: SegmentStatusResult) -> dict[str, Any]:
    """Serialise a result as ``{"ok": {...}}`` or ``{"err": "..."}``."""
    if isinstance(result, StatusError):
        return {"err": result.message}
    return {"ok": result.to_dict()}


# ── Configuration ─────────────────────────────────────────────────


@dataclass(frozen=True)
class SatelliteConfig:
    enabled: bool = True


SatelliteStatusConfig = dict[UnitId, SatelliteConfig]


@dataclass(frozen=True)
class StatusesConfig:
    """Per-invocation thresholds and satellite overrides."""

    cycles_threshold: int | None = None
    mission_control_cycles_threshold: int | None = None
    satellites: SatelliteStatusConfig = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycles_threshold": self.cycles_threshold,
            "mission_control_cycles_threshold": self.mission_control_cycles_threshold,
            "satellites": {
                sat_id: {"enabled": cfg.enabled} for sat_id, cfg in self.satellites.items()
            },
        }


# ── Aggregate ─────────────────────────────────────────────────────


@dataclass
class SegmentsStatuses:
    """Aggregate report. ``satellites`` is ``None`` when polling was skipped."""

    mission_control: SegmentStatusResult
    satellites: list[SegmentStatusResult] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mission_control": result_to_dict(self.mission_control),
            "satellites": (
                [result_to_dict(r) for r in self.satellites]
                if self.satellites is not None
                else None
            ),
        }


# ── Registry ──────────────────────────────────────────────────────


@dataclass
class Satellite:
    id: UnitId
    metadata: UnitMetadata = field(default_factory=dict)
    registered_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "metadata": dict(self.metadata),
            "registered_at": self.registered_at,
            "updated_at": self.updated_at,
        }


# ── Collaborator contracts ────────────────────────────────────────


class StatusProbe(Protocol):
    async def query_segment_status(self, unit_id: UnitId) -> RawStatusResult:
        ...


class StatusRecorder(Protocol):
    """Write side of the status store. Writes never raise to the caller."""

    def record_mission_control_status(self, result: RawStatusResult) -> None:
        ...

    def record_satellite_status(self, unit_id: UnitId, result: RawStatusResult) -> None:
        ...


class SatelliteSource(Protocol):
    def list_satellites(self) -> dict[UnitId, Satellite]:
        ...
