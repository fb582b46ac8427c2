"""Satellite registry — the set of satellites known to the mission control."""

from __future__ import annotations

import json
import logging
import sqlite3

from orbit.status.types import Satellite, UnitId, UnitMetadata

logger = logging.getLogger(__name__)


class SatelliteRegistry:
    """CRUD wrapper around the ``satellites`` table.

    Args:
        conn: An open :class:`sqlite3.Connection` (WAL mode recommended).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # ── Writes ─────────────────────────────────────────────────────

    def add_satellite(self, satellite_id: UnitId, metadata: UnitMetadata | None = None) -> Satellite:
        """Register a satellite. Raises ``ValueError`` if the id is taken."""
        if not satellite_id:
            raise ValueError("Satellite id must not be empty")
        try:
            self._conn.execute(
                "INSERT INTO satellites (id, metadata) VALUES (?, ?)",
                (satellite_id, _dump_metadata(metadata or {})),
            )
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Satellite already registered: {satellite_id}") from exc
        self._conn.commit()
        logger.info("Registered satellite: %s", satellite_id)
        return self._require(satellite_id)

    def set_metadata(self, satellite_id: UnitId, metadata: UnitMetadata) -> Satellite:
        """Replace a satellite's metadata."""
        cur = self._conn.execute(
            "UPDATE satellites SET metadata = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (_dump_metadata(metadata), satellite_id),
        )
        if cur.rowcount == 0:
            raise ValueError(f"Satellite not found: {satellite_id}")
        self._conn.commit()
        return self._require(satellite_id)

    def remove_satellite(self, satellite_id: UnitId) -> bool:
        cur = self._conn.execute("DELETE FROM satellites WHERE id = ?", (satellite_id,))
        self._conn.commit()
        removed = cur.rowcount > 0
        if removed:
            logger.info("Removed satellite: %s", satellite_id)
        return removed

    # ── Queries ────────────────────────────────────────────────────

    def get_satellite(self, satellite_id: UnitId) -> Satellite | None:
        row = self._conn.execute(
            "SELECT id, metadata, registered_at, updated_at FROM satellites WHERE id = ?",
            (satellite_id,),
        ).fetchone()
        return _row_to_satellite(row) if row is not None else None

    def list_satellites(self) -> dict[UnitId, Satellite]:
        """Snapshot of every registered satellite, keyed by id."""
        cur = self._conn.execute(
            "SELECT id, metadata, registered_at, updated_at FROM satellites ORDER BY id"
        )
        satellites = (_row_to_satellite(r) for r in cur.fetchall())
        return {sat.id: sat for sat in satellites}

    # ── Internal ───────────────────────────────────────────────────

    def _require(self, satellite_id: UnitId) -> Satellite:
        sat = self.get_satellite(satellite_id)
        if sat is None:
            raise ValueError(f"Satellite not found: {satellite_id}")
        return sat


def _dump_metadata(metadata: UnitMetadata) -> str:
    if not all(isinstance(k, str) and isinstance(v, str) for k, v in metadata.items()):
        raise ValueError("Satellite metadata keys and values must be strings")
    return json.dumps(metadata, sort_keys=True)


def _row_to_satellite(row) -> Satellite:
    return Satellite(
        id=row[0],
        metadata=json.loads(row[1] or "{}"),
        registered_at=row[2],
        updated_at=row[3],
    )
