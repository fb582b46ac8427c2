"""Status store — persists the outcome of every segment status query.

Keeps the last known status per segment in ``segment_statuses`` and an
append-only trail in ``segment_status_history``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from orbit.constants import MISSION_CONTROL_SEGMENT, SATELLITE_SEGMENT, SEGMENTS
from orbit.status.types import RawStatusResult, StatusError, UnitId

logger = logging.getLogger(__name__)

_COLUMNS = "segment, unit_id, ok, cycles, memory_size, state, status_at, error"


class StatusStore:
    """CRUD wrapper around the ``segment_statuses`` tables.

    Writes are fire-and-forget: a database error is logged and swallowed so
    that a failing store never changes the outcome of a status collection.

    Args:
        conn:               An open :class:`sqlite3.Connection`.
        mission_control_id: Id the mission control status is recorded under.
    """

    def __init__(self, conn: sqlite3.Connection, mission_control_id: UnitId = "mission-control") -> None:
        self._conn = conn
        self.mission_control_id = mission_control_id

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    def record_mission_control_status(self, result: RawStatusResult) -> None:
        self._record(MISSION_CONTROL_SEGMENT, self.mission_control_id, result)

    def record_satellite_status(self, unit_id: UnitId, result: RawStatusResult) -> None:
        self._record(SATELLITE_SEGMENT, unit_id, result)

    def prune_history(self, keep: int = 100) -> int:
        """Keep only the newest *keep* history rows per segment.

        Returns:
            Number of rows deleted.
        """
        cur = self._conn.execute(
            """
            DELETE FROM segment_status_history
            WHERE id IN (
                SELECT id FROM (
                    SELECT id, ROW_NUMBER() OVER (
                        PARTITION BY segment, unit_id ORDER BY id DESC
                    ) AS rn
                    FROM segment_status_history
                ) WHERE rn > ?
            )
            """,
            (keep,),
        )
        self._conn.commit()
        deleted = cur.rowcount or 0
        if deleted:
            logger.info("Pruned %d status history row(s)", deleted)
        return deleted

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    def get_mission_control_status(self) -> dict[str, Any] | None:
        return self._get(MISSION_CONTROL_SEGMENT, self.mission_control_id)

    def get_satellite_status(self, unit_id: UnitId) -> dict[str, Any] | None:
        return self._get(SATELLITE_SEGMENT, unit_id)

    def list_satellite_statuses(self) -> list[dict[str, Any]]:
        cur = self._conn.execute(
            "SELECT * FROM segment_statuses WHERE segment = ? ORDER BY unit_id",
            (SATELLITE_SEGMENT,),
        )
        return [_row_to_dict(r) for r in cur.fetchall()]

    def list_history(self, segment: str, unit_id: UnitId, limit: int = 50) -> list[dict[str, Any]]:
        """Return recorded statuses for one segment, newest first."""
        if segment not in SEGMENTS:
            raise ValueError(f"Unknown segment: {segment}")
        cur = self._conn.execute(
            """SELECT * FROM segment_status_history
               WHERE segment = ? AND unit_id = ?
               ORDER BY id DESC LIMIT ?""",
            (segment, unit_id, limit),
        )
        return [_row_to_dict(r) for r in cur.fetchall()]

    # ------------------------------------------------------------------ #
    # Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _record(self, segment: str, unit_id: UnitId, result: RawStatusResult) -> None:
        if isinstance(result, StatusError):
            values = (segment, unit_id, False, None, None, None, None, result.message)
        else:
            values = (
                segment,
                unit_id,
                True,
                result.cycles,
                result.memory_size,
                result.state,
                result.status_at,
                None,
            )

        try:
            self._conn.execute(
                f"""INSERT INTO segment_statuses ({_COLUMNS}, recorded_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(segment, unit_id) DO UPDATE SET
                        ok          = excluded.ok,
                        cycles      = excluded.cycles,
                        memory_size = excluded.memory_size,
                        state       = excluded.state,
                        status_at   = excluded.status_at,
                        error       = excluded.error,
                        recorded_at = CURRENT_TIMESTAMP""",
                values,
            )
            self._conn.execute(
                f"INSERT INTO segment_status_history ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                values,
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            logger.error("Failed to record %s status for %s: %s", segment, unit_id, exc)

    def _get(self, segment: str, unit_id: UnitId) -> dict[str, Any] | None:
        row = self._conn.execute(
            "SELECT * FROM segment_statuses WHERE segment = ? AND unit_id = ?",
            (segment, unit_id),
        ).fetchone()
        return _row_to_dict(row) if row is not None else None


def _row_to_dict(row: sqlite3.Row) -> dict[str, Any]:
    data = dict(row)
    data["ok"] = bool(data["ok"])
    return data
