"""Database initialisation for Orbit.

Creates (or migrates) the SQLite database holding the satellite registry
and the recorded segment statuses.  The database path is taken from the
``ORBIT_DATA_DIR`` environment variable (default: ``./data``).

Usage::

    from orbit.db import get_db, init_db
    init_db()                  # idempotent — safe to call multiple times
    conn = get_db()            # returns a per-thread connection
"""

from __future__ import annotations

import os
import sqlite3
import threading
from pathlib import Path

_DB_PATH: Path | None = None
_LOCAL = threading.local()


def _db_path() -> Path:
    global _DB_PATH
    if _DB_PATH is None:
        data_dir = Path(os.environ.get("ORBIT_DATA_DIR", "./data"))
        data_dir.mkdir(parents=True, exist_ok=True)
        _DB_PATH = data_dir / "orbit.db"
    return _DB_PATH


def set_db_path(path: str | Path) -> None:
    """Override the database path (useful for tests)."""
    global _DB_PATH, _LOCAL
    _DB_PATH = Path(path)
    _LOCAL = threading.local()


def get_db() -> sqlite3.Connection:
    """Return a per-thread SQLite connection (WAL mode, FK enabled)."""
    conn = getattr(_LOCAL, "conn", None)
    if conn is None:
        conn = sqlite3.connect(str(_db_path()), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        _LOCAL.conn = conn
    return conn


def init_db(path: str | Path | None = None) -> None:
    """Create all tables (idempotent — safe to run multiple times)."""
    if path:
        set_db_path(path)
    conn = get_db()
    _create_schema(conn)
    conn.commit()


_SCHEMA_SQL = """
-- ───────── Satellites ─────────

CREATE TABLE IF NOT EXISTS satellites (
    id             TEXT PRIMARY KEY,
    metadata       TEXT NOT NULL DEFAULT '{}',
    registered_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at     TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- ───────── Segment statuses ─────────

CREATE TABLE IF NOT EXISTS segment_statuses (
    segment      TEXT NOT NULL CHECK(segment IN ('mission_control', 'satellite')),
    unit_id      TEXT NOT NULL,
    ok           BOOLEAN NOT NULL,
    cycles       INTEGER,
    memory_size  INTEGER,
    state        TEXT,
    status_at    INTEGER,
    error        TEXT,
    recorded_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (segment, unit_id)
);

CREATE TABLE IF NOT EXISTS segment_status_history (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    segment      TEXT NOT NULL CHECK(segment IN ('mission_control', 'satellite')),
    unit_id      TEXT NOT NULL,
    ok           BOOLEAN NOT NULL,
    cycles       INTEGER,
    memory_size  INTEGER,
    state        TEXT,
    status_at    INTEGER,
    error        TEXT,
    recorded_at  TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_status_history_unit
    ON segment_status_history(segment, unit_id);
"""


def _create_schema(conn: sqlite3.Connection) -> None:
    """Execute all CREATE TABLE / INDEX statements in one transaction."""
    conn.executescript(_SCHEMA_SQL)
