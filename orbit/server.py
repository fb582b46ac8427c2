"""Orbit — status API server.

Exposes:
  GET    /health                                  — liveness check
  GET    /statuses                                — last recorded statuses
  GET    /statuses/history/{segment}/{unit_id}    — recorded status trail
  POST   /statuses/collect                        — run a collection now
  GET    /satellites                              — registered satellites
  POST   /satellites                              — register a satellite
  PATCH  /satellites/{satellite_id}               — replace its metadata
  DELETE /satellites/{satellite_id}               — unregister it

Start with::

    python -m orbit.server
    # or
    uvicorn orbit.server:app --host 0.0.0.0 --port 5300
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from orbit.config import Settings, statuses_config_from_dict
from orbit.db import get_db, init_db
from orbit.satellites.registry import SatelliteRegistry
from orbit.status.client import StatusClient
from orbit.status.collector import StatusCollector
from orbit.status.scheduler import StatusCronJob
from orbit.status.store import StatusStore

logger = logging.getLogger(__name__)

_settings: Settings | None = None
_client: StatusClient | None = None


def _get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def _get_client() -> StatusClient:
    global _client
    if _client is None:
        settings = _get_settings()
        _client = StatusClient(
            settings.status_url,
            token=settings.status_token,
            timeout=settings.status_timeout,
        )
    return _client


def _db() -> sqlite3.Connection:
    init_db()
    return get_db()


def _collector(conn: sqlite3.Connection) -> StatusCollector:
    store = StatusStore(conn, mission_control_id=_get_settings().mission_control_id)
    return StatusCollector(_get_client(), store, SatelliteRegistry(conn))


# ──────────────────────────────────────────────────────────────────
# FastAPI app
# ──────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    global _client
    settings = _get_settings()
    cronjob: StatusCronJob | None = None
    if settings.status_interval_minutes > 0:
        cronjob = StatusCronJob(
            _collector(_db()),
            settings.mission_control_id,
            settings.statuses_config,
            interval_minutes=settings.status_interval_minutes,
        )
        await cronjob.start()
    try:
        yield
    finally:
        if cronjob is not None:
            await cronjob.stop()
        if _client is not None:
            await _client.aclose()
            _client = None


app = FastAPI(title="Orbit", version="1.0.0", lifespan=lifespan)


# ──────────────────────────────────────────────────────────────────
# Request models
# ──────────────────────────────────────────────────────────────────

class SatelliteOverride(BaseModel):
    enabled: bool = True


class CollectRequest(BaseModel):
    cycles_threshold: int | None = None
    mission_control_cycles_threshold: int | None = None
    satellites: dict[str, SatelliteOverride] = Field(default_factory=dict)


class AddSatelliteRequest(BaseModel):
    id: str
    metadata: dict[str, str] = Field(default_factory=dict)


class UpdateSatelliteRequest(BaseModel):
    metadata: dict[str, str]


# ──────────────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/statuses")
async def get_statuses():
    store = StatusStore(_db(), mission_control_id=_get_settings().mission_control_id)
    return {
        "mission_control": store.get_mission_control_status(),
        "satellites": store.list_satellite_statuses(),
    }


@app.get("/statuses/history/{segment}/{unit_id}")
async def get_status_history(segment: str, unit_id: str, limit: int = Query(50, ge=1, le=1000)):
    store = StatusStore(_db(), mission_control_id=_get_settings().mission_control_id)
    try:
        history = store.list_history(segment, unit_id, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"segment": segment, "unit_id": unit_id, "history": history}


@app.post("/statuses/collect")
async def collect(req: CollectRequest):
    try:
        config = statuses_config_from_dict(req.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    statuses = await _collector(_db()).collect_statuses(
        _get_settings().mission_control_id, config
    )
    return statuses.to_dict()


@app.get("/satellites")
async def list_satellites():
    satellites = SatelliteRegistry(_db()).list_satellites()
    return {
        "satellites": [sat.to_dict() for sat in satellites.values()],
        "total": len(satellites),
    }


@app.post("/satellites")
async def add_satellite(req: AddSatelliteRequest):
    try:
        sat = SatelliteRegistry(_db()).add_satellite(req.id, req.metadata)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return sat.to_dict()


@app.patch("/satellites/{satellite_id}")
async def update_satellite(satellite_id: str, req: UpdateSatelliteRequest):
    try:
        sat = SatelliteRegistry(_db()).set_metadata(satellite_id, req.metadata)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return sat.to_dict()


@app.delete("/satellites/{satellite_id}")
async def delete_satellite(satellite_id: str) -> dict[str, Any]:
    if not SatelliteRegistry(_db()).remove_satellite(satellite_id):
        raise HTTPException(status_code=404, detail="Satellite not found")
    return {"deleted": True}


# ──────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────

def main():
    import uvicorn
    settings = _get_settings()
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting Orbit server on %s:%d", settings.host, settings.port)
    uvicorn.run("orbit.server:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
