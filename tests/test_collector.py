"""Tests for StatusCollector — threshold gate, satellite fan-out, store writes."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from orbit.constants import CYCLES_MIN_THRESHOLD
from orbit.status.collector import StatusCollector, is_satellite_enabled
from orbit.status.types import (
    RawStatus,
    Satellite,
    SatelliteConfig,
    SegmentStatus,
    StatusError,
    StatusesConfig,
)

F = CYCLES_MIN_THRESHOLD
MC = "mission-control"


def _raw(cycles: int, status_at: int = 1_700_000_000) -> RawStatus:
    return RawStatus(cycles=cycles, status_at=status_at)


def _collector(responses: dict, satellites: dict | None = None):
    """Collector with a probe answering from *responses* (id -> result or list of results)."""
    remaining = {k: list(v) if isinstance(v, list) else v for k, v in responses.items()}

    async def query(unit_id):
        value = remaining[unit_id]
        if isinstance(value, list):
            return value.pop(0)
        return value

    probe = MagicMock()
    probe.query_segment_status = AsyncMock(side_effect=query)
    store = MagicMock()
    registry = MagicMock()
    registry.list_satellites.return_value = satellites or {}
    return StatusCollector(probe, store, registry), probe, store, registry


def _sats(*ids: str) -> dict:
    return {i: Satellite(id=i, metadata={"name": i.upper()}) for i in ids}


def _probed_ids(probe) -> list[str]:
    return [c.args[0] for c in probe.query_segment_status.await_args_list]


# ── Early exit ────────────────────────────────────────────────────


class TestEarlyExit:
    async def test_mission_control_error_skips_satellites(self):
        err = StatusError("unreachable")
        collector, probe, store, registry = _collector({MC: err}, _sats("a", "b"))

        result = await collector.collect_statuses(MC, StatusesConfig())

        assert result.mission_control is err
        assert result.satellites is None
        registry.list_satellites.assert_not_called()
        assert _probed_ids(probe) == [MC]
        store.record_mission_control_status.assert_called_once_with(err)
        store.record_satellite_status.assert_not_called()

    async def test_below_threshold_skips_satellites(self):
        collector, probe, store, registry = _collector({MC: _raw(F - 1)}, _sats("a"))

        result = await collector.collect_statuses(MC, StatusesConfig())

        assert isinstance(result.mission_control, SegmentStatus)
        assert result.mission_control.status.cycles == F - 1
        assert result.satellites is None
        assert probe.query_segment_status.await_count == 1
        registry.list_satellites.assert_not_called()

    async def test_configured_threshold_gates(self):
        collector, probe, _, registry = _collector({MC: _raw(F * 2)}, _sats("a"))

        config = StatusesConfig(mission_control_cycles_threshold=F * 3)
        result = await collector.collect_statuses(MC, config)

        assert result.satellites is None
        registry.list_satellites.assert_not_called()


# ── Full path ─────────────────────────────────────────────────────


class TestFullCollection:
    async def test_healthy_mission_control_polls_satellites(self):
        first, second = _raw(F + 1, 1), _raw(F + 1, 2)
        collector, probe, store, _ = _collector(
            {MC: [first, second], "a": _raw(10), "b": _raw(20)},
            _sats("a", "b"),
        )

        result = await collector.collect_statuses(MC, StatusesConfig())

        assert result.satellites is not None
        assert len(result.satellites) == 2
        assert _probed_ids(probe).count(MC) == 2
        assert _probed_ids(probe).count("a") == 1
        assert _probed_ids(probe).count("b") == 1
        assert store.record_mission_control_status.call_count == 2

    async def test_report_carries_refreshed_mission_control(self):
        collector, _, _, _ = _collector(
            {MC: [_raw(F + 1, 1), _raw(F + 5, 2)]},
        )

        result = await collector.collect_statuses(MC, StatusesConfig())

        assert result.mission_control.status_at == 2
        assert result.mission_control.status.cycles == F + 5
        assert result.satellites == []

    async def test_refresh_error_is_reported(self):
        err = StatusError("gone")
        collector, _, _, _ = _collector({MC: [_raw(F), err], "a": _raw(1)}, _sats("a"))

        result = await collector.collect_statuses(MC, StatusesConfig())

        assert result.mission_control is err
        assert len(result.satellites) == 1

    async def test_satellite_results_carry_id_and_metadata(self):
        collector, _, _, _ = _collector({MC: _raw(F), "a": _raw(42, 7)}, _sats("a"))

        result = await collector.collect_statuses(MC, StatusesConfig())

        (sat,) = result.satellites
        assert sat.id == "a"
        assert sat.metadata == {"name": "A"}
        assert sat.status.cycles == 42
        assert sat.status_at == 7

    async def test_mission_control_has_no_metadata(self):
        collector, _, _, _ = _collector({MC: _raw(F)})
        result = await collector.collect_statuses(MC, StatusesConfig())
        assert result.mission_control.metadata is None
        assert result.mission_control.id == MC


# ── Filtering & independence ──────────────────────────────────────


class TestSatelliteFanOut:
    async def test_disabled_satellite_is_skipped(self):
        collector, probe, _, _ = _collector(
            {"a": _raw(1), "b": _raw(2), "c": _raw(3)}, _sats("a", "b", "c")
        )

        results = await collector.satellites_status({"b": SatelliteConfig(enabled=False)})

        assert {r.id for r in results} == {"a", "c"}
        assert "b" not in _probed_ids(probe)

    async def test_explicitly_enabled_satellite_is_polled(self):
        collector, _, _, _ = _collector({"a": _raw(1)}, _sats("a"))
        results = await collector.satellites_status({"a": SatelliteConfig(enabled=True)})
        assert [r.id for r in results] == ["a"]

    async def test_config_for_unknown_satellite_is_ignored(self):
        collector, _, _, _ = _collector({"a": _raw(1)}, _sats("a"))
        results = await collector.satellites_status({"zzz": SatelliteConfig(enabled=False)})
        assert [r.id for r in results] == ["a"]

    async def test_satellite_error_does_not_affect_siblings(self):
        err = StatusError("not found")
        collector, _, _, _ = _collector({"a": err, "c": _raw(3)}, _sats("a", "c"))

        results = await collector.satellites_status({})

        assert err in results
        ok = [r for r in results if isinstance(r, SegmentStatus)]
        assert [r.id for r in ok] == ["c"]

    async def test_satellites_are_queried_concurrently(self):
        started: list[str] = []
        release = asyncio.Event()

        async def query(unit_id):
            started.append(unit_id)
            if len(started) == 3:
                release.set()
            await release.wait()
            return _raw(1)

        probe = MagicMock()
        probe.query_segment_status = AsyncMock(side_effect=query)
        registry = MagicMock()
        registry.list_satellites.return_value = _sats("a", "b", "c")
        collector = StatusCollector(probe, MagicMock(), registry)

        results = await asyncio.wait_for(collector.satellites_status({}), timeout=1.0)

        assert len(results) == 3
        assert sorted(started) == ["a", "b", "c"]

    async def test_results_in_dispatch_order(self):
        collector, _, _, _ = _collector(
            {"a": _raw(1), "b": _raw(2), "c": _raw(3)}, _sats("a", "b", "c")
        )
        results = await collector.satellites_status({})
        assert [r.id for r in results] == ["a", "b", "c"]


# ── Store side effect ─────────────────────────────────────────────


class TestStoreWrites:
    async def test_every_fetch_is_recorded_once(self):
        raw_a, err_b = _raw(1), StatusError("timeout")
        mc1, mc2 = _raw(F, 1), _raw(F, 2)
        collector, _, store, _ = _collector(
            {MC: [mc1, mc2], "a": raw_a, "b": err_b}, _sats("a", "b")
        )

        await collector.collect_statuses(MC, StatusesConfig())

        assert store.record_mission_control_status.call_args_list == [call(mc1), call(mc2)]
        store.record_satellite_status.assert_has_calls(
            [call("a", raw_a), call("b", err_b)], any_order=True
        )
        assert store.record_satellite_status.call_count == 2

    async def test_error_is_recorded_and_returned_unchanged(self):
        err = StatusError("permission denied")
        collector, _, store, _ = _collector({"a": err}, _sats("a"))

        result = await collector.satellite_status("a", Satellite(id="a"))

        assert result is err
        store.record_satellite_status.assert_called_once_with("a", err)


class TestIsSatelliteEnabled:
    def test_absent_is_enabled(self):
        assert is_satellite_enabled("x", {}) is True

    def test_disabled(self):
        assert is_satellite_enabled("x", {"x": SatelliteConfig(enabled=False)}) is False


class TestStoreMissionControlId:
    async def test_mismatched_store_id_is_logged(self, db, caplog):
        from orbit.status.store import StatusStore

        store = StatusStore(db, mission_control_id="mc-store")
        probe = MagicMock()
        probe.query_segment_status = AsyncMock(return_value=_raw(F - 1))
        registry = MagicMock()
        collector = StatusCollector(probe, store, registry)

        with caplog.at_level("WARNING", logger="orbit.status.collector"):
            await collector.collect_statuses("mc-other", StatusesConfig())

        assert "recorded under store id mc-store" in caplog.text
        assert store.get_mission_control_status()["unit_id"] == "mc-store"

    async def test_matching_store_id_is_quiet(self, db, caplog):
        from orbit.status.store import StatusStore

        store = StatusStore(db, mission_control_id=MC)
        probe = MagicMock()
        probe.query_segment_status = AsyncMock(return_value=_raw(F - 1))
        collector = StatusCollector(probe, store, MagicMock())

        with caplog.at_level("WARNING", logger="orbit.status.collector"):
            await collector.collect_statuses(MC, StatusesConfig())

        assert "recorded under store id" not in caplog.text
