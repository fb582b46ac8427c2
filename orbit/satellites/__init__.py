"""Orbit — satellite registry."""

from orbit.satellites.registry import SatelliteRegistry

__all__ = ["SatelliteRegistry"]
