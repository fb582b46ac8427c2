"""Orbit — fleet status aggregation for a mission control and its satellites.

Quickstart::

    from orbit.status import StatusCollector, StatusesConfig

    collector = StatusCollector(client, store, registry)
    statuses = await collector.collect_statuses("mission-control", StatusesConfig())
"""

__version__ = "1.0.0"
