"""pytest configuration for Orbit tests."""

import pytest

from orbit.db import get_db, init_db, set_db_path


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


@pytest.fixture
def db(tmp_path):
    """Fresh database per test, returned as the current thread's connection."""
    set_db_path(tmp_path / "test.db")
    init_db()
    return get_db()
