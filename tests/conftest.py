"""
Shared pytest fixtures.
"""

from datetime import date

import pytest

from weekgrid.core.config import get_settings


@pytest.fixture
def monday() -> date:
    """A fixed Monday so weekday-based availability is predictable."""
    return date(2025, 1, 13)


@pytest.fixture
def config_path(tmp_path):
    """Location for a throwaway schedule config file."""
    return tmp_path / "data" / "config.json"


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
