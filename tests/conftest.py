"""Pytest hooks and fixtures."""

import pytest

from apicontract.config.access import clear_config_cache
from apicontract.utils.logging_utils import reset_logging


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "e2e: exercises the example server and client together over ASGI",
    )


@pytest.fixture(autouse=True)
def _isolate_global_state():
    """Each test starts with an empty config cache and a silent library logger."""
    clear_config_cache()
    yield
    clear_config_cache()
    reset_logging()
