"""Shared test configuration."""

import pytest

from settings import get_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test reads SPAM_DETECTOR_* settings from its own environment."""
    for name in ("LOG_LEVEL", "LOG_FORMAT", "LOWER_LOAD_FACTOR", "UPPER_LOAD_FACTOR"):
        monkeypatch.delenv("SPAM_DETECTOR_" + name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
