"""Pytest configuration and fixtures."""

import os

import pytest

from devladder.core.config import get_settings


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["DEVLADDER_ENV"] = "test"
    for name in (
        "READINESS_ELIGIBLE_THRESHOLD",
        "READINESS_MAX_BLOCKERS",
        "METRICS_MIN_RETENTION",
        "METRICS_MIN_CLIFFHANGER",
        "METRICS_MAX_CONFUSION",
        "TENSION_OVERHEAT_MARGIN",
        "TENSION_FLATLINE_DELTA",
        "TENSION_WHIPLASH_DELTA",
        "LOG_LEVEL",
    ):
        os.environ.pop(name, None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
