"""Shared test fixtures."""

import pytest
import structlog

from objectlog.utils.config import reset_config


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep global configuration and logging setup from leaking between tests."""
    for name in ("LOG_LEVEL", "LOG_FORMAT", "OBJECTLOG_FSYNC"):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()
    structlog.reset_defaults()
