"""Pytest configuration and fixtures for errguard tests."""

import os
from unittest.mock import MagicMock

import pytest

# Keep the environment deterministic for tests
os.environ["ERRGUARD_ENVIRONMENT"] = "development"

from errguard.config.settings import RetrySettings, Settings, reset_settings_cache
from errguard.errors.manager import ErrorManager
from errguard.features.flags import FeaturePolicy, default_flags
from errguard.runtime import build_runtime
from errguard.state.register import ErrorRegister


@pytest.fixture
def policy():
    """Default development feature policy."""
    return FeaturePolicy(default_flags(production=False))


@pytest.fixture
def manager(policy):
    """Error manager in development mode."""
    return ErrorManager(policy, production=False)


@pytest.fixture
def prod_manager():
    """Error manager in production mode."""
    return ErrorManager(FeaturePolicy(default_flags(production=True)), production=True)


@pytest.fixture
def register():
    """Fresh global error register."""
    return ErrorRegister()


@pytest.fixture
def mock_reporter():
    """Reporter that records calls."""
    reporter = MagicMock()
    reporter.report = MagicMock(return_value=None)
    return reporter


@pytest.fixture
def fast_settings():
    """Settings with millisecond retry delays."""
    return Settings(retry=RetrySettings(max_retries=3, initial_delay_ms=1, max_delay_ms=5))


@pytest.fixture
def runtime(fast_settings, mock_reporter):
    """Runtime built from fast settings with a recording reporter."""
    rt = build_runtime(fast_settings)
    rt.reporter = mock_reporter
    return rt


@pytest.fixture(autouse=True)
def temp_home(tmp_path, monkeypatch):
    """Point the home directory at a temp dir and clear cached settings.

    Applied to every test so a real ~/.errguard/config.yml never leaks in.
    """
    monkeypatch.setenv("HOME", str(tmp_path))
    reset_settings_cache()
    yield tmp_path
    reset_settings_cache()
