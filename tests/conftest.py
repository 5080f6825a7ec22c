"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a host application or DuckDB data directory.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'services', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


_ENV_KEYS = (
    "GWFVIS_STATE_NAMESPACE",
    "CATALOG_SINGLE_FLIGHT",
    "DUCKDB_DATA_DIR",
    "DUCKDB_FILE_SUFFIX",
    "DUCKDB_READ_ONLY",
    "DUCKDB_THREADS",
    "DEBUG_LOGGING",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    """
    Start every test from default configuration.

    Removes configuration env vars a developer may have exported and drops
    the config singleton before and after the test.
    """
    from config import reset_config

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("ENVIRONMENT", "test")
    reset_config()
    yield
    reset_config()


@pytest.fixture
def shared_states():
    """Plain dict standing in for the host's shared state bag."""
    return {}


@pytest.fixture
def state_store(shared_states):
    """SharedStateStore over the shared_states dict."""
    from infrastructure.shared_state import SharedStateStore
    return SharedStateStore(shared_states)
