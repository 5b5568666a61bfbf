"""
Shared fixtures for ReQL SDK tests.

Every test starts from environment-default settings with the default
connection factory and an empty shared pool.
"""

import os

import pytest

from reql_sdk import reset_config, set_connection_factory


@pytest.fixture(autouse=True)
def isolated_session(monkeypatch):
    """Reset process-wide session state around each test."""
    for key in list(os.environ):
        if key.startswith("REQL_"):
            monkeypatch.delenv(key)
    reset_config()
    set_connection_factory(None)
    yield
    set_connection_factory(None)
    reset_config()
