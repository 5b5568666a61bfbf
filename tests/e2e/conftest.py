"""
E2E test fixtures for the ReQL SDK.

These tests require a running database server reachable at
REQL_E2E_HOST:REQL_E2E_PORT (default localhost:28015).
"""

import os
import socket
import time
import uuid

import pytest

from reql_sdk import configure, r, reset_pool

# Skip E2E tests if not in E2E mode
E2E_ENABLED = os.environ.get("REQL_E2E_TESTS", "0") == "1"
E2E_HOST = os.environ.get("REQL_E2E_HOST", "localhost")
E2E_PORT = int(os.environ.get("REQL_E2E_PORT", "28015"))


def wait_for_service(host: str, port: int, timeout: int = 60) -> bool:
    """Wait for a service to become available."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1):
                return True
        except OSError:
            time.sleep(1)
    return False


@pytest.fixture(scope="session")
def server() -> str:
    """Address of the live server."""
    if not E2E_ENABLED:
        pytest.skip("E2E tests disabled. Set REQL_E2E_TESTS=1 to enable.")
    assert wait_for_service(E2E_HOST, E2E_PORT, timeout=60), "server not ready"
    return f"{E2E_HOST}:{E2E_PORT}"


@pytest.fixture
def test_db(server):
    """Fresh database for test isolation, dropped afterwards."""
    name = f"test_{uuid.uuid4().hex[:8]}"
    configure(host=E2E_HOST, port=E2E_PORT, db=name, read_timeout=10.0)
    r.db_create(name).run()
    yield name
    r.db_drop(name).run()
    reset_pool()
