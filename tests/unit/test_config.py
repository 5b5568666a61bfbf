"""
Unit tests for session configuration.

Tests cover:
- Defaults and environment loading
- Validation
- Reconfiguration and snapshots
"""

import pytest
from pydantic import ValidationError

from reql_sdk.config import ConnectOpts, configure, get_config, on_reconfigure, reset_config


class TestConnectOpts:
    """Tests for ConnectOpts."""

    def test_defaults(self):
        opts = ConnectOpts()

        assert opts.host == "localhost"
        assert opts.port == 28015
        assert opts.db == "test"
        assert opts.retries == 5
        assert opts.read_timeout is None
        assert opts.address == "localhost:28015"

    def test_socket_timeouts_default_to_connect_timeout(self):
        opts = ConnectOpts(timeout=3.0)

        assert opts.socket_read_timeout == 3.0
        assert opts.socket_write_timeout == 3.0

    def test_explicit_socket_timeouts(self):
        opts = ConnectOpts(timeout=3.0, read_timeout=60.0, write_timeout=5.0)

        assert opts.socket_read_timeout == 60.0
        assert opts.socket_write_timeout == 5.0

    def test_env_loading(self, monkeypatch):
        monkeypatch.setenv("REQL_HOST", "db.internal")
        monkeypatch.setenv("REQL_PORT", "29015")
        monkeypatch.setenv("REQL_RETRIES", "2")

        opts = ConnectOpts()

        assert opts.address == "db.internal:29015"
        assert opts.retries == 2

    def test_retries_must_be_positive(self):
        with pytest.raises(ValidationError):
            ConnectOpts(retries=0)

    def test_frozen(self):
        opts = ConnectOpts()
        with pytest.raises(ValidationError):
            opts.db = "other"


class TestSessionConfig:
    """Tests for the process-wide snapshot."""

    def test_get_config_is_stable(self):
        assert get_config() is get_config()

    def test_configure_keeps_unnamed_fields(self):
        configure(host="db1")
        updated = configure(db="app")

        assert updated.host == "db1"
        assert updated.db == "app"
        assert get_config() is updated

    def test_old_snapshot_unchanged(self):
        before = get_config()
        configure(db="app")

        assert before.db == "test"

    def test_invalid_configure_keeps_snapshot(self):
        before = get_config()

        with pytest.raises(ValidationError):
            configure(retries=-1)

        assert get_config() is before

    def test_reset_config(self, monkeypatch):
        configure(db="app")
        monkeypatch.setenv("REQL_DB", "fromenv")

        reset_config()

        assert get_config().db == "fromenv"

    def test_listener_called(self):
        seen = []
        unregister = on_reconfigure(seen.append)
        try:
            configure(db="app")
        finally:
            unregister()

        assert seen[-1].db == "app"

    def test_unregistered_listener_not_called(self):
        seen = []
        unregister = on_reconfigure(seen.append)
        unregister()
        unregister()  # idempotent

        configure(db="app")

        assert seen == []
