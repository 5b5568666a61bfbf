"""
Unit tests for the connection pool.

Tests cover:
- Reuse of idle connections
- Dropping broken connections
- Idle cap
- Shared pool lifecycle
"""

from unittest.mock import MagicMock

import pytest

from reql_sdk.config import ConnectOpts, configure
from reql_sdk.connection import Connection
from reql_sdk.errors import ConnectionError
from reql_sdk.pool import ConnectionPool, get_pool, reset_pool, set_connection_factory
from tests.fakes import FakeStream


def make_factory():
    return MagicMock(side_effect=lambda opts: Connection(FakeStream()))


class TestConnectionPool:
    """Tests for ConnectionPool."""

    @pytest.fixture
    def factory(self):
        return make_factory()

    @pytest.fixture
    def pool(self, factory):
        return ConnectionPool(factory, ConnectOpts(pool_size=2))

    def test_acquire_opens_connection(self, pool, factory):
        conn = pool.acquire()

        assert isinstance(conn, Connection)
        factory.assert_called_once_with(pool.opts)

    def test_released_connection_is_reused(self, pool, factory):
        conn = pool.acquire()
        pool.release(conn)

        assert pool.acquire() is conn
        assert factory.call_count == 1

    def test_broken_connection_is_dropped(self, pool, factory):
        conn = pool.acquire()
        conn.broken = True

        pool.release(conn)

        assert pool.idle_count == 0
        assert conn.closed
        assert pool.acquire() is not conn

    def test_idle_cap(self, pool):
        conns = [pool.acquire() for _ in range(3)]
        for conn in conns:
            pool.release(conn)

        assert pool.idle_count == 2
        assert conns[2].closed

    def test_factory_error_propagates(self):
        factory = MagicMock(side_effect=ConnectionError("refused", address="x:1"))
        pool = ConnectionPool(factory, ConnectOpts())

        with pytest.raises(ConnectionError):
            pool.acquire()

    def test_close(self, pool):
        conn = pool.acquire()
        pool.release(conn)

        pool.close()

        assert conn.closed
        other = pool.acquire()
        pool.release(other)
        assert other.closed


class TestSharedPool:
    """Tests for the process-wide pool."""

    def test_get_pool_is_shared(self):
        assert get_pool() is get_pool()

    def test_factory_is_installed(self):
        factory = make_factory()
        set_connection_factory(factory)

        get_pool().acquire()

        factory.assert_called_once()

    def test_reconfigure_replaces_pool(self):
        pool = get_pool()
        configure(pool_size=1)

        assert get_pool() is not pool
        assert get_pool().opts.pool_size == 1

    def test_reset_pool(self):
        pool = get_pool()
        reset_pool()
        assert get_pool() is not pool
