"""
Connection pool.

Each submission borrows one connection exclusively for its duration and
hands it back afterwards. Broken connections are dropped instead of being
returned.

Invariants:
    - A borrowed connection is owned by exactly one caller
    - A broken or closed connection never re-enters the idle set
    - At most pool_size connections are kept idle

Example:
    >>> pool = ConnectionPool(connect, get_config())
    >>> conn = pool.acquire()
    >>> try:
    ...     ...
    ... finally:
    ...     pool.release(conn)
"""

from __future__ import annotations

import logging
import threading
from collections import deque

from .config import ConnectOpts, get_config, on_reconfigure
from .connection import Connection, ConnectionFactory, connect

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Thread-safe pool of idle connections.

    Attributes:
        opts: Settings passed to the factory
    """

    def __init__(self, factory: ConnectionFactory, opts: ConnectOpts) -> None:
        self._factory = factory
        self.opts = opts
        self._idle: deque[Connection] = deque()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    def acquire(self) -> Connection:
        """Borrow an idle connection, or open a new one.

        Raises:
            ConnectionError: If a new connection cannot be opened
        """
        with self._lock:
            while self._idle:
                conn = self._idle.pop()
                if not conn.broken and not conn.closed:
                    return conn
                conn.close()
        logger.debug("Opening new connection to %s", self.opts.address)
        return self._factory(self.opts)

    def release(self, conn: Connection) -> None:
        """Return a borrowed connection."""
        if conn.broken or conn.closed:
            self.discard(conn)
            return
        with self._lock:
            if not self._closed and len(self._idle) < self.opts.pool_size:
                self._idle.append(conn)
                return
        conn.close()

    def discard(self, conn: Connection) -> None:
        """Drop a borrowed connection without returning it."""
        logger.debug("Dropping %r", conn)
        conn.close()

    def close(self) -> None:
        """Close all idle connections; later releases just close."""
        with self._lock:
            self._closed = True
            idle, self._idle = list(self._idle), deque()
        for conn in idle:
            conn.close()


# Global pool
_pool: ConnectionPool | None = None
_factory: ConnectionFactory = connect
_pool_lock = threading.Lock()


def get_pool() -> ConnectionPool:
    """Get the shared pool, creating it from the current config."""
    global _pool
    with _pool_lock:
        if _pool is None:
            _pool = ConnectionPool(_factory, get_config())
        return _pool


def set_connection_factory(factory: ConnectionFactory | None) -> None:
    """Install the factory used for new connections (None restores the default)."""
    global _factory
    with _pool_lock:
        _factory = factory or connect
    reset_pool()


def reset_pool(opts: ConnectOpts | None = None) -> None:
    """Close the shared pool; the next get_pool() builds a fresh one."""
    global _pool
    with _pool_lock:
        old, _pool = _pool, None
    if old is not None:
        old.close()


on_reconfigure(reset_pool)
