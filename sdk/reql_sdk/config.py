"""
Session configuration for the ReQL SDK.

Settings are loaded from environment variables (prefix ``REQL_``) and held
as one immutable, process-wide snapshot:
- Default database used to qualify bare r.table(...) calls
- Retry budget for the submission engine
- Connection factory parameters (host, port, credentials, timeouts)
- Pool sizing

Invariants:
    - A snapshot never changes once published; configure() swaps it
    - Readers take the current snapshot and never hold the lock across I/O
    - retries is always >= 1

Example:
    >>> from reql_sdk import configure, get_config
    >>> configure(host="db.internal", db="app", retries=3)
    >>> get_config().db
    'app'
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ConnectOpts(BaseSettings):
    """Connection and session settings loaded from environment."""

    host: str = Field(default="localhost", description="Server host")
    port: int = Field(default=28015, description="Client driver port")
    db: str = Field(default="test", description="Default database")
    user: str = Field(default="admin", description="User name")
    password: str = Field(default="", description="Password / auth key")

    timeout: float = Field(default=20.0, gt=0, description="Connect timeout seconds")
    read_timeout: float | None = Field(default=None, gt=0, description="Socket read timeout; defaults to timeout")
    write_timeout: float | None = Field(default=None, gt=0, description="Socket write timeout; defaults to timeout")

    retries: int = Field(default=5, ge=1, description="Attempts per query")
    pool_size: int = Field(default=10, ge=0, description="Max idle pooled connections")

    model_config = SettingsConfigDict(env_prefix="REQL_", frozen=True)

    @property
    def address(self) -> str:
        """host:port of the server."""
        return f"{self.host}:{self.port}"

    @property
    def socket_read_timeout(self) -> float:
        """Deadline for each socket read. Never unbounded."""
        return self.read_timeout if self.read_timeout is not None else self.timeout

    @property
    def socket_write_timeout(self) -> float:
        """Deadline for each socket write. Never unbounded."""
        return self.write_timeout if self.write_timeout is not None else self.timeout


# Global configuration
_config: ConnectOpts | None = None
_config_lock = threading.Lock()
_listeners: list[Callable[[ConnectOpts], None]] = []


def get_config() -> ConnectOpts:
    """Get the current configuration snapshot."""
    global _config
    with _config_lock:
        if _config is None:
            _config = ConnectOpts()
        return _config


def configure(**changes: Any) -> ConnectOpts:
    """Validate and publish a new configuration snapshot.

    Fields not named keep their current value.

    Args:
        **changes: ConnectOpts fields to change

    Returns:
        The new snapshot

    Raises:
        pydantic.ValidationError: If a value is invalid
    """
    global _config
    with _config_lock:
        current = _config if _config is not None else ConnectOpts()
        updated = ConnectOpts(**{**current.model_dump(), **changes})
        _config = updated
        listeners = list(_listeners)

    logger.debug("Reconfigured session: %s", sorted(changes))
    for listener in listeners:
        listener(updated)
    return updated


def on_reconfigure(listener: Callable[[ConnectOpts], None]) -> Callable[[], None]:
    """Register a callback invoked after every configure() and reset_config().

    Returns:
        A function that unregisters the callback
    """
    with _config_lock:
        _listeners.append(listener)

    def unregister() -> None:
        with _config_lock:
            if listener in _listeners:
                _listeners.remove(listener)

    return unregister


def reset_config() -> None:
    """Reset to environment defaults (for testing only)."""
    global _config
    with _config_lock:
        _config = None
        listeners = list(_listeners)
    for listener in listeners:
        listener(get_config())
