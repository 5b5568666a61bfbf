"""
Connection handle and the default socket connection factory.

A Connection owns one bidirectional byte stream plus the per-connection
query token counter and a broken flag. The frame codec reads and writes
through ``Connection.stream``; anything with ``write``, ``flush`` and
``read`` works, which is how tests script the transport.

Invariants:
    - token only ever increases over the life of a connection
    - A broken connection is never reused or returned to a pool
    - At most one query is outstanding on a connection at a time

How to change safely:
    - The handshake is the V0_4 JSON protocol; newer SCRAM handshakes
      belong in a separate factory with the same signature
"""

from __future__ import annotations

import logging
import socket
import struct
from typing import Any, Callable, Protocol

from .config import ConnectOpts
from .errors import ConnectionError

logger = logging.getLogger(__name__)

_U32 = struct.Struct("<I")
VERSION_V0_4 = 0x400C2D20
PROTOCOL_JSON = 0x7E6970C7
HANDSHAKE_SUCCESS = b"SUCCESS"
_MAX_HANDSHAKE_REPLY = 4096


class ByteStream(Protocol):
    """Minimal blocking byte stream used by the frame codec."""

    def write(self, data: bytes) -> Any: ...

    def flush(self) -> None: ...

    def read(self, n: int) -> bytes: ...


class SocketStream:
    """Blocking socket stream with separate read and write deadlines."""

    def __init__(
        self,
        sock: socket.socket,
        read_timeout: float | None = None,
        write_timeout: float | None = None,
    ) -> None:
        self._sock = sock
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout

    def write(self, data: bytes) -> int:
        self._sock.settimeout(self._write_timeout)
        self._sock.sendall(data)
        return len(data)

    def flush(self) -> None:
        # sendall() leaves nothing buffered on our side.
        pass

    def read(self, n: int) -> bytes:
        self._sock.settimeout(self._read_timeout)
        return self._sock.recv(n)

    def close(self) -> None:
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # already disconnected
        self._sock.close()


class Connection:
    """A stateful handle on one server connection.

    Attributes:
        stream: Byte stream used by the frame codec
        token: Token of the most recent query on this connection
        broken: Set when an I/O failure left the stream in an unknown state
        address: host:port this connection was opened to, if known

    Not safe for concurrent use: the token/write/read sequence of one
    query must not interleave with another.
    """

    def __init__(self, stream: ByteStream, token: int = 0, address: str | None = None) -> None:
        self.stream = stream
        self.token = token
        self.broken = False
        self.address = address
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def next_token(self) -> int:
        """Advance and return the query token."""
        self.token += 1
        return self.token

    def close(self) -> None:
        """Close the underlying stream. Idempotent."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self.stream, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "broken" if self.broken else "closed" if self._closed else "open"
        return f"Connection(address={self.address!r}, token={self.token}, {state})"


ConnectionFactory = Callable[[ConnectOpts], Connection]


def handshake(stream: ByteStream, auth_key: str) -> None:
    """Run the V0_4 JSON handshake on a freshly opened stream.

    Raises:
        ConnectionError: If the server rejects the handshake
        OSError: On socket failure
    """
    key = auth_key.encode("utf-8")
    stream.write(_U32.pack(VERSION_V0_4) + _U32.pack(len(key)) + key + _U32.pack(PROTOCOL_JSON))
    stream.flush()

    reply = bytearray()
    while True:
        chunk = stream.read(1)
        if not chunk:
            raise ConnectionError("Server closed the connection during handshake")
        if chunk == b"\0":
            break
        reply += chunk
        if len(reply) > _MAX_HANDSHAKE_REPLY:
            raise ConnectionError("Handshake reply too long")

    if bytes(reply) != HANDSHAKE_SUCCESS:
        raise ConnectionError(f"Handshake rejected: {reply.decode('utf-8', 'replace')}")


def connect(opts: ConnectOpts) -> Connection:
    """Open a handshake-complete connection.

    Args:
        opts: Connection settings

    Returns:
        Connection ready for queries

    Raises:
        ConnectionError: If the server is unreachable or rejects the handshake
    """
    address = opts.address
    logger.debug("Connecting to %s", address)
    try:
        sock = socket.create_connection((opts.host, opts.port), timeout=opts.timeout)
    except OSError as e:
        raise ConnectionError(f"Failed to connect: {e}", address=address) from e

    if sock.family in (socket.AF_INET, socket.AF_INET6):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    stream = SocketStream(sock, opts.socket_read_timeout, opts.socket_write_timeout)
    try:
        handshake(stream, opts.password)
    except ConnectionError as e:
        logger.warning("Handshake with %s failed: %s", address, e.message)
        stream.close()
        e.address = address
        e.details["address"] = address
        raise
    except OSError as e:
        logger.warning("Handshake with %s failed: %s", address, e)
        stream.close()
        raise ConnectionError(f"Handshake failed: {e}", address=address) from e

    return Connection(stream, address=address)
