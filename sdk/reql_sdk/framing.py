"""
Binary framing for queries and responses.

Every frame on the wire is:

    [ token : u64 LE ][ length : u32 LE ][ payload : length bytes ]

Requests carry the client-chosen token; responses echo it back. The
response token is read and returned but single-inflight connections have no
use for it beyond logging.

Invariants:
    - Declared length always equals the payload length
    - Any failure mid-frame marks the connection broken before raising;
      only OSError is wrapped in TransportError
"""

from __future__ import annotations

import logging
import struct

from .connection import ByteStream, Connection
from .errors import ArgumentError, TransportError

logger = logging.getLogger(__name__)

HEADER = struct.Struct("<QI")
HEADER_SIZE = HEADER.size
MAX_PAYLOAD = 2**32 - 1


def encode_frame(token: int, payload: bytes) -> bytes:
    """Build a complete frame.

    Raises:
        ArgumentError: If the payload does not fit a u32 length
    """
    if len(payload) > MAX_PAYLOAD:
        raise ArgumentError(f"Payload too large to frame: {len(payload)} bytes")
    return HEADER.pack(token, len(payload)) + payload


def decode_header(header: bytes) -> tuple[int, int]:
    """Split a 12-byte header into (token, length)."""
    token, length = HEADER.unpack(header)
    return token, length


def _read_exact(stream: ByteStream, n: int) -> bytes:
    buf = bytearray()
    while len(buf) < n:
        chunk = stream.read(n - len(buf))
        if not chunk:
            raise EOFError(f"Connection closed mid-frame ({len(buf)}/{n} bytes)")
        buf += chunk
    return bytes(buf)


def write_query(conn: Connection, query: str | bytes) -> None:
    """Write one query frame using the connection's current token.

    The caller advances ``conn.token`` before calling this.

    Raises:
        ArgumentError: If the query is too large to frame
        TransportError: On any write or flush failure
    """
    payload = query.encode("utf-8") if isinstance(query, str) else query
    frame = encode_frame(conn.token, payload)
    try:
        conn.stream.write(frame)
        conn.stream.flush()
    except OSError as e:
        conn.broken = True
        raise TransportError(f"Failed to write query: {e}") from e
    except BaseException:
        # Partially written frame: the stream position is unknown.
        conn.broken = True
        raise


def read_frame(conn: Connection) -> tuple[int, bytes]:
    """Read one response frame.

    Returns:
        Tuple of (response token, raw payload bytes)

    Raises:
        TransportError: On any read failure or short read
    """
    try:
        token, length = decode_header(_read_exact(conn.stream, HEADER_SIZE))
        payload = _read_exact(conn.stream, length)
    except (OSError, EOFError) as e:
        conn.broken = True
        raise TransportError(f"Failed to read response: {e}") from e
    except BaseException:
        # Partially read frame: the next read would return this response.
        conn.broken = True
        raise
    if token != conn.token:
        logger.debug("Response token %d does not match query token %d", token, conn.token)
    return token, payload


def read_response(conn: Connection) -> bytes:
    """Read one response frame and return its raw payload."""
    _, payload = read_frame(conn)
    return payload
