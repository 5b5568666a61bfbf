"""
Query submission engine.

Sends one query envelope and returns the raw response payload, retrying
transient failures up to the retry budget. Two flags carry state between
attempts:

- connect: the transport is suspect, take a fresh connection first
- write: (re)send the query; cleared when a write reached the wire but the
  read failed, so the next attempt only reads

Per attempt: acquire -> advance token -> write (if write) -> read -> classify.
A response reporting a write that could not be performed because the
primary replica was unavailable sets write again and retries.

Invariants:
    - At most `retries` attempts are made
    - The last observed error is the one raised on exhaustion
    - A broken connection is never reused or returned to the pool
    - Build errors never reach this module; it only sees finished envelopes
"""

from __future__ import annotations

import logging

from .config import get_config
from .connection import Connection
from .errors import ArgumentError, AvailabilityError, ConnectionError, TransportError
from .framing import read_response, write_query
from .pool import ConnectionPool, get_pool
from .response import is_write_replayable

logger = logging.getLogger(__name__)


def submit(
    query: str,
    *,
    retries: int | None = None,
    pool: ConnectionPool | None = None,
) -> bytes:
    """Submit a query envelope and return the raw response payload.

    Args:
        query: Canonical query JSON (see query.wrap_query)
        retries: Attempt budget; defaults to the configured value
        pool: Connection pool; defaults to the shared pool

    Returns:
        Raw response payload bytes

    Raises:
        ConnectionError: If no connection could be acquired on the last attempt
        TransportError: If the last attempt failed on the socket
        AvailabilityError: If the last attempt hit an unavailable primary replica
        ArgumentError: If retries < 1 or the query is too large to frame
    """
    if retries is None:
        retries = get_config().retries
    if retries < 1:
        raise ArgumentError(f"retries must be >= 1, got {retries}")
    if pool is None:
        pool = get_pool()

    payload = query.encode("utf-8")
    logger.debug("Submitting query: %s", query)

    conn: Connection | None = None
    write = True
    connect = False
    try:
        for attempt in range(retries):
            last = attempt == retries - 1

            if connect or conn is None or conn.broken:
                if conn is not None:
                    pool.discard(conn)
                    conn = None
                logger.debug("Getting connection (attempt %d/%d)", attempt + 1, retries)
                try:
                    conn = pool.acquire()
                except ConnectionError as e:
                    if last:
                        raise
                    logger.debug("Failed getting a connection: %s. Retrying...", e.message)
                    connect = True
                    continue
                connect = False

            conn.next_token()

            if write:
                try:
                    write_query(conn, payload)
                except TransportError as e:
                    connect = True
                    if last:
                        raise
                    logger.debug("Failed to write query: %s. Retrying...", e.message)
                    continue
                logger.debug("Query written with token %d", conn.token)

            try:
                response = read_response(conn)
            except TransportError as e:
                # The query may have reached the server; only read next time.
                write = False
                if last:
                    raise
                logger.debug("Failed to read response: %s. Retrying...", e.message)
                continue

            if is_write_replayable(response):
                write = True
                if last:
                    raise AvailabilityError("Not available", payload=response)
                logger.debug("Write operation failed on unavailable replica. Retrying...")
                continue

            logger.debug("Response read (%d bytes)", len(response))
            return response
    finally:
        if conn is not None:
            if conn.broken:
                pool.discard(conn)
            else:
                pool.release(conn)

    # Unreachable: the final attempt either returns or raises.
    raise AssertionError("retry loop exited without a result")
