"""
ReQL Python SDK - Client driver for ReQL JSON-protocol databases.

This SDK builds queries with a fluent DSL and submits them over the
binary-framed JSON protocol:
- r: Query builder entry point (db, table, expr, ...)
- Term: Built query term, chainable and runnable
- submit: Retrying submission engine returning raw response payloads
- configure / get_config: Process-wide session settings
- parse_response: Decode a raw payload into a Response

Example:
    >>> from reql_sdk import configure, parse_response, r
    >>>
    >>> configure(host="localhost", db="test")
    >>> r.db("test").table_create("users").run()
    >>> r.table("users").insert({"id": 42, "tags": ["a", "b"]}).run()
    >>> resp = parse_response(r.table("users").get(42).run())
    >>> resp.raise_for_error()
    >>> resp.results
    [{'id': 42, 'tags': ['a', 'b']}]

Invariants:
    - Queries are fully built before any I/O
    - One query in flight per connection
    - Broken connections are never reused

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import ConnectOpts, configure, get_config, reset_config
from .connection import Connection, connect
from .encode import EncodedArg, WithOpts, encode_arg, merge_opts, with_opts, wrap_arrays
from .engine import submit
from .errors import (
    ArgumentError,
    AvailabilityError,
    ConnectionError,
    DriverError,
    JsonError,
    ReqlError,
    ResponseError,
    TransportError,
)
from .pool import ConnectionPool, get_pool, reset_pool, set_connection_factory
from .ql2 import ErrorType, QueryType, ResponseType, TermType
from .query import wrap_query
from .response import Response, is_write_replayable, parse_response
from .term import RqlTopLevel, Term, r, wrap_term

__all__ = [
    # Version
    "__version__",
    # Query building
    "r",
    "RqlTopLevel",
    "Term",
    "wrap_term",
    "wrap_query",
    "encode_arg",
    "wrap_arrays",
    "with_opts",
    "merge_opts",
    "WithOpts",
    "EncodedArg",
    # Protocol enums
    "TermType",
    "QueryType",
    "ResponseType",
    "ErrorType",
    # Session
    "ConnectOpts",
    "configure",
    "get_config",
    "reset_config",
    # Connections
    "Connection",
    "connect",
    "ConnectionPool",
    "get_pool",
    "reset_pool",
    "set_connection_factory",
    # Submission
    "submit",
    "Response",
    "parse_response",
    "is_write_replayable",
    # Errors
    "ReqlError",
    "DriverError",
    "JsonError",
    "ArgumentError",
    "ConnectionError",
    "TransportError",
    "AvailabilityError",
    "ResponseError",
]
