"""
Wire enumerations for the ReQL JSON protocol.

Values mirror the server's ql2.proto definition file and must not be
renumbered. Only the subset of term types the SDK builds is listed.

Invariants:
    - Every TermType value is a small non-negative integer
    - QueryType.START is the only type the submission engine issues itself
"""

from __future__ import annotations

from enum import IntEnum


class TermType(IntEnum):
    """Term opcodes."""

    DATUM = 1
    MAKE_ARRAY = 2
    MAKE_OBJ = 3
    DB = 14
    TABLE = 15
    GET = 16
    WITHOUT = 34
    FILTER = 39
    ORDER_BY = 41
    UPDATE = 53
    DELETE = 54
    REPLACE = 55
    INSERT = 56
    DB_CREATE = 57
    DB_DROP = 58
    TABLE_CREATE = 60
    TABLE_DROP = 61
    LIMIT = 71
    INDEX_CREATE = 75
    INDEX_DROP = 76
    GET_ALL = 78
    CONTAINS = 93

    @classmethod
    def from_str(cls, value: str) -> TermType:
        """Look up a term type by name (case-insensitive)."""
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown term type: {value}") from None


class QueryType(IntEnum):
    """Top-level query types."""

    START = 1
    CONTINUE = 2
    STOP = 3
    NOREPLY_WAIT = 4
    SERVER_INFO = 5


class ResponseType(IntEnum):
    """Response envelope "t" values."""

    SUCCESS_ATOM = 1
    SUCCESS_SEQUENCE = 2
    SUCCESS_PARTIAL = 3
    WAIT_COMPLETE = 4
    SERVER_INFO = 5
    CLIENT_ERROR = 16
    COMPILE_ERROR = 17
    RUNTIME_ERROR = 18

    @property
    def is_error(self) -> bool:
        return self >= ResponseType.CLIENT_ERROR


class ErrorType(IntEnum):
    """Runtime error "e" values."""

    INTERNAL = 1000000
    RESOURCE_LIMIT = 2000000
    QUERY_LOGIC = 3000000
    NON_EXISTENCE = 3100000
    OP_FAILED = 4100000
    OP_INDETERMINATE = 4200000
    USER = 5000000
    PERMISSION_ERROR = 6000000
