"""
Error types for the ReQL SDK.

This module defines all exception types raised by the SDK:
- ReqlError: Base exception
- DriverError: Query could not be built (JsonError, ArgumentError)
- ConnectionError: Connect or handshake failure
- TransportError: Socket read/write failure
- AvailabilityError: Write kept failing on an unavailable primary replica
- ResponseError: Server answered with an error response

Invariants:
    - All errors inherit from ReqlError
    - Build errors are raised before any I/O happens
    - TransportError always chains the underlying OSError
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ReqlError(Exception):
    """Base exception for all ReQL SDK errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "REQL_ERROR"
        self.details = details or {}


class DriverError(ReqlError):
    """A query could not be built on the client side."""


class JsonError(DriverError):
    """An argument could not be serialized to JSON.

    Raised when:
    - Value is of a type JSON cannot represent
    - Float is NaN or infinite
    """

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(
            message,
            code="JSON_ERROR",
            details={"type": type(value).__name__},
        )
        self.value = value


class ArgumentError(DriverError):
    """The driver was used incorrectly.

    Raised when:
    - Options passed with an argument are not a JSON object
    - Payload is too large to frame
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code="ARGUMENT_ERROR")


class ConnectionError(ReqlError):
    """Failed to connect to the server.

    Raised when:
    - Server is unreachable
    - Connection times out
    - Handshake or authentication fails
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details={"address": address},
        )
        self.address = address


class TransportError(ReqlError):
    """Reading from or writing to a connection failed.

    The connection involved is always marked broken before this is raised.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, code="IO_ERROR")


class AvailabilityError(ReqlError):
    """A write kept failing because the primary replica was unavailable.

    Only raised after the retry budget is exhausted.
    """

    def __init__(self, message: str, payload: Optional[bytes] = None) -> None:
        super().__init__(message, code="OP_FAILED")
        self.payload = payload


class ResponseError(ReqlError):
    """The server answered with an error response.

    Attributes:
        response_type: Response type integer ("t")
        error_type: Error code integer ("e"), if the server sent one
    """

    def __init__(
        self,
        message: str,
        response_type: int,
        error_type: Optional[int] = None,
        backtrace: Optional[list] = None,
    ) -> None:
        super().__init__(
            message,
            code="RESPONSE_ERROR",
            details={
                "response_type": response_type,
                "error_type": error_type,
                "backtrace": backtrace or [],
            },
        )
        self.response_type = response_type
        self.error_type = error_type
        self.backtrace = backtrace or []
