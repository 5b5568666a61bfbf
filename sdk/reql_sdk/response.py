"""
Response envelope parsing and classification.

Responses are JSON objects ``{"t": type, "e"?: error, "r": [...], "b"?: [...]}``.
The submission engine hands back raw payload bytes; this module turns them
into a Response when the caller wants to inspect them, and decides whether
a failed write may be safely resent.

Invariants:
    - Only (RUNTIME_ERROR, OP_FAILED) responses whose message reports a
      write that was not performed are write-replayable
    - Payloads that are not valid response JSON are never replayable
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .errors import ResponseError
from .ql2 import ErrorType, ResponseType

REPLAYABLE_ERRORS: frozenset[tuple[int, int]] = frozenset(
    {(ResponseType.RUNTIME_ERROR, ErrorType.OP_FAILED)}
)
# OP_FAILED also covers missing tables and databases, which must not be retried.
REPLAYABLE_MESSAGE_PREFIXES: tuple[str, ...] = ("Cannot perform write:",)


@dataclass
class Response:
    """A decoded response envelope.

    Attributes:
        type: Response type ("t")
        results: Result values ("r")
        error_type: Error code ("e") for error responses
        backtrace: Error backtrace ("b")
        notes: Response notes ("n")
    """

    type: int
    results: list[Any] = field(default_factory=list)
    error_type: int | None = None
    backtrace: list[Any] = field(default_factory=list)
    notes: list[Any] = field(default_factory=list)

    @property
    def is_error(self) -> bool:
        return self.type >= ResponseType.CLIENT_ERROR

    @property
    def message(self) -> str | None:
        """First result as text, which is where errors carry their message."""
        if self.results and isinstance(self.results[0], str):
            return self.results[0]
        return None

    def raise_for_error(self) -> None:
        """Raise ResponseError if this is an error response."""
        if self.is_error:
            raise ResponseError(
                self.message or f"Server error response {self.type}",
                response_type=self.type,
                error_type=self.error_type,
                backtrace=self.backtrace,
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Response:
        return cls(
            type=data["t"],
            results=data.get("r", []),
            error_type=data.get("e"),
            backtrace=data.get("b", []),
            notes=data.get("n", []),
        )


def _decode(payload: bytes | str) -> dict[str, Any]:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    data = json.loads(payload)
    if not isinstance(data, dict) or not isinstance(data.get("t"), int):
        raise ValueError("response is not an envelope object")
    return data


def parse_response(payload: bytes | str) -> Response:
    """Decode a raw response payload.

    Raises:
        ValueError: If the payload is not a response envelope
    """
    return Response.from_dict(_decode(payload))


def is_write_replayable(payload: bytes | str) -> bool:
    """Whether the response reports a write that was not performed and may be resent."""
    try:
        data = _decode(payload)
    except ValueError:  # includes JSONDecodeError and UnicodeDecodeError
        return False
    if (data["t"], data.get("e")) not in REPLAYABLE_ERRORS:
        return False
    results = data.get("r") or [None]
    message = results[0] if isinstance(results, list) else None
    return isinstance(message, str) and message.startswith(REPLAYABLE_MESSAGE_PREFIXES)
