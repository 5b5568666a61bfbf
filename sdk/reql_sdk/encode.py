"""
Argument encoding for ReQL terms.

Turns a Python argument into the (positional, options) JSON pair that the
term builder splices into a term node:
- bool, int, float: minimal JSON literal
- str: quoted and escaped JSON string
- dict, list, tuple, None: JSON document after array wrapping
- Term (anything with a build() method): its canonical term JSON
- WithOpts: positional value plus an options object

Invariants:
    - Raw arrays in data are always sent as [MAKE_ARRAY, [...]]
    - Options are always a JSON object
    - Encoding never touches the network

Example:
    >>> encode_arg([1, 2, 3])
    EncodedArg(positional='[2,[1,2,3]]', options=None)
    >>> encode_arg(with_opts("users", durability="soft"))
    EncodedArg(positional='"users"', options='{"durability":"soft"}')
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from .errors import ArgumentError, JsonError
from .ql2 import TermType

_OPTIONS_MESSAGE = (
    "Only objects are allowed as function options. "
    "Pass optional arguments as keyword arguments or a dict."
)


@runtime_checkable
class TermLike(Protocol):
    """Anything that already renders to canonical term JSON."""

    def build(self) -> str: ...


@dataclass(frozen=True)
class EncodedArg:
    """Encoded argument.

    Attributes:
        positional: JSON for the args slot, if any
        options: JSON object for the options slot, if any
    """

    positional: str | None = None
    options: str | None = None


@dataclass(frozen=True)
class WithOpts:
    """An argument paired with an options object.

    Attributes:
        value: Positional argument
        options: Options; must be a mapping when encoded
    """

    value: Any
    options: Any = field(default_factory=dict)


def with_opts(value: Any, options: Mapping[str, Any] | None = None, **kwargs: Any) -> WithOpts:
    """Pair a value with options given as a mapping and/or keyword arguments."""
    merged = dict(options or {})
    merged.update(kwargs)
    return WithOpts(value, merged)


def merge_opts(value: Any, options: Mapping[str, Any]) -> WithOpts:
    """Attach options to a value, merging with options it already carries.

    Keys in ``options`` win over keys already on a WithOpts value.

    Raises:
        ArgumentError: If the existing options are not a mapping
    """
    if isinstance(value, WithOpts):
        if not isinstance(value.options, Mapping):
            raise ArgumentError(_OPTIONS_MESSAGE)
        return WithOpts(value.value, {**value.options, **options})
    return WithOpts(value, dict(options))


def dumps(value: Any) -> str:
    """Serialize to compact JSON, raising JsonError on failure."""
    try:
        return json.dumps(value, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as e:
        raise JsonError(f"Cannot serialize {type(value).__name__}: {e}", value) from e


def wrap_arrays(value: Any) -> Any:
    """Rewrite every raw array in a JSON document as a MAKE_ARRAY term.

    Objects keep their keys and have each value normalized. Scalars are
    returned unchanged. Embedded terms are inlined as parsed term JSON and
    are not wrapped again.
    """
    if isinstance(value, TermLike):
        return json.loads(value.build())
    if isinstance(value, (list, tuple)):
        return [int(TermType.MAKE_ARRAY), [wrap_arrays(v) for v in value]]
    if isinstance(value, Mapping):
        return {k: wrap_arrays(v) for k, v in value.items()}
    return value


def encode_arg(value: Any) -> EncodedArg:
    """Encode a single argument.

    Args:
        value: Argument of any supported kind

    Returns:
        EncodedArg with the positional JSON and optional options JSON

    Raises:
        JsonError: If the value cannot be serialized
        ArgumentError: If a WithOpts carries non-object options
    """
    if isinstance(value, WithOpts):
        if not isinstance(value.options, Mapping):
            raise ArgumentError(_OPTIONS_MESSAGE)
        # Nested pairs keep only the outer positional/options.
        positional = encode_arg(value.value).positional
        options = encode_arg(dict(value.options)).positional
        return EncodedArg(positional, options)

    if isinstance(value, TermLike):
        return EncodedArg(value.build())

    if isinstance(value, bool):
        return EncodedArg("true" if value else "false")

    if isinstance(value, int):
        return EncodedArg(str(int(value)))

    if isinstance(value, (float, str)):
        return EncodedArg(dumps(value))

    return EncodedArg(dumps(wrap_arrays(value)))
