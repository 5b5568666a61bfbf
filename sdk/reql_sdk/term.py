"""
Term building and the fluent query DSL.

A term is a node of the query tree, rendered as canonical JSON text
``[opcode,[args...],{options}]``. Terms are built eagerly: every fluent call
encodes its argument immediately, so a bad argument raises at the call that
introduced it and nothing reaches the network.

Invariants:
    - A term is a JSON array whose first element is the integer opcode
    - The args slot is always present, possibly as []
    - The options slot is omitted when there are no options
    - Terms are immutable values; chaining returns a new Term

Example:
    >>> from reql_sdk import r
    >>> r.db("test").table_create("users").build()
    '[60,[[14,["test"]],"users"]]'
    >>> r.table("users").get(42).run()
"""

from __future__ import annotations

from typing import Any

from .config import get_config
from .encode import EncodedArg, TermLike, encode_arg, merge_opts
from .engine import submit
from .ql2 import QueryType, TermType
from .query import wrap_query


class _NoArg:
    """Marker for "no argument" (None is a valid JSON null argument)."""

    def __repr__(self) -> str:
        return "NO_ARG"


NO_ARG: Any = _NoArg()


def wrap_term(opcode: int, arg: Any = NO_ARG, sub_term: str | None = None) -> str:
    """Render a term node.

    Args:
        opcode: Term opcode
        arg: Optional argument, encoded with encode_arg()
        sub_term: Optional already-built term placed first in args

    Returns:
        Canonical term JSON

    Raises:
        JsonError: If the argument cannot be serialized
        ArgumentError: If the argument carries non-object options
    """
    encoded = EncodedArg()
    if arg is not NO_ARG:
        encoded = encode_arg(arg)

    parts = [f"[{int(opcode)},["]
    if sub_term is not None:
        parts.append(sub_term)
        if arg is not NO_ARG:
            parts.append(",")
    if encoded.positional is not None:
        parts.append(encoded.positional)
    parts.append("]")
    if encoded.options is not None:
        parts.append(",")
        parts.append(encoded.options)
    parts.append("]")
    return "".join(parts)


class Term:
    """A built query term supporting fluent chaining.

    Each chaining method wraps this term as the first argument of a new
    term. Keyword arguments become the new term's options object.
    """

    __slots__ = ("_json",)

    def __init__(self, json_text: str) -> None:
        self._json = json_text

    def build(self) -> str:
        """Return the canonical term JSON."""
        return self._json

    def __str__(self) -> str:
        return self._json

    def __repr__(self) -> str:
        return f"Term({self._json})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Term):
            return self._json == other._json
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._json)

    def _chain(self, opcode: TermType, arg: Any = NO_ARG, opts: dict[str, Any] | None = None) -> Term:
        if opts and arg is not NO_ARG:
            arg = merge_opts(arg, opts)
        return Term(wrap_term(opcode, arg, self._json))

    # Database and table administration

    def table_create(self, name: Any, **opts: Any) -> Term:
        return self._chain(TermType.TABLE_CREATE, name, opts)

    def table_drop(self, name: Any, **opts: Any) -> Term:
        return self._chain(TermType.TABLE_DROP, name, opts)

    def table(self, name: Any, **opts: Any) -> Term:
        return self._chain(TermType.TABLE, name, opts)

    def index_create(self, name: Any, **opts: Any) -> Term:
        return self._chain(TermType.INDEX_CREATE, name, opts)

    def index_drop(self, name: Any, **opts: Any) -> Term:
        return self._chain(TermType.INDEX_DROP, name, opts)

    # Writes

    def insert(self, documents: Any, **opts: Any) -> Term:
        """Insert one document (dict) or many (list of dicts).

        Options such as ``conflict="replace"`` or ``durability="soft"`` are
        passed as keyword arguments.
        """
        return self._chain(TermType.INSERT, documents, opts)

    def update(self, patch: Any, **opts: Any) -> Term:
        return self._chain(TermType.UPDATE, patch, opts)

    def replace(self, document: Any, **opts: Any) -> Term:
        return self._chain(TermType.REPLACE, document, opts)

    def delete(self) -> Term:
        return self._chain(TermType.DELETE)

    # Selection and transformation

    def get(self, key: Any) -> Term:
        return self._chain(TermType.GET, key)

    def get_all(self, key: Any, **opts: Any) -> Term:
        """Select documents by key, e.g. ``get_all("x", index="name")``."""
        return self._chain(TermType.GET_ALL, key, opts)

    def filter(self, predicate: Any, **opts: Any) -> Term:
        return self._chain(TermType.FILTER, predicate, opts)

    def order_by(self, key: Any, **opts: Any) -> Term:
        return self._chain(TermType.ORDER_BY, key, opts)

    def without(self, fields: Any) -> Term:
        return self._chain(TermType.WITHOUT, fields)

    def contains(self, value: Any) -> Term:
        return self._chain(TermType.CONTAINS, value)

    def limit(self, n: Any) -> Term:
        return self._chain(TermType.LIMIT, n)

    def run(self, retries: int | None = None, global_opts: dict[str, Any] | None = None) -> bytes:
        """Submit this term as a START query.

        Args:
            retries: Attempt budget (defaults to the configured value)
            global_opts: Optional global query options object

        Returns:
            Raw response payload
        """
        query = wrap_query(QueryType.START, self._json, global_opts)
        return submit(query, retries=retries)


class RqlTopLevel:
    """The ``r`` namespace: entry points for building queries."""

    def expr(self, value: Any) -> Term:
        """Wrap a Python value as a term.

        Raw arrays are turned into MAKE_ARRAY terms; options on a WithOpts
        value are dropped.
        """
        if isinstance(value, TermLike):
            return Term(value.build())
        encoded = encode_arg(value)
        return Term(encoded.positional or "")

    def db(self, name: Any) -> Term:
        return Term(wrap_term(TermType.DB, name))

    def db_create(self, name: Any) -> Term:
        return Term(wrap_term(TermType.DB_CREATE, name))

    def db_drop(self, name: Any) -> Term:
        return Term(wrap_term(TermType.DB_DROP, name))

    def table(self, name: Any, **opts: Any) -> Term:
        """Table in the configured default database."""
        return self.db(get_config().db).table(name, **opts)

    def table_create(self, name: Any, **opts: Any) -> Term:
        """Create a table in the configured default database."""
        return self.db(get_config().db).table_create(name, **opts)

    def table_drop(self, name: Any) -> Term:
        """Drop a table from the configured default database."""
        return self.db(get_config().db).table_drop(name)

    def object(self, **fields: Any) -> dict[str, Any]:
        return dict(fields)

    def array(self, *items: Any) -> list[Any]:
        return list(items)


r = RqlTopLevel()
