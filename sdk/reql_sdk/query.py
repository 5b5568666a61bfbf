"""
Query envelope construction.

The top-level message is ``[query_type, term?, global_opts?]``. Only START
carries a term; CONTINUE, STOP and NOREPLY_WAIT refer to an existing query
by token and SERVER_INFO stands alone.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .encode import dumps, wrap_arrays
from .ql2 import QueryType


def wrap_query(
    query_type: QueryType | int,
    term: str | None = None,
    opts: Mapping[str, Any] | str | None = None,
) -> str:
    """Render a query envelope.

    Args:
        query_type: Query type
        term: Canonical term JSON, if the query carries one
        opts: Global options, either a mapping or pre-rendered JSON object

    Returns:
        Canonical query JSON
    """
    parts = [f"[{int(query_type)}"]
    if term is not None:
        parts.append(f",{term}")
    if opts is not None:
        if not isinstance(opts, str):
            opts = dumps(wrap_arrays(opts))
        parts.append(f",{opts}")
    parts.append("]")
    return "".join(parts)
