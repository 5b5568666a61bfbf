"""
Unit tests for query envelopes.
"""

import json

from reql_sdk.ql2 import QueryType
from reql_sdk.query import wrap_query
from reql_sdk.term import r


class TestWrapQuery:
    """Tests for wrap_query."""

    def test_start_with_term(self):
        term = r.db("test").table_create("users").build()
        assert wrap_query(QueryType.START, term) == '[1,[60,[[14,["test"]],"users"]]]'

    def test_type_only(self):
        assert wrap_query(QueryType.SERVER_INFO) == "[5]"
        assert wrap_query(QueryType.NOREPLY_WAIT) == "[4]"

    def test_global_options_mapping(self):
        query = wrap_query(QueryType.START, "[14,[]]", {"db": r.db("app"), "profile": True})

        assert json.loads(query) == [1, [14, []], {"db": [14, ["app"]], "profile": True}]

    def test_global_options_prerendered(self):
        assert wrap_query(QueryType.START, "[14,[]]", '{"noreply":true}') == '[1,[14,[]],{"noreply":true}]'

    def test_query_type_values(self):
        assert [q.value for q in QueryType] == [1, 2, 3, 4, 5]
