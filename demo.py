#!/usr/bin/env python3
"""
ReQL SDK Demo - Shows query building and, optionally, submission.

Without a server the demo prints the JSON each query is sent as. Set
REQL_DEMO_RUN=1 (plus REQL_HOST/REQL_PORT as needed) to also run them.
"""

import logging
import os

from reql_sdk import QueryType, ReqlError, configure, parse_response, r, wrap_query


def show(label, term):
    print(f"{label}")
    print(f"  term:  {term.build()}")
    print(f"  query: {wrap_query(QueryType.START, term.build())}")


def main():
    print("=" * 60)
    print("ReQL SDK Demo - Query building")
    print("=" * 60)
    print()

    configure(db="demo")

    queries = [
        ("[Step 1] Create database", r.db_create("demo")),
        ("[Step 2] Create table", r.table_create("users")),
        ("[Step 3] Create index", r.table("users").index_create("email")),
        (
            "[Step 4] Insert documents",
            r.table("users").insert(
                [
                    {"id": 1, "email": "alice@example.com", "tags": ["admin"]},
                    {"id": 2, "email": "bob@example.com", "tags": []},
                ],
                conflict="replace",
            ),
        ),
        ("[Step 5] Get by key", r.table("users").get(1)),
        ("[Step 6] Get by index", r.table("users").get_all("bob@example.com", index="email")),
        ("[Step 7] Filter and limit", r.table("users").filter({"tags": []}).limit(10)),
        ("[Step 8] Update", r.table("users").get(2).update({"tags": ["member"]})),
        ("[Step 9] Delete", r.table("users").get(2).delete()),
    ]

    for label, term in queries:
        show(label, term)

    if os.environ.get("REQL_DEMO_RUN") != "1":
        return

    logging.basicConfig(level=logging.DEBUG)
    print()
    print("Running against the server...")
    for label, term in queries:
        try:
            resp = parse_response(term.run())
            resp.raise_for_error()
            print(f"{label}: {resp.results}")
        except ReqlError as e:
            print(f"{label}: FAILED [{e.code}] {e.message}")


if __name__ == "__main__":
    main()
