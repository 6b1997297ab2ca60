"""
Finder — metric path lookup through a forward/reversed index table.

Usage:
    from finder import IndexFinder

    finder = IndexFinder("http://localhost:8123/", "graphite_index")
    query = finder.query("servers.*.cpu.user")
    query.execute(from_, until)
    query.series()

Public classes:
    - IndexFinder: static configuration, creates queries
    - IndexQuery: one pattern, executed once
    - Direction, ReverseRule, QueryOptions: configuration types
    - ClickHouseExecutor, DuckDBExecutor: query backends
"""

from .types import Direction, ReverseRule, QueryOptions
from .executor import (
    QueryExecutor,
    ClickHouseExecutor,
    DuckDBExecutor,
    QueryError,
    QueryCancelled,
    QueryTimeout,
    QueryConnectionError,
    QueryRejected,
)
from .index import Finder, IndexFinder, IndexQuery, QueryStateError

__all__ = [
    # Finder
    "Finder",
    "IndexFinder",
    "IndexQuery",
    "QueryStateError",
    # Types
    "Direction",
    "ReverseRule",
    "QueryOptions",
    # Executors
    "QueryExecutor",
    "ClickHouseExecutor",
    "DuckDBExecutor",
    "QueryError",
    "QueryCancelled",
    "QueryTimeout",
    "QueryConnectionError",
    "QueryRejected",
]
