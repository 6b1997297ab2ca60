"""Builds an IndexFinder from application settings (config.py)."""

from __future__ import annotations

import config
from finder.executor import ClickHouseExecutor, DuckDBExecutor, QueryExecutor
from finder.index import IndexFinder

EXECUTORS: dict[str, type[QueryExecutor]] = {
    "clickhouse": ClickHouseExecutor,
    "duckdb": DuckDBExecutor,
}


def create_finder(backend: str | None = None) -> IndexFinder:
    """
    IndexFinder for the configured (or given) backend.

    Raises:
        KeyError: Unknown backend
    """
    backend = backend or config.INDEX_BACKEND
    if backend not in EXECUTORS:
        raise KeyError(f"Unknown backend '{backend}'. Available: {list(EXECUTORS)}")

    address = config.DUCKDB_PATH if backend == "duckdb" else config.CLICKHOUSE_URL
    return IndexFinder(
        address=address,
        table=config.INDEX_TABLE,
        daily_enabled=config.INDEX_USE_DAILY,
        reverse=config.INDEX_REVERSE,
        reverses=config.INDEX_REVERSES,
        options=config.QUERY_OPTIONS,
        executor=EXECUTORS[backend](),
    )
