"""Index loading utilities

Writes metric paths into the index table using the layout the finder
queries (constants.py):

    partition        Date            Level              Path
    tree             1970-02-12      n + 20000          a.  a.b.  a.b.c
    tree_reversed    1970-02-12      n + 30000          c.b.a
    daily            day             n                  a.b.c
    daily_reversed   day             n + 10000          c.b.a

Directory nodes ("a.", "a.b.") only exist in the forward tree.
"""

import logging
import time
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from constants import (
    DEFAULT_TREE_DATE,
    PARTITIONS,
    PATH_SEPARATOR,
    REVERSE_LEVEL_OFFSET,
    REVERSE_TREE_LEVEL_OFFSET,
    TREE_LEVEL_OFFSET,
)
from finder.reverse import reverse_string
from .database import init_database, get_connection

logger = logging.getLogger(__name__)

COLUMNS = ["Date", "Level", "Path", "Version"]


def index_rows(
    paths: Iterable[str],
    days: Optional[Iterable[date]] = None,
    version: Optional[int] = None,
) -> pd.DataFrame:
    """
    Build index rows for metric paths.

    Args:
        paths: Leaf metric paths ("a.b.c")
        days: Days the metrics were seen; no daily rows if None
        version: Row version, load time by default

    Returns:
        DataFrame with columns Date, Level, Path, Version
    """
    version = int(time.time()) if version is None else version
    tree_date = date.fromisoformat(DEFAULT_TREE_DATE)
    days = list(days or [])

    rows = []
    directories = set()
    for path in paths:
        path = path.strip()
        if not path or path.endswith(PATH_SEPARATOR):
            continue

        nodes = path.split(PATH_SEPARATOR)
        level = len(nodes)
        reversed_path = reverse_string(path)

        for depth in range(1, level):
            directories.add((depth, PATH_SEPARATOR.join(nodes[:depth]) + PATH_SEPARATOR))

        rows.append((tree_date, level + TREE_LEVEL_OFFSET, path, version))
        rows.append((tree_date, level + REVERSE_TREE_LEVEL_OFFSET, reversed_path, version))
        for day in days:
            rows.append((day, level, path, version))
            rows.append((day, level + REVERSE_LEVEL_OFFSET, reversed_path, version))

    for depth, directory in sorted(directories):
        rows.append((tree_date, depth + TREE_LEVEL_OFFSET, directory, version))

    return pd.DataFrame(rows, columns=COLUMNS)


def load_paths(
    paths: Iterable[str],
    db_path: str = "data/index.duckdb",
    table: str = "graphite_index",
    days: Optional[Iterable[date]] = None,
) -> int:
    """
    Load metric paths into the index table.

    Returns:
        Number of rows written
    """
    # Initialize database if needed
    init_database(db_path, table)

    df = index_rows(paths, days)
    if df.empty:
        return 0
    df["Date"] = pd.to_datetime(df["Date"])

    with get_connection(db_path) as conn:
        conn.execute(f"""
            INSERT INTO {table}
            SELECT Date::DATE, Level::UINTEGER, Path, Version::UINTEGER
            FROM df
        """)

    logger.info(f"Loaded {len(df)} index rows into {table}")
    return len(df)


def load_file(
    file_path: str,
    db_path: str = "data/index.duckdb",
    table: str = "graphite_index",
    days: Optional[Iterable[date]] = None,
) -> int:
    """
    Load a file with one metric path per line.

    Expected format:
        servers.web1.cpu.user
        servers.web1.cpu.system
    """
    paths = Path(file_path).read_text(encoding="utf-8").splitlines()
    return load_paths(paths, db_path, table, days)


def get_index_info(db_path: str = "data/index.duckdb", table: str = "graphite_index") -> pd.DataFrame:
    """Get row counts per index partition."""

    with get_connection(db_path, read_only=True) as conn:
        df = conn.execute(f"""
            SELECT
                Level // {TREE_LEVEL_OFFSET // 2} * {TREE_LEVEL_OFFSET // 2} as level_offset,
                COUNT(*) as row_count,
                COUNT(DISTINCT Path) as path_count,
                MIN(Date) as start_date,
                MAX(Date) as end_date
            FROM {table}
            GROUP BY level_offset
            ORDER BY level_offset
        """).df()

    df.insert(0, "partition", df["level_offset"].map(PARTITIONS))
    return df
