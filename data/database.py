"""Database management"""

import duckdb
from pathlib import Path

from finder.where import validate_table


def init_database(db_path: str = "data/index.duckdb", table: str = "graphite_index") -> None:
    """Initialize database with the index table."""

    validate_table(table)
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    with duckdb.connect(db_path) as conn:
        # Same columns as the ClickHouse index table; duplicates are allowed,
        # queries deduplicate with GROUP BY Path
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {table} (
                Date DATE NOT NULL,
                Level UINTEGER NOT NULL,
                Path VARCHAR NOT NULL,
                Version UINTEGER NOT NULL
            )
        """)

        conn.execute(f"""
            CREATE INDEX IF NOT EXISTS idx_{table.replace('.', '_')}_level_path
            ON {table}(Level, Path)
        """)


def get_connection(db_path: str = "data/index.duckdb", read_only: bool = False):
    """Get database connection."""
    return duckdb.connect(db_path, read_only=read_only)
