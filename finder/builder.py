"""
Index Query Builder — SQL for one pattern against the index table.

Architecture:
    pattern + Direction + time range → build_index_query() → IndexQuerySQL

The level predicate selects the partition of the index:

    direction   daily   offset
    REVERSED    yes     REVERSE_LEVEL_OFFSET       (10000)
    FORWARD     no      TREE_LEVEL_OFFSET          (20000)
    REVERSED    no      REVERSE_TREE_LEVEL_OFFSET  (30000)
    FORWARD     yes     0

Offsets must match what the loader wrote (data/loader.py), otherwise
the query returns no rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from constants import (
    DEFAULT_TREE_DATE,
    PATH_SEPARATOR,
    REVERSE_LEVEL_OFFSET,
    REVERSE_TREE_LEVEL_OFFSET,
    TREE_LEVEL_OFFSET,
)
from finder.reverse import reverse_string
from finder.types import Direction
from finder.where import Where, eq, tree_glob, validate_table


@dataclass(frozen=True)
class IndexQuerySQL:
    """
    Built query and the decisions behind it.

    Attributes:
        sql: Final SELECT
        where: Rendered WHERE predicate
        pattern: Pattern as queried (reversed for REVERSED)
        level: Segment count of the pattern
        level_offset: Partition offset added to level
        use_daily: Whether the daily partition is read
    """

    sql: str
    where: str
    pattern: str
    level: int
    level_offset: int
    use_daily: bool


def use_daily(daily_enabled: bool, from_: int, until: int) -> bool:
    return daily_enabled and from_ > 0 and until > 0


def level_offset(direction: Direction, daily: bool) -> int:
    if direction == Direction.AUTO:
        raise ValueError("Direction must be resolved before building a query")
    if daily:
        return REVERSE_LEVEL_OFFSET if direction == Direction.REVERSED else 0
    if direction == Direction.REVERSED:
        return REVERSE_TREE_LEVEL_OFFSET
    return TREE_LEVEL_OFFSET


def format_date(timestamp: int) -> str:
    """Unix timestamp → YYYY-MM-DD (UTC)."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def build_index_query(
    pattern: str,
    direction: Direction,
    daily_enabled: bool,
    from_: int,
    until: int,
    table: str,
) -> IndexQuerySQL:
    """
    Builds the index query.

    Args:
        pattern: Glob pattern in natural order
        direction: Resolved direction (FORWARD or REVERSED)
        daily_enabled: INDEX_USE_DAILY
        from_, until: Unix timestamps, 0 means "not set"
        table: Index table name

    Returns:
        IndexQuerySQL

    Raises:
        ValidationError: If the table name is invalid
    """
    validate_table(table)

    level = pattern.count(PATH_SEPARATOR) + 1
    daily = use_daily(daily_enabled, from_, until)
    offset = level_offset(direction, daily)

    if direction == Direction.REVERSED:
        pattern = reverse_string(pattern)

    w = Where()
    w.and_(eq("Level", level + offset))
    w.and_(tree_glob("Path", pattern))

    if daily:
        w.andf("Date >= {} AND Date <= {}", format_date(from_), format_date(until))
    else:
        w.and_(eq("Date", DEFAULT_TREE_DATE))

    where = str(w)
    return IndexQuerySQL(
        sql=f"SELECT Path FROM {table} WHERE {where} GROUP BY Path",
        where=where,
        pattern=pattern,
        level=level,
        level_offset=offset,
        use_daily=daily,
    )
