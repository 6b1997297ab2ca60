"""
Index finder — finds metric paths through the index table.

Usage:
    finder = IndexFinder(
        address="http://localhost:8123/",
        table="graphite_index",
        daily_enabled=True,
    )

    query = finder.query("servers.*.cpu.user")
    query.execute(from_=1700000000, until=1700086400)
    query.list()    # [b"servers.web1.cpu.user", ...]
    query.series()  # leaves only

IndexFinder holds static configuration and can be shared; each
IndexQuery is bound to one pattern and is executed once. The direction
is resolved when the query is created, so a query can never be reused
for another pattern.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Sequence

from finder.builder import IndexQuerySQL, build_index_query
from finder.decoder import decode_rows
from finder.direction import DirectionResolver
from finder.executor import ClickHouseExecutor, QueryExecutor
from finder.types import Direction, QueryOptions, ReverseRule

logger = logging.getLogger(__name__)


class QueryStateError(RuntimeError):
    """Query executed twice."""
    pass


class Finder(ABC):
    """
    Metric finding strategy.

    Other strategies (filesystem index, remote finder) implement the same
    methods; this module provides the index table one.
    """

    @abstractmethod
    def execute(self, from_: int, until: int, cancel: threading.Event | None = None) -> None:
        pass

    @abstractmethod
    def list(self) -> list[bytes]:
        """All matched nodes, directories included."""
        pass

    @abstractmethod
    def series(self) -> list[bytes]:
        """Matched leaf series only."""
        pass

    @abstractmethod
    def abs(self, path: bytes) -> bytes:
        """Absolute path of a matched node."""
        pass


class IndexQuery(Finder):
    """One pattern against the index table."""

    def __init__(
        self,
        pattern: str,
        address: str,
        table: str,
        daily_enabled: bool,
        resolver: DirectionResolver,
        options: QueryOptions,
        executor: QueryExecutor,
    ):
        self.pattern = pattern
        self.address = address
        self.table = table
        self.daily_enabled = daily_enabled
        self.options = options
        self.executor = executor
        self.direction = resolver.resolve(pattern)
        self.built: IndexQuerySQL | None = None
        self._body: bytes | None = None

    @property
    def reversed(self) -> bool:
        return self.direction == Direction.REVERSED

    @property
    def executed(self) -> bool:
        return self.built is not None

    def build(self, from_: int, until: int) -> IndexQuerySQL:
        return build_index_query(
            self.pattern,
            self.direction,
            self.daily_enabled,
            from_,
            until,
            self.table,
        )

    def execute(self, from_: int = 0, until: int = 0, cancel: threading.Event | None = None) -> None:
        """
        Runs the query and keeps the raw body.

        Raises:
            QueryStateError: If the query was already executed
            QueryError: Executor failure, propagated as is
        """
        if self.executed:
            raise QueryStateError(f"query '{self.pattern}' already executed")

        self.built = self.build(from_, until)
        logger.debug(
            f"find {self.pattern}: direction={self.direction.value}, "
            f"daily={self.built.use_daily}, level={self.built.level + self.built.level_offset}"
        )
        self._body = self.executor.execute(self.address, self.built.sql, self.options, cancel)

    def list(self) -> list[bytes]:
        return decode_rows(self._body, series_only=False, reverse=self.reversed)

    def series(self) -> list[bytes]:
        return decode_rows(self._body, series_only=True, reverse=self.reversed)

    def abs(self, path: bytes) -> bytes:
        return path


class IndexFinder:
    """
    Static configuration of the index finder.

    Args:
        address: ClickHouse URL or DuckDB path
        table: Index table
        daily_enabled: Read the daily partition when a time range is given
        reverse: Configured direction (AUTO = per-pattern heuristic)
        reverses: Reverse rules, first match wins
        options: Executor timeouts
        executor: Query executor, ClickHouse by default
    """

    def __init__(
        self,
        address: str,
        table: str,
        daily_enabled: bool = True,
        reverse: Direction = Direction.AUTO,
        reverses: Sequence[ReverseRule] = (),
        options: QueryOptions | None = None,
        executor: QueryExecutor | None = None,
    ):
        self.address = address
        self.table = table
        self.daily_enabled = daily_enabled
        self.reverse = reverse
        self.reverses = tuple(reverses)
        self.options = options or QueryOptions()
        self.executor = executor or ClickHouseExecutor()

    def query(self, pattern: str) -> IndexQuery:
        return IndexQuery(
            pattern=pattern,
            address=self.address,
            table=self.table,
            daily_enabled=self.daily_enabled,
            resolver=DirectionResolver(self.reverse, self.reverses),
            options=self.options,
            executor=self.executor,
        )

    def find(
        self,
        pattern: str,
        from_: int = 0,
        until: int = 0,
        series_only: bool = False,
        cancel: threading.Event | None = None,
    ) -> list[bytes]:
        """Shortcut: query + execute + list()/series()."""
        query = self.query(pattern)
        query.execute(from_, until, cancel)
        return query.series() if series_only else query.list()
