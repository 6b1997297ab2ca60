"""
Tests for IndexFinder / IndexQuery with a recording executor.

Run: pytest finder/tests/test_index.py -v
"""

import threading

import pytest

from finder import (
    Direction,
    IndexFinder,
    QueryConnectionError,
    QueryExecutor,
    QueryOptions,
    QueryStateError,
    ReverseRule,
)


class RecordingExecutor(QueryExecutor):
    """Returns a canned body and remembers every call."""

    def __init__(self, body=b"", error=None):
        self.body = body
        self.error = error
        self.calls = []

    def execute(self, address, sql, options, cancel=None):
        self.calls.append((address, sql, options, cancel))
        if self.error is not None:
            raise self.error
        return self.body


def make_finder(executor, **kwargs):
    kwargs.setdefault("daily_enabled", False)
    return IndexFinder("http://ch:8123/", "graphite_index", executor=executor, **kwargs)


class TestIndexQuery:

    def test_direction_resolved_on_creation(self):
        query = make_finder(RecordingExecutor()).query("a.*.c.d")
        assert query.direction == Direction.REVERSED
        assert not query.executed

    def test_execute_sends_sql(self):
        executor = RecordingExecutor()
        options = QueryOptions(connect_timeout=2, timeout=5)
        cancel = threading.Event()
        query = make_finder(executor, options=options).query("a.b.c")

        query.execute(0, 0, cancel)

        address, sql, sent_options, sent_cancel = executor.calls[0]
        assert address == "http://ch:8123/"
        assert sql == query.built.sql
        assert "Level = 20003" in sql
        assert sent_options is options
        assert sent_cancel is cancel

    def test_list_and_series(self):
        query = make_finder(RecordingExecutor(b"a.b.\na.b.c\n")).query("a.b*")
        query.execute()

        assert query.list() == [b"a.b.", b"a.b.c"]
        assert query.series() == [b"a.b.c"]

    def test_results_rederived_without_reexecuting(self):
        executor = RecordingExecutor(b"a.b\n")
        query = make_finder(executor).query("a.*")
        query.execute()

        assert query.list() == query.list()
        assert query.series() == [b"a.b"]
        assert len(executor.calls) == 1

    def test_reversed_rows_restored(self):
        executor = RecordingExecutor(b"d.c.x.a\nd.c.y.a\n")
        query = make_finder(executor).query("a.*.c.d")
        query.execute()

        assert "d.c.*.a" in query.built.pattern
        assert query.list() == [b"a.x.c.d", b"a.y.c.d"]

    def test_empty_before_execute(self):
        query = make_finder(RecordingExecutor()).query("a")
        assert query.list() == []
        assert query.series() == []

    def test_empty_body(self):
        query = make_finder(RecordingExecutor(b"")).query("a.*")
        query.execute()
        assert query.list() == []
        assert query.series() == []

    def test_execute_once(self):
        query = make_finder(RecordingExecutor()).query("a")
        query.execute()
        with pytest.raises(QueryStateError):
            query.execute()

    def test_executor_error_propagates(self):
        error = QueryConnectionError("down")
        query = make_finder(RecordingExecutor(error=error)).query("a.*")

        with pytest.raises(QueryConnectionError) as exc_info:
            query.execute()
        assert exc_info.value is error
        assert query.list() == []

    def test_abs_is_identity(self):
        query = make_finder(RecordingExecutor()).query("a")
        assert query.abs(b"a.b.c") == b"a.b.c"


class TestIndexFinder:

    def test_queries_resolve_independently(self):
        finder = make_finder(RecordingExecutor())
        assert finder.query("a.*.c.d").direction == Direction.REVERSED
        assert finder.query("a.b.c.*").direction == Direction.FORWARD

    def test_configured_direction(self):
        finder = make_finder(RecordingExecutor(), reverse=Direction.REVERSED)
        assert finder.query("a.b.c").direction == Direction.REVERSED

    def test_reverse_rules(self):
        rules = [ReverseRule(prefix="a.", direction=Direction.FORWARD)]
        finder = make_finder(RecordingExecutor(), reverses=rules)
        assert finder.query("a.*.c.d").direction == Direction.FORWARD

    def test_daily_range(self):
        executor = RecordingExecutor()
        finder = make_finder(executor, daily_enabled=True)
        query = finder.query("a.b.*")
        query.execute(1705320000, 1705406400)

        assert query.built.use_daily
        assert "Date >= '2024-01-15' AND Date <= '2024-01-16'" in executor.calls[0][1]

    def test_find_shortcut(self):
        finder = make_finder(RecordingExecutor(b"a.b.\na.b.c\n"))
        assert finder.find("a.b*") == [b"a.b.", b"a.b.c"]
        assert finder.find("a.b*", series_only=True) == [b"a.b.c"]
