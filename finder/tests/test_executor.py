"""
Tests for query executors.

ClickHouse HTTP calls are faked via monkeypatch; DuckDB runs for real
on a temporary file.

Run: pytest finder/tests/test_executor.py -v
"""

import threading

import pytest
import requests

import finder.executor as executor_module
from data import load_paths
from finder.executor import (
    ClickHouseExecutor,
    DuckDBExecutor,
    QueryCancelled,
    QueryConnectionError,
    QueryRejected,
    QueryTimeout,
)
from finder.types import QueryOptions


class FakeResponse:
    """Minimal stand-in for requests.Response with stream=True."""

    def __init__(self, status_code=200, chunks=(), text=""):
        self.status_code = status_code
        self.chunks = list(chunks)
        self.text = text
        self.closed = False

    def iter_content(self, chunk_size=1):
        yield from self.chunks

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True


@pytest.fixture
def fake_post(monkeypatch):
    """Replaces requests.post; returns the list of recorded calls."""
    calls = []
    state = {"response": FakeResponse(), "error": None}

    def post(url, **kwargs):
        calls.append((url, kwargs))
        if state["error"] is not None:
            raise state["error"]
        return state["response"]

    monkeypatch.setattr(executor_module.requests, "post", post)
    return calls, state


class TestClickHouseExecutor:

    def test_returns_body(self, fake_post):
        calls, state = fake_post
        state["response"] = FakeResponse(chunks=[b"a.b.\n", b"a.b.c\n"])

        body = ClickHouseExecutor().execute(
            "http://ch:8123/", "SELECT 1", QueryOptions(connect_timeout=2, timeout=7)
        )

        assert body == b"a.b.\na.b.c\n"
        url, kwargs = calls[0]
        assert url == "http://ch:8123/"
        assert kwargs["data"] == b"SELECT 1"
        assert kwargs["timeout"] == (2, 7)
        assert kwargs["params"]["default_format"] == "TabSeparatedRaw"
        assert kwargs["stream"] is True

    def test_rejected(self, fake_post):
        _, state = fake_post
        state["response"] = FakeResponse(status_code=404, text="Code: 60. Table doesn't exist\n")

        with pytest.raises(QueryRejected) as exc_info:
            ClickHouseExecutor().execute("http://ch:8123/", "SELECT 1", QueryOptions())

        assert exc_info.value.status == 404
        assert "doesn't exist" in exc_info.value.message
        assert state["response"].closed

    def test_timeout(self, fake_post):
        _, state = fake_post
        state["error"] = requests.ReadTimeout("slow")

        with pytest.raises(QueryTimeout):
            ClickHouseExecutor().execute("http://ch:8123/", "SELECT 1", QueryOptions())

    def test_connection_error(self, fake_post):
        _, state = fake_post
        state["error"] = requests.ConnectionError("refused")

        with pytest.raises(QueryConnectionError):
            ClickHouseExecutor().execute("http://ch:8123/", "SELECT 1", QueryOptions())

    def test_cancelled_before_request(self, fake_post):
        calls, _ = fake_post
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(QueryCancelled):
            ClickHouseExecutor().execute("http://ch:8123/", "SELECT 1", QueryOptions(), cancel)
        assert calls == []

    def test_cancelled_while_streaming(self, fake_post):
        _, state = fake_post
        cancel = threading.Event()

        class CancellingResponse(FakeResponse):
            def iter_content(self, chunk_size=1):
                yield b"a.b\n"
                cancel.set()
                yield b"a.c\n"

        state["response"] = CancellingResponse()

        with pytest.raises(QueryCancelled):
            ClickHouseExecutor().execute("http://ch:8123/", "SELECT 1", QueryOptions(), cancel)


@pytest.fixture
def index_db(tmp_path):
    db_path = str(tmp_path / "index.duckdb")
    load_paths(["a.b.c", "a.b.d", "a.x.c"], db_path, "graphite_index")
    return db_path


class TestDuckDBExecutor:

    def test_runs_index_sql(self, index_db):
        body = DuckDBExecutor().execute(
            index_db,
            "SELECT Path FROM graphite_index WHERE Level = 20003 GROUP BY Path ORDER BY Path",
            QueryOptions(),
        )
        assert body == b"a.b.c\na.b.d\na.x.c\n"

    def test_clickhouse_functions_available(self, index_db):
        body = DuckDBExecutor().execute(
            index_db,
            "SELECT Path FROM graphite_index "
            "WHERE startsWith(Path, 'a.b') AND match(Path, '^a[.]b[.]c$') GROUP BY Path",
            QueryOptions(),
        )
        assert body == b"a.b.c\n"

    def test_empty_result(self, index_db):
        body = DuckDBExecutor().execute(
            index_db, "SELECT Path FROM graphite_index WHERE Level = 1", QueryOptions()
        )
        assert body == b""

    def test_rejected(self, index_db):
        with pytest.raises(QueryRejected):
            DuckDBExecutor().execute(index_db, "SELECT Path FROM missing_table", QueryOptions())

    def test_cancelled(self, index_db):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(QueryCancelled):
            DuckDBExecutor().execute(
                index_db, "SELECT Path FROM graphite_index", QueryOptions(), cancel
            )

    def test_unset_cancel_event(self, index_db):
        body = DuckDBExecutor().execute(
            index_db,
            "SELECT Path FROM graphite_index WHERE Level = 30003 GROUP BY Path ORDER BY Path",
            QueryOptions(),
            threading.Event(),
        )
        assert body == b"c.b.a\nc.x.a\nd.b.a\n"
