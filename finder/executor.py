"""
Query executors — run index SQL, return the raw response body.

Two backends share one contract:
- ClickHouseExecutor: ClickHouse HTTP interface (production)
- DuckDBExecutor: local DuckDB file built by data/loader.py (development, tests)

Contract:
    body = executor.execute(address, sql, options, cancel)

`body` is newline-delimited paths (TabSeparatedRaw). Failures raise a
QueryError subclass; nothing is retried.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod

import duckdb
import requests

from constants import OUTPUT_FORMAT
from finder.types import QueryOptions

logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class QueryError(Exception):
    """Index query failed."""
    pass


class QueryCancelled(QueryError):
    """Caller cancelled the query."""
    pass


class QueryTimeout(QueryError):
    """Connect or read timeout."""
    pass


class QueryConnectionError(QueryError):
    """Store is unreachable."""
    pass


class QueryRejected(QueryError):
    """Store refused the query (syntax, missing table, limits)."""

    def __init__(self, status: int, message: str):
        super().__init__(f"status {status}: {message}")
        self.status = status
        self.message = message


# =============================================================================
# Base
# =============================================================================

class QueryExecutor(ABC):
    """
    Base class for executors.

    Implementations block until the full body is read and must return
    promptly with QueryCancelled once `cancel` is set.
    """

    @abstractmethod
    def execute(
        self,
        address: str,
        sql: str,
        options: QueryOptions,
        cancel: threading.Event | None = None,
    ) -> bytes:
        """
        Runs `sql` against the store at `address`.

        Args:
            address: ClickHouse URL or DuckDB file path
            sql: SELECT returning one path column
            options: Timeouts
            cancel: Set by the caller to abort the request

        Returns:
            Raw response body

        Raises:
            QueryError: On any failure
        """
        pass


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise QueryCancelled("query cancelled")


# =============================================================================
# ClickHouse
# =============================================================================

class ClickHouseExecutor(QueryExecutor):
    """ClickHouse over HTTP. The body is streamed so cancel is checked per chunk."""

    CHUNK_SIZE = 64 * 1024

    def execute(
        self,
        address: str,
        sql: str,
        options: QueryOptions,
        cancel: threading.Event | None = None,
    ) -> bytes:
        _check_cancel(cancel)

        query_id = uuid.uuid4().hex
        start = time.monotonic()
        logger.debug(f"query {query_id}: {sql}")

        try:
            response = requests.post(
                address,
                params={"query_id": query_id, "default_format": OUTPUT_FORMAT},
                data=sql.encode("utf-8"),
                timeout=(options.connect_timeout, options.timeout),
                stream=True,
            )
        except requests.Timeout as e:
            raise QueryTimeout(f"query {query_id} timed out: {e}") from e
        except requests.ConnectionError as e:
            raise QueryConnectionError(f"cannot reach {address}: {e}") from e

        with response:
            if response.status_code != 200:
                message = response.text.strip()
                logger.error(f"query {query_id} rejected ({response.status_code}): {message}")
                raise QueryRejected(response.status_code, message)

            chunks = []
            try:
                for chunk in response.iter_content(chunk_size=self.CHUNK_SIZE):
                    _check_cancel(cancel)
                    chunks.append(chunk)
            except requests.Timeout as e:
                raise QueryTimeout(f"query {query_id} timed out: {e}") from e
            except requests.ConnectionError as e:
                raise QueryConnectionError(f"query {query_id} interrupted: {e}") from e

        body = b"".join(chunks)
        logger.info(
            f"query {query_id}: {len(body)} bytes in {time.monotonic() - start:.3f}s"
        )
        return body


# =============================================================================
# DuckDB
# =============================================================================

# ClickHouse functions used by finder.where, mapped onto DuckDB builtins
_DUCKDB_MACROS = (
    "CREATE OR REPLACE TEMP MACRO startsWith(s, p) AS starts_with(s, p)",
    "CREATE OR REPLACE TEMP MACRO match(s, p) AS regexp_matches(s, p)",
)


class DuckDBExecutor(QueryExecutor):
    """
    Runs index SQL against a local DuckDB file.

    Timeouts do not apply to an in-process database; cancellation
    interrupts the running statement.
    """

    POLL_INTERVAL = 0.05

    def execute(
        self,
        address: str,
        sql: str,
        options: QueryOptions,
        cancel: threading.Event | None = None,
    ) -> bytes:
        _check_cancel(cancel)
        start = time.monotonic()
        logger.debug(f"duckdb {address}: {sql}")

        try:
            conn = duckdb.connect(address)
        except duckdb.Error as e:
            raise QueryConnectionError(f"cannot open {address}: {e}") from e

        done = threading.Event()
        watcher = None
        if cancel is not None:
            watcher = threading.Thread(
                target=self._watch, args=(conn, cancel, done), daemon=True
            )
            watcher.start()

        try:
            for macro in _DUCKDB_MACROS:
                conn.execute(macro)
            rows = conn.execute(sql).fetchall()
        except duckdb.InterruptException as e:
            raise QueryCancelled("query cancelled") from e
        except duckdb.Error as e:
            _check_cancel(cancel)
            raise QueryRejected(400, str(e)) from e
        finally:
            done.set()
            if watcher is not None:
                watcher.join()
            conn.close()

        _check_cancel(cancel)
        body = b"".join(row[0].encode("utf-8") + b"\n" for row in rows)
        logger.info(f"duckdb: {len(rows)} rows in {time.monotonic() - start:.3f}s")
        return body

    def _watch(self, conn, cancel: threading.Event, done: threading.Event) -> None:
        while not done.is_set():
            if cancel.wait(self.POLL_INTERVAL):
                conn.interrupt()
                return
