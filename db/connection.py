"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's ThreadedConnectionPool so request threads can share it.

A single Database is created at startup and handed to the web app;
nothing in this module keeps it in a global.

Health checks don't borrow from the pool. They run on one extra
non-blocking connection, polled with select() until a client-side
deadline, so a database that stops answering can't hang the health check.
"""

import select
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

import psycopg2
from psycopg2 import extensions, pool

from config import DATABASE_URL, DB_CONNECT_TIMEOUT, DB_PING_TIMEOUT_MS, DB_POOL_MAX
from db.errors import DatabaseConnectionError, DatabaseUnavailableError
from utils.logger import get_logger

logger = get_logger(__name__)


class ReusingConnectionPool(pool.ThreadedConnectionPool):
    """
    ThreadedConnectionPool that keeps every returned connection open.

    The stock pool opens `minconn` connections up front and closes any
    connection handed back while `minconn` are already idle. Here
    `minconn` only sets how many are opened up front; up to `maxconn`
    stay idle for reuse.
    """

    def __init__(self, minconn: int, maxconn: int, *args, **kwargs):
        super().__init__(minconn, maxconn, *args, **kwargs)
        # _putconn keeps a connection only while fewer than `minconn` are idle.
        self.minconn = self.maxconn


def wait_until(conn: extensions.connection, deadline: float) -> None:
    """
    Drive a non-blocking connection until its pending work is done.

    Args:
        conn: Connection opened with ``async_=1``.
        deadline: `time.monotonic()` value after which to give up.

    Raises:
        psycopg2.OperationalError: If the deadline passes first.
    """
    while True:
        state = conn.poll()
        if state == extensions.POLL_OK:
            return
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise psycopg2.OperationalError("timed out waiting for the database")
        if state == extensions.POLL_READ:
            select.select([conn.fileno()], [], [], remaining)
        elif state == extensions.POLL_WRITE:
            select.select([], [conn.fileno()], [], remaining)
        else:
            raise psycopg2.OperationalError(f"unexpected poll state {state}")


class Database:
    """
    Pooled access to PostgreSQL.

    Usage:
        database = Database.connect()
        rows = database.query("SELECT 1;")
        database.close()
    """

    def __init__(
        self,
        db_pool: pool.AbstractConnectionPool,
        max_conn: int = DB_POOL_MAX,
        dsn: str = DATABASE_URL,
        connect_timeout: float = DB_CONNECT_TIMEOUT,
    ):
        self._pool = db_pool
        # ThreadedConnectionPool raises PoolError when exhausted; make callers wait instead.
        self._slots = threading.BoundedSemaphore(max_conn)
        self._dsn = dsn
        self._connect_timeout = connect_timeout
        self._health_conn: Optional[extensions.connection] = None
        self._health_lock = threading.Lock()

    @classmethod
    def connect(
        cls,
        dsn: str = DATABASE_URL,
        connect_timeout: int = DB_CONNECT_TIMEOUT,
        max_conn: int = DB_POOL_MAX,
    ) -> "Database":
        """
        Open the connection pool.

        One connection is opened eagerly, so an unreachable database
        fails here instead of on the first request. There is no retry.

        Args:
            dsn: libpq connection string or URL.
            connect_timeout: Seconds to wait for each new connection.
            max_conn: Maximum number of connections allowed.

        Raises:
            DatabaseConnectionError: If the database is unreachable.
        """
        try:
            db_pool = ReusingConnectionPool(
                1, max_conn, dsn, connect_timeout=connect_timeout
            )
        except psycopg2.Error as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise DatabaseConnectionError(str(e)) from e

        params = extensions.parse_dsn(dsn)
        logger.info(f"Connected to DB {params.get('host', '')}:{params.get('port', '')}")
        return cls(db_pool, max_conn, dsn=dsn, connect_timeout=connect_timeout)

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Iterator[extensions.connection]:
        """
        Borrow a connection from the pool for the duration of the block.

        Args:
            timeout: Seconds to wait for a free connection, or None to wait forever.

        Raises:
            psycopg2.pool.PoolError: If no connection frees up within `timeout`.
        """
        if not self._slots.acquire(timeout=timeout):
            raise pool.PoolError("timed out waiting for a pooled connection")
        try:
            conn = self._pool.getconn()
            try:
                yield conn
            finally:
                # Broken connections are dropped instead of being reused.
                self._pool.putconn(conn, close=bool(conn.closed))
        finally:
            self._slots.release()

    def query(self, sql: str, params: Optional[Sequence] = None) -> list[tuple]:
        """Run a read statement and return all rows."""
        with self.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
                conn.commit()
                return rows
            except Exception:
                conn.rollback()
                raise

    def execute(self, sql: str, params: Optional[Sequence] = None) -> Optional[tuple]:
        """
        Run a write statement and commit it.

        Returns:
            The first row produced by a RETURNING clause, or None.
        """
        with self.connection() as conn:
            try:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    row = cur.fetchone() if cur.description else None
                conn.commit()
                return row
            except Exception:
                conn.rollback()
                raise

    def ping(self, timeout_ms: int = DB_PING_TIMEOUT_MS) -> None:
        """
        Check that the database answers `SELECT 1` within `timeout_ms` milliseconds.

        The health-check connection is opened on first use (bounded by the
        connect timeout) and kept for later pings. After any failure it
        is closed, and the next ping opens a fresh one.

        Raises:
            DatabaseUnavailableError: On any failure. Never retried.
        """
        if not self._health_lock.acquire(timeout=timeout_ms / 1000):
            raise DatabaseUnavailableError("previous health check still running")
        try:
            if self._health_conn is None:
                self._health_conn = psycopg2.connect(self._dsn, async_=1)
                wait_until(self._health_conn, time.monotonic() + self._connect_timeout)
            cur = self._health_conn.cursor()
            cur.execute("SELECT 1;")
            wait_until(self._health_conn, time.monotonic() + timeout_ms / 1000)
            cur.close()
        except psycopg2.Error as e:
            self._discard_health_conn()
            raise DatabaseUnavailableError(str(e)) from e
        finally:
            self._health_lock.release()

    def _discard_health_conn(self) -> None:
        if self._health_conn is not None:
            self._health_conn.close()
            self._health_conn = None

    def close(self) -> None:
        """Close the health-check connection and every pooled connection."""
        self._discard_health_conn()
        self._pool.closeall()
        logger.info("Database connection pool closed.")
