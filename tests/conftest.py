"""
pytest configuration and fixtures.

The web app is built with `create_app` around a fake Database, and the
user repository is swapped for an in-memory one through FastAPI's
dependency overrides, so these tests need no PostgreSQL server.
"""

import socket
import struct
import threading
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from db.errors import DatabaseUnavailableError, InsertError, QueryError
from handlers.dependencies import get_user_repo
from main import create_app
from models.user import User


class InMemoryUserRepository:
    """Stand-in for UserRepository backed by a list."""

    def __init__(self):
        self._users: list[User] = []
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_reads = False
        self.fail_writes = False

    def add(self, name: str) -> User:
        if self.fail_writes:
            raise InsertError("insert failed")
        with self._lock:
            user = User(name=name, id=self._next_id)
            self._next_id += 1
            self._users.append(user)
        return user

    def list_all(self) -> list[User]:
        if self.fail_reads:
            raise QueryError('relation "users" does not exist')
        with self._lock:
            return list(self._users)


class FakeDatabase:
    """Stand-in for Database that only knows how to ping."""

    def __init__(self):
        self.reachable = True
        self.pings: list[int] = []

    def ping(self, timeout_ms: int) -> None:
        self.pings.append(timeout_ms)
        if not self.reachable:
            raise DatabaseUnavailableError("timeout expired")


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def app(fake_database: FakeDatabase, user_repo: InMemoryUserRepository) -> FastAPI:
    app = create_app(fake_database)
    app.dependency_overrides[get_user_repo] = lambda: user_repo
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def mock_connection() -> MagicMock:
    """A psycopg2-like connection whose cursor works as a context manager."""
    conn = MagicMock()
    conn.closed = 0
    cursor = MagicMock()
    conn.cursor.return_value.__enter__.return_value = cursor
    return conn


@pytest.fixture
def mock_pool(mock_connection: MagicMock) -> MagicMock:
    db_pool = MagicMock()
    db_pool.getconn.return_value = mock_connection
    return db_pool


class StalledPostgres:
    """
    TCP server that speaks just enough of the PostgreSQL startup protocol
    to let a client log in, then never answers a query.

    With ``handshake=False`` it accepts connections and stays silent.
    """

    PARAMETERS = {
        "server_version": "16.0",
        "server_encoding": "UTF8",
        "client_encoding": "UTF8",
        "DateStyle": "ISO, MDY",
        "integer_datetimes": "on",
        "standard_conforming_strings": "on",
        "TimeZone": "UTC",
    }

    def __init__(self, handshake: bool = True):
        self.handshake = handshake
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen()
        self.port = self._server.getsockname()[1]
        self._clients: list[socket.socket] = []
        threading.Thread(target=self._accept_loop, daemon=True).start()

    @property
    def dsn(self) -> str:
        return (
            f"postgresql://postgres@127.0.0.1:{self.port}/postgres"
            "?sslmode=disable&gssencmode=disable"
        )

    def _accept_loop(self) -> None:
        while True:
            try:
                client, _ = self._server.accept()
            except OSError:
                return
            self._clients.append(client)
            threading.Thread(target=self._serve, args=(client,), daemon=True).start()

    def _serve(self, client: socket.socket) -> None:
        try:
            if self.handshake:
                self._startup(client)
            while client.recv(4096):
                pass
        except OSError:
            pass

    def _startup(self, client: socket.socket) -> None:
        while True:
            length = struct.unpack("!i", self._recv_exact(client, 4))[0]
            code = struct.unpack("!i", self._recv_exact(client, length - 4)[:4])[0]
            # SSL / GSS encryption requests get "N" and the client retries in plain text.
            if code in (80877103, 80877104):
                client.sendall(b"N")
                continue
            break
        reply = b"R" + struct.pack("!ii", 8, 0)
        for name, value in self.PARAMETERS.items():
            body = name.encode() + b"\0" + value.encode() + b"\0"
            reply += b"S" + struct.pack("!i", 4 + len(body)) + body
        reply += b"K" + struct.pack("!iii", 12, 4242, 1234)
        reply += b"Z" + struct.pack("!i", 5) + b"I"
        client.sendall(reply)

    @staticmethod
    def _recv_exact(client: socket.socket, size: int) -> bytes:
        data = b""
        while len(data) < size:
            chunk = client.recv(size - len(data))
            if not chunk:
                raise OSError("client went away")
            data += chunk
        return data

    def close(self) -> None:
        self._server.close()
        for client in self._clients:
            client.close()


@pytest.fixture
def stalled_postgres() -> Generator[StalledPostgres, None, None]:
    server = StalledPostgres()
    yield server
    server.close()


@pytest.fixture
def silent_server() -> Generator[StalledPostgres, None, None]:
    server = StalledPostgres(handshake=False)
    yield server
    server.close()
