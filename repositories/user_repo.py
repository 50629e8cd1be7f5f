"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
All SQL queries related to the `users` table live here.
"""

import psycopg2

from db.connection import Database
from db.errors import InsertError, QueryError
from models.user import User
from utils.logger import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for the users table."""

    def __init__(self, database: Database):
        self.database = database

    # ── CREATE ────────────────────────────────────────────

    def add(self, name: str) -> User:
        """
        Insert a new user.

        Args:
            name: Display name, stored as given.

        Returns:
            The new User with its database-assigned `id`.

        Raises:
            InsertError: If the insert fails.
        """
        sql = "INSERT INTO users (name) VALUES (%s) RETURNING id;"
        # psycopg2 raises ValueError for values it cannot send, such as NUL characters.
        try:
            row = self.database.execute(sql, (name,))
        except (psycopg2.Error, ValueError) as e:
            logger.error(f"Failed to add user {name!r}: {e}")
            raise InsertError(str(e)) from e
        user = User(name=name, id=row[0])
        logger.info(f"Added user #{user.id}")
        return user

    # ── READ ──────────────────────────────────────────────

    def list_all(self) -> list[User]:
        """
        Fetch every user, oldest first.

        Raises:
            QueryError: If the query fails.
        """
        sql = "SELECT id, name FROM users ORDER BY id;"
        try:
            rows = self.database.query(sql)
        except (psycopg2.Error, ValueError) as e:
            logger.error(f"Failed to load users: {e}")
            raise QueryError(str(e)) from e
        return [self._row_to_user(row) for row in rows]

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_user(row: tuple) -> User:
        """Convert a database row (id, name) to a User object."""
        return User(id=row[0], name=row[1])
