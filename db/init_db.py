"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

import psycopg2

from db.connection import Database
from db.errors import SchemaError
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Users table: one row per name submitted through the form
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    name            TEXT NOT NULL
);
"""


def create_tables(database: Database) -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).

    Raises:
        SchemaError: If the statement fails.
    """
    try:
        database.execute(SCHEMA_SQL)
        logger.info("Database schema initialized successfully.")
    except psycopg2.Error as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise SchemaError(str(e)) from e


if __name__ == "__main__":
    database = Database.connect()
    try:
        create_tables(database)
    finally:
        database.close()
    print("Database schema created successfully.")
