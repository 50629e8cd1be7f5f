"""
main.py
-------
Entry point for the users web app.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Build the FastAPI application with all handlers.
    - Run the HTTP listener until the process is stopped.
"""

import sys

import uvicorn
from fastapi import FastAPI

from config import APP_PORT
from db.connection import Database
from db.errors import DatabaseConnectionError, SchemaError
from db.init_db import create_tables
from handlers import health_handler, home_handler, users_api_handler
from utils.logger import get_logger

logger = get_logger(__name__)


def create_app(database: Database) -> FastAPI:
    """
    Build the web app around an already connected Database.

    The database is shared by every request; handlers reach it through
    `handlers.dependencies.get_database`.
    """
    app = FastAPI(title="Users App", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.database = database

    app.include_router(home_handler.router)
    app.include_router(users_api_handler.router)
    app.include_router(health_handler.router)
    return app


def main() -> None:
    """Initialize and run the web app."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    try:
        database = Database.connect()
        create_tables(database)
    except (DatabaseConnectionError, SchemaError) as e:
        logger.critical(f"Failed to init app: {e}")
        sys.exit(1)

    # ── 2. Build the application ──────────────────────────
    app = create_app(database)

    # ── 3. Serve ──────────────────────────────────────────
    logger.info(f"Listening on :{APP_PORT}")
    try:
        uvicorn.run(app, host="0.0.0.0", port=APP_PORT, log_config=None)
    finally:
        # ── 4. Cleanup on shutdown ────────────────────────
        database.close()
        logger.info("Users app stopped.")


if __name__ == "__main__":
    main()
