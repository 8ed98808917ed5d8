"""SQLAlchemy engine factory for database connections.

Supports:
- Any SQLAlchemy URL via the DATABASE_URL environment variable
- SQLite file-based (via CARGO_SCANNER_DB_PATH or default var/cargo_scanner.db)
- SQLite in-memory (for testing, db_path=":memory:")
"""

import os
from pathlib import Path
from typing import Optional, Union
from sqlalchemy import create_engine, Engine, event
from sqlalchemy.pool import StaticPool
import logging

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "var/cargo_scanner.db"


def create_engine_from_config(db_path: Optional[Union[str, Path]] = None) -> Engine:
    """
    Create SQLAlchemy engine from configuration.

    Backend selection:
    - db_path=":memory:" → SQLite in-memory (for tests)
    - DATABASE_URL set → that URL
    - Otherwise → SQLite file-based

    Args:
        db_path: Optional explicit database path.
                 None uses environment or default.

    Returns:
        Configured SQLAlchemy Engine instance
    """
    if db_path == ":memory:":
        # StaticPool keeps a single connection; otherwise each connection
        # opens a fresh empty database
        logger.info("Creating SQLite in-memory engine (testing mode)")
        return create_engine(
            "sqlite:///:memory:",
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
            echo=False,
        )

    database_url = os.environ.get("DATABASE_URL")
    if db_path is None and database_url:
        logger.info(f"Creating engine from DATABASE_URL: {database_url.split('@')[-1]}")  # Hide credentials
        return create_engine(database_url, pool_pre_ping=True, echo=False)

    # Priority: explicit parameter > environment variable > default
    if db_path is not None:
        sqlite_path = Path(db_path)
    else:
        env_path = os.environ.get("CARGO_SCANNER_DB_PATH")
        if env_path == ":memory:":
            return create_engine_from_config(":memory:")
        sqlite_path = Path(env_path) if env_path else Path(DEFAULT_DB_PATH)

    sqlite_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Creating SQLite file engine: {sqlite_path}")

    engine = create_engine(
        f"sqlite:///{sqlite_path}",
        connect_args={'check_same_thread': False},
        echo=False,
    )

    # WAL mode lets readers proceed during a manifest write
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def get_database_url() -> str:
    """
    Get the database URL that create_engine_from_config() would use.

    Returns:
        Database URL string
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    env_path = os.environ.get("CARGO_SCANNER_DB_PATH")
    if env_path == ":memory:":
        return "sqlite:///:memory:"
    return f"sqlite:///{env_path or DEFAULT_DB_PATH}"
