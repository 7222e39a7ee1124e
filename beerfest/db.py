"""
Database initialization helper.

Provides programmatic Alembic migration runner for:
- BeerStore initialization
- Test fixtures
- The sync CLI

This is the single entry point for schema initialization.
All table creation happens through Alembic migrations.

Also provides BaseRepository class for thread-safe SQLite access.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger(__name__)

PROJECT_DIR = Path(__file__).parent.parent


def ensure_schema(db_path: str) -> None:
    """
    Run Alembic migrations to head for the given database.

    Safe to call multiple times - Alembic tracks applied migrations.

    Args:
        db_path: Path to the SQLite database file. Parent directories
                 are created if needed.
    """
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    # No ini file: keeps alembic.ini logging config from replacing the caller's handlers
    alembic_cfg = AlembicConfig()
    alembic_cfg.set_main_option("script_location", str(PROJECT_DIR / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")

    # Suppress Alembic's default logging to avoid noise in tests
    logging.getLogger("alembic").setLevel(logging.WARNING)

    try:
        command.upgrade(alembic_cfg, "head")
        logger.debug(f"Schema initialized for {db_path}")
    except Exception as e:
        logger.error(f"Migration failed for {db_path}: {e}")
        raise


def casefold_collation(left: str, right: str) -> int:
    """SQLite collation comparing strings by Unicode casefold."""
    a, b = left.casefold(), right.casefold()
    return (a > b) - (a < b)


def contains_casefold(haystack: Optional[str], needle: Optional[str]) -> bool:
    """SQL function: case-insensitive substring test."""
    if haystack is None or needle is None:
        return False
    return needle.casefold() in haystack.casefold()


class BaseRepository:
    """
    Base class for thread-safe SQLite repositories.

    Provides common functionality for:
    - Thread-local connection pooling
    - Transaction context management
    - WAL mode so readers never block each other
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        use_wal: bool = True,
        busy_timeout: float = 10.0,
    ):
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database. Defaults to Config.database_path()
            use_wal: Enable WAL mode for concurrent readers
            busy_timeout: Seconds a writer waits for another writer's lock
        """
        if db_path is None:
            from beerfest.config import Config
            db_path = Config.database_path()

        self.db_path = str(db_path)
        self._local = threading.local()
        self._use_wal = use_wal
        self._busy_timeout = busy_timeout

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, 'connection') or self._local.connection is None:
            conn = sqlite3.connect(
                self.db_path, timeout=self._busy_timeout, check_same_thread=False
            )
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if self._use_wal:
                conn.execute("PRAGMA journal_mode = WAL")
            conn.create_collation("CASEFOLD", casefold_collation)
            conn.create_function("CONTAINS_CI", 2, contains_casefold, deterministic=True)
            self._local.connection = conn
        return self._local.connection

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """Context manager for transactions with automatic commit/rollback."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        """Close this thread's database connection."""
        if hasattr(self._local, 'connection') and self._local.connection:
            self._local.connection.close()
            self._local.connection = None
