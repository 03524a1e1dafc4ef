"""
SQLite plumbing shared by the cellar repositories.

Schema changes live in Alembic migrations only; ensure_schema() applies
them programmatically so the API, the batch CLI and test fixtures all see
the same tables without running the alembic command.
"""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional, Sequence

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger(__name__)

PROJECT_DIR = Path(__file__).parent.parent

_migrated: set[str] = set()
_migrate_lock = threading.Lock()


def ensure_schema(db_path: str) -> None:
    """
    Bring the database at db_path up to the latest migration.

    Creates the parent directory and the file when missing. A path already
    migrated by this process is skipped while its file still exists.
    """
    path = Path(db_path).resolve()
    key = str(path)

    with _migrate_lock:
        if key in _migrated and path.exists():
            return

        path.parent.mkdir(parents=True, exist_ok=True)

        alembic_cfg = AlembicConfig(str(PROJECT_DIR / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(PROJECT_DIR / "alembic"))
        alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{path}")
        alembic_cfg.attributes["configure_logger"] = False

        # Alembic logs every revision at INFO
        logging.getLogger("alembic").setLevel(logging.WARNING)

        try:
            command.upgrade(alembic_cfg, "head")
        except Exception as e:
            logger.error(f"Migration failed for {path}: {e}")
            raise

        _migrated.add(key)
        logger.debug(f"Catalog schema at head for {path}")


class BaseRepository:
    """
    Thread-safe SQLite access for the catalog and inventory stores.

    Pairing search reads from worker threads, so every thread opens its own
    connection. All of them are tracked and released by close().
    """

    def __init__(self, db_path: Optional[str] = None, use_wal: bool = False):
        if db_path is None:
            from .config import Config
            db_path = Config.database_path()

        self.db_path = str(db_path)
        self._use_wal = use_wal
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        conn = getattr(self._local, "connection", None)
        if conn is None:
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            if self._use_wal:
                conn.execute("PRAGMA journal_mode = WAL")
            self._local.connection = conn
            with self._connections_lock:
                self._connections.append(conn)
        return conn

    def _fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        return self._get_connection().execute(sql, params).fetchall()

    def _fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[sqlite3.Row]:
        return self._get_connection().execute(sql, params).fetchone()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Cursor]:
        """Cursor whose writes commit together, or roll back on any error."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        """Close the connections opened by every thread."""
        with self._connections_lock:
            connections, self._connections = self._connections, []
        for conn in connections:
            conn.close()
        self._local = threading.local()
