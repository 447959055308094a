"""
SQLite-backed document store and simple migration system.

Events and users are kept as JSON documents in a ``document`` column.
A handful of fields are copied into plain columns next to the
document so that listing and search can filter and sort in SQL, the
same way a document database uses secondary indexes.

The module provides ``get_connection``/``get_cursor`` for per-operation
connections, ``init_db`` to open the store (with bounded retries) and
apply migrations at startup, and ``close_db`` for shutdown.
"""

import json
import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from .config import settings
from .exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class StoreState:
    """Process-scoped store state, set by ``init_db`` and cleared by ``close_db``."""

    path: Optional[str] = None
    connected_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.path is not None


store_state = StoreState()


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if db_url.startswith("sqlite:///"):
        db_url = db_url[len("sqlite:///"):]
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent.parent
    return str((base_dir / db_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if isinstance(value, str) else value


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  The busy timeout comes from ``settings.db_timeout``; writers
    that hold the lock longer than that make this connection fail with
    ``sqlite3.OperationalError``.
    """
    db_path = store_state.path or get_database_path()
    conn = sqlite3.connect(db_path, timeout=settings.db_timeout)
    conn.row_factory = sqlite3.Row
    # SQLite's lower() folds ASCII only; searches compare with this instead.
    conn.create_function("py_casefold", 1, _casefold, deterministic=True)
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def write_transaction() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside a ``BEGIN IMMEDIATE`` transaction.

    The write lock is taken before the first read, so a
    read-check-write sequence run inside the block cannot interleave
    with another writer.  Commits on success, rolls back on any error.
    """
    conn = get_connection()
    try:
        cursor = conn.cursor()
        cursor.execute("BEGIN IMMEDIATE")
        yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    """Normalise a timestamp to a sortable UTC ISO string.

    Naive datetimes are taken to be UTC.  Every stored timestamp goes
    through here so that string comparison in SQL matches time order.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def dump_document(document: dict) -> str:
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def load_document(row: sqlite3.Row) -> dict:
    return json.loads(row["document"])


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: document collections for events and users
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            status TEXT NOT NULL,
            date_time TEXT NOT NULL,
            subject TEXT NOT NULL,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            age_min INTEGER NOT NULL,
            age_max INTEGER NOT NULL,
            document TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_events_date_status ON events(date_time, status);
        CREATE INDEX IF NOT EXISTS idx_events_city_state ON events(city, state);
        CREATE INDEX IF NOT EXISTS idx_events_subject ON events(subject);
        CREATE INDEX IF NOT EXISTS idx_events_age_range ON events(age_min, age_max);

        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            email TEXT NOT NULL UNIQUE,
            role TEXT NOT NULL,
            city TEXT NOT NULL,
            state TEXT NOT NULL,
            document TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_users_role ON users(role);
        CREATE INDEX IF NOT EXISTS idx_users_city_state ON users(city, state);
        """,
    ),
]


def _apply_migrations() -> None:
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                logger.info("Applied store migration %s", version)
                current_version = version


def init_db() -> None:
    """Open the document store and apply pending migrations.

    Tries up to ``settings.db_connect_retries`` times, sleeping
    ``settings.db_retry_delay`` seconds between attempts.  Raises
    ``StoreUnavailableError`` when every attempt fails.
    """
    db_path = get_database_path()
    attempts = max(1, settings.db_connect_retries)
    last_error: Optional[Exception] = None
    for attempt in range(1, attempts + 1):
        store_state.path = db_path
        try:
            _apply_migrations()
        except sqlite3.Error as exc:
            store_state.path = None
            last_error = exc
            logger.warning(
                "Document store connection attempt %s/%s failed: %s", attempt, attempts, exc
            )
            if attempt < attempts:
                time.sleep(settings.db_retry_delay)
            continue
        store_state.connected_at = utcnow()
        logger.info("Connected to document store at %s", db_path)
        return
    raise StoreUnavailableError(f"Could not open document store at {db_path}: {last_error}")


def close_db() -> None:
    """Forget the open store; new connections fall back to settings."""
    if store_state.is_open:
        logger.info("Disconnected from document store at %s", store_state.path)
    store_state.path = None
    store_state.connected_at = None
