"""SQLite connection and schema management for the keyed local store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from ...common.config import settings

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS local_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT (datetime('now'))
);
"""


def resolve_db_path(db_path: str | Path | None = None) -> Path:
    """Resolve an explicit path, or the configured one relative to project root."""
    if db_path is not None:
        return Path(db_path)
    return settings.store.database_abs_path


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """Get a SQLite connection with row factory enabled.

    Args:
        db_path: Optional database file. Uses the configured store path if not provided.

    Returns:
        sqlite3.Connection with Row factory.
    """
    path = resolve_db_path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_db(db_path: str | Path | None = None) -> None:
    """Initialize store schema (idempotent)."""
    conn = get_connection(db_path)
    try:
        conn.executescript(_SCHEMA_SQL)
        conn.commit()
        logger.info("Local store initialized at %s", resolve_db_path(db_path))
    finally:
        conn.close()
