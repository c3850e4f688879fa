"""Keyed Local Store: durable per-kind, per-user collections.

Usage:
    store = KeyedLocalStore(db_path="data/storefront_state.db")
    items = store.read(EntityKind.CART, "user-1")
    store.write(EntityKind.CART, "user-1", items)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from pydantic import BaseModel

from ...common.errors import MalformedPersistedData
from .connection import get_connection, init_db
from .schemas import EntityKind, decode, encode, storage_key

logger = logging.getLogger(__name__)


class KeyedLocalStore:
    """Key/value persistence over SQLite, one JSON collection per key.

    Only the owning ledger writes a given key. Writes replace the whole
    collection (last write wins).
    """

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = db_path
        init_db(db_path)

    # --- raw access ---

    def read_raw(self, key: str) -> str | None:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT value FROM local_store WHERE key = ?", (key,)
            ).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def write_raw(self, key: str, value: str) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                """INSERT INTO local_store (key, value, updated_at)
                   VALUES (?, ?, datetime('now'))
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def keys(self) -> list[str]:
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute("SELECT key FROM local_store ORDER BY key").fetchall()
        finally:
            conn.close()
        return [row["key"] for row in rows]

    # --- typed collections ---

    def read(self, kind: EntityKind, user_id: str) -> list[BaseModel]:
        """Return the user's collection, or [] when missing or unreadable.

        Never raises on bad persisted data: the problem is logged and the
        collection is treated as empty.
        """
        key = storage_key(kind, user_id)
        raw = self.read_raw(key)
        if raw is None:
            return []
        try:
            return decode(kind, raw)
        except MalformedPersistedData as e:
            logger.warning("Ignoring malformed persisted data at '%s': %s", key, e.message)
            return []

    def write(self, kind: EntityKind, user_id: str, items: Sequence[BaseModel]) -> None:
        """Persist the full collection under ``{kind}_{user_id}``."""
        key = storage_key(kind, user_id)
        self.write_raw(key, encode(kind, items))
        logger.debug("Persisted %d record(s) to '%s'", len(items), key)

    def delete(self, kind: EntityKind, user_id: str) -> None:
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "DELETE FROM local_store WHERE key = ?", (storage_key(kind, user_id),)
            )
            conn.commit()
        finally:
            conn.close()
