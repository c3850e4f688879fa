"""Keyed Local Store - durable per-user collections."""

from .connection import get_connection, init_db
from .local_store import KeyedLocalStore
from .schemas import CURRENT_VERSION, EntityKind, storage_key

__all__ = [
    "CURRENT_VERSION",
    "EntityKind",
    "KeyedLocalStore",
    "get_connection",
    "init_db",
    "storage_key",
]
