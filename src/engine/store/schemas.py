"""Versioned persisted-data schemas per entity kind.

Each collection is stored as a JSON envelope::

    {"schema": "cart", "version": 1, "items": [...]}

Version 0 is the legacy layout: a bare JSON array of records with
camelCase field names. It is migrated on read. Records that fail
validation are dropped individually; a payload that cannot be parsed
at all raises MalformedPersistedData.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, ValidationError

from ...common.errors import MalformedPersistedData
from ..models import LineItem, PriceAlert, WishlistEntry

logger = logging.getLogger(__name__)

CURRENT_VERSION = 1


class EntityKind(str, Enum):
    """Persisted collection kinds; the value is the storage key prefix."""
    CART = "cart"
    WISHLIST = "wishlist"
    PRICE_ALERTS = "priceAlerts"


SCHEMAS: dict[EntityKind, type[BaseModel]] = {
    EntityKind.CART: LineItem,
    EntityKind.WISHLIST: WishlistEntry,
    EntityKind.PRICE_ALERTS: PriceAlert,
}


def storage_key(kind: EntityKind, user_id: str) -> str:
    """Namespaced key: ``{kind}_{user_id}``."""
    return f"{EntityKind(kind).value}_{user_id}"


def encode(kind: EntityKind, items: Sequence[BaseModel]) -> str:
    """Serialize a collection into the current envelope."""
    kind = EntityKind(kind)
    return json.dumps(
        {
            "schema": kind.value,
            "version": CURRENT_VERSION,
            "items": [item.model_dump(mode="json") for item in items],
        },
        ensure_ascii=False,
    )


def _unwrap(kind: EntityKind, payload: object) -> list:
    """Return the raw record list from any known envelope version."""
    if isinstance(payload, list):
        # version 0: bare array
        return payload
    if not isinstance(payload, dict):
        raise MalformedPersistedData(f"{kind.value}: expected array or envelope")

    version = payload.get("version")
    if not isinstance(version, int) or version > CURRENT_VERSION:
        raise MalformedPersistedData(f"{kind.value}: unsupported schema version {version!r}")
    schema = payload.get("schema")
    if schema is not None and schema != kind.value:
        raise MalformedPersistedData(f"{kind.value}: envelope holds '{schema}' records")

    records = payload.get("items")
    if not isinstance(records, list):
        raise MalformedPersistedData(f"{kind.value}: envelope has no item list")
    return records


def decode(kind: EntityKind, raw: str) -> list[BaseModel]:
    """Parse, migrate and validate a persisted collection.

    Raises:
        MalformedPersistedData: if the payload is not JSON or has an unknown shape.
    """
    kind = EntityKind(kind)
    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise MalformedPersistedData(f"{kind.value}: invalid JSON ({e})") from e

    model = SCHEMAS[kind]
    items: list[BaseModel] = []
    for index, record in enumerate(_unwrap(kind, payload)):
        try:
            items.append(model.model_validate(record))
        except ValidationError as e:
            logger.warning(
                "Dropping invalid %s record #%d: %d error(s)",
                kind.value, index, e.error_count(),
            )
    return items
