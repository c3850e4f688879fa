"""Shared plumbing for the per-user collection owners (cart, wishlist, alerts)."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable

from pydantic import BaseModel, ValidationError

from ..common.errors import ValidationFailed
from .auth import AuthContext
from .event_bus import EventBus
from .models import Product, utcnow
from .store import EntityKind, KeyedLocalStore

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


class Ledger:
    """Read-modify-write owner of one entity kind.

    Every mutation loads the full collection, changes it, persists it and
    only then publishes, so subscribers always see settled state.
    """

    kind: EntityKind
    sign_in_message = "Please sign in to continue"

    def __init__(
        self,
        store: KeyedLocalStore,
        bus: EventBus,
        auth: AuthContext,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.bus = bus
        self.auth = auth
        self.clock = clock

    def _require_user(self, message: str | None = None) -> str:
        return self.auth.require(message or self.sign_in_message).user_id

    def _load(self, user_id: str | None = None) -> list:
        user_id = user_id or self.auth.user_id
        if user_id is None:
            return []
        return self.store.read(self.kind, user_id)

    def _save(self, user_id: str, items: list[BaseModel]) -> None:
        self.store.write(self.kind, user_id, items)

    @staticmethod
    def _product(product: Product | dict) -> Product:
        try:
            product = Product.coerce(product)
        except ValidationError as e:
            raise ValidationFailed(f"Invalid product data ({e.error_count()} error(s))") from e
        if product.price < 0:
            raise ValidationFailed("Product price cannot be negative")
        return product

    @staticmethod
    def _snapshot(items: list[BaseModel]) -> tuple:
        return tuple(item.model_copy(deep=True) for item in items)
