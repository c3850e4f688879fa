"""Cart Ledger - owns the signed-in user's shopping cart.

Usage:
    cart = CartLedger(store, bus, auth)
    cart.add_item({"num_iid": "6012", "title": "Desk lamp", "price": "20.00"})
    cart.set_addons("6012", Addons(quality_inspection=True))
    print(cart.count(), cart.totals().to_dict())
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from ...common.config import FeeSchedule
from ...common.errors import NotFound, ValidationFailed
from ..auth import AuthContext
from ..boundary import operation
from ..event_bus import CartUpdated, EventBus, NotificationType
from ..ledger import Ledger
from ..models import Addons, LineItem, Product, utcnow
from ..pricing import CartTotals, CheckoutQuote, Coupon, PricingCalculator, ShippingOption
from ..store import EntityKind, KeyedLocalStore

logger = logging.getLogger(__name__)


class CartLedger(Ledger):
    """Cart lines keyed by product id. Quantity never drops below 1."""

    kind = EntityKind.CART
    sign_in_message = "Please sign in to manage your cart"

    def __init__(
        self,
        store: KeyedLocalStore,
        bus: EventBus,
        auth: AuthContext,
        fees: FeeSchedule | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(store, bus, auth, clock)
        self.calculator = PricingCalculator(fees)

    # --- reads ---

    def items(self) -> list[LineItem]:
        return self._load()

    def count(self) -> int:
        """Badge count: total units, recomputed from the persisted cart."""
        return sum(item.quantity for item in self._load())

    def totals(self) -> CartTotals:
        return self.calculator.totals(self._load())

    @operation
    def quote(
        self,
        shipping: Optional[ShippingOption] = None,
        coupon: Optional[Coupon] = None,
    ) -> CheckoutQuote:
        return self.calculator.quote(self._load(), shipping, coupon)

    # --- mutations ---

    @operation
    def add_item(self, product: Product | dict, quantity: int = 1) -> list[LineItem]:
        """Add a product, merging into an existing line with the same id."""
        user_id = self._require_user("Please sign in to add items to cart")
        if quantity < 1:
            raise ValidationFailed("Quantity must be at least 1")
        product = self._product(product)

        items = self._load(user_id)
        existing = next((i for i in items if i.id == product.id), None)
        if existing:
            existing.quantity += quantity
        else:
            items.append(LineItem.from_product(product, quantity))

        self._commit(user_id, items)
        logger.info("Cart %s: +%d × %s", user_id, quantity, product.id)
        self.bus.notify(NotificationType.SUCCESS, f"{product.title} added to cart!")
        return items

    @operation
    def set_quantity(self, item_id: str, quantity: int) -> list[LineItem]:
        """Replace a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            return self.remove_item(item_id)

        user_id = self._require_user()
        items = self._load(user_id)
        self._find(items, item_id).quantity = quantity
        self._commit(user_id, items)
        return items

    @operation
    def remove_item(self, item_id: str) -> list[LineItem]:
        user_id = self._require_user()
        items = self._load(user_id)
        line = self._find(items, item_id)
        items.remove(line)
        self._commit(user_id, items)
        self.bus.notify(NotificationType.INFO, "Item removed from cart")
        return items

    @operation
    def set_addons(self, item_id: str, addons: Addons | dict) -> list[LineItem]:
        user_id = self._require_user()
        items = self._load(user_id)
        line = self._find(items, item_id)
        line.addons = addons if isinstance(addons, Addons) else Addons.model_validate(addons)
        self._commit(user_id, items)
        return items

    @operation
    def clear(self) -> list[LineItem]:
        """Empty the cart (e.g. after checkout)."""
        user_id = self._require_user()
        self._commit(user_id, [])
        self.bus.notify(NotificationType.INFO, "Cart cleared")
        return []

    # --- internals ---

    @staticmethod
    def _find(items: list[LineItem], item_id: str) -> LineItem:
        line = next((i for i in items if i.id == str(item_id)), None)
        if line is None:
            raise NotFound("Item not found in cart")
        return line

    def _commit(self, user_id: str, items: list[LineItem]) -> None:
        self._save(user_id, items)
        self.bus.publish(CartUpdated(items=self._snapshot(items)))
