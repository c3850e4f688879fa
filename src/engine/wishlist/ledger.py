"""Wishlist Ledger - saved products per user.

Adding a product that is already saved removes it (toggle), so the
collection never holds two entries for one product id.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from enum import Enum
from typing import Optional

from ...common.errors import NotFound
from ..boundary import operation
from ..event_bus import NotificationType, WishlistUpdated
from ..ledger import Ledger, new_id
from ..models import PricePoint, Product, WishlistEntry
from ..pricing import format_eur
from ..store import EntityKind

logger = logging.getLogger(__name__)


class WishlistSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"


def filter_and_sort(
    entries: list[WishlistEntry],
    query: str = "",
    sort: WishlistSort | str = WishlistSort.NEWEST,
) -> list[WishlistEntry]:
    """Case-insensitive substring filter over title/seller, then sort."""
    needle = query.strip().lower()
    if needle:
        entries = [
            e for e in entries
            if needle in e.title.lower() or needle in (e.seller_name or "").lower()
        ]

    sort = WishlistSort(sort)
    if sort == WishlistSort.NEWEST:
        return sorted(entries, key=lambda e: e.added_at, reverse=True)
    if sort == WishlistSort.OLDEST:
        return sorted(entries, key=lambda e: e.added_at)
    if sort == WishlistSort.PRICE_LOW:
        return sorted(entries, key=lambda e: e.price)
    return sorted(entries, key=lambda e: e.price, reverse=True)


class WishlistLedger(Ledger):
    kind = EntityKind.WISHLIST
    sign_in_message = "Please sign in to add items to wishlist"

    # --- reads ---

    def entries(self) -> list[WishlistEntry]:
        return self._load()

    def list(self, query: str = "", sort: WishlistSort | str = WishlistSort.NEWEST) -> list[WishlistEntry]:
        return filter_and_sort(self._load(), query, sort)

    def count(self) -> int:
        return len(self._load())

    def contains(self, product_id: str) -> bool:
        return any(e.product_id == str(product_id) for e in self._load())

    def share_summary(self, currency_symbol: str = "€") -> dict:
        entries = self._load()
        total_value = sum((e.price for e in entries), Decimal("0"))
        return {
            "items": [
                {"title": e.title, "price": str(e.price), "image_url": e.image_url}
                for e in entries
            ],
            "total_items": len(entries),
            "total_value": str(total_value),
            "share_text": (
                f"Check out my wishlist! {len(entries)} items worth "
                f"{format_eur(total_value, currency_symbol)}"
            ),
        }

    # --- mutations ---

    @operation
    def toggle(self, product: Product | dict) -> bool:
        """Save the product, or remove it if already saved.

        Returns:
            True if the product is now saved, False if it was removed.
        """
        user_id = self._require_user()
        product = self._product(product)
        entries = self._load(user_id)

        existing = next((e for e in entries if e.product_id == product.id), None)
        if existing:
            entries.remove(existing)
            saved = False
        else:
            now = self.clock()
            entries.append(WishlistEntry(
                id=new_id(),
                product_id=product.id,
                title=product.title,
                price=product.price,
                original_price=product.original_price,
                image_url=product.image_url,
                seller_name=product.seller_name,
                rating=product.rating or 4,
                added_at=now,
                price_history=[PricePoint(price=product.price, date=now)],
            ))
            saved = True

        self._commit(user_id, entries)
        if saved:
            self.bus.notify(NotificationType.SUCCESS, "Added to wishlist!")
        else:
            self.bus.notify(NotificationType.INFO, "Removed from wishlist")
        return saved

    @operation
    def remove(self, entry_id: str) -> list[WishlistEntry]:
        user_id = self._require_user()
        entries = self._load(user_id)
        entries.remove(self._find(entries, entry_id))
        self._commit(user_id, entries)
        self.bus.notify(NotificationType.INFO, "Removed from wishlist")
        return entries

    @operation
    def record_price(self, product_id: str, price: Decimal) -> Optional[WishlistEntry]:
        """Append an observed price to the entry's history (append-only)."""
        user_id = self._require_user()
        entries = self._load(user_id)
        entry = next((e for e in entries if e.product_id == str(product_id)), None)
        if entry is None:
            raise NotFound("Product is not in your wishlist")

        now = self.clock()
        entry.price = Decimal(price)
        entry.last_price_check = now
        entry.price_history.append(PricePoint(price=entry.price, date=now))
        self._commit(user_id, entries)
        return entry

    @operation
    def move_to_cart(self, entry_id: str, cart) -> Optional[list]:
        """Add a saved entry's product to the cart; the entry stays saved."""
        user_id = self._require_user()
        entry = self._find(self._load(user_id), entry_id)
        return cart.add_item(Product(
            id=entry.product_id,
            title=entry.title,
            price=entry.price,
            image_url=entry.image_url,
            seller_name=entry.seller_name,
        ))

    # --- internals ---

    @staticmethod
    def _find(entries: list[WishlistEntry], entry_id: str) -> WishlistEntry:
        entry = next((e for e in entries if e.id == str(entry_id)), None)
        if entry is None:
            raise NotFound("Item not found in wishlist")
        return entry

    def _commit(self, user_id: str, entries: list[WishlistEntry]) -> None:
        self._save(user_id, entries)
        self.bus.publish(WishlistUpdated(count=len(entries)))
