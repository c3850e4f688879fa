"""Header badges: cart units, wishlist size and wallet balance.

Counts are re-derived from the ledgers on every event rather than taken
from the message payload, so the badge always matches persisted state.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from .cart import CartLedger
from .event_bus import BusMessage, EventBus, Topic, WalletUpdated
from .wishlist import WishlistLedger

logger = logging.getLogger(__name__)


class HeaderBadges:
    def __init__(self, bus: EventBus, cart: CartLedger, wishlist: WishlistLedger) -> None:
        self.cart = cart
        self.wishlist = wishlist
        self.cart_count = cart.count()
        self.wishlist_count = wishlist.count()
        self.wallet_balance: Optional[Decimal] = None
        self._unsubscribers = [
            bus.subscribe(Topic.CART_UPDATED, self._on_cart),
            bus.subscribe(Topic.WISHLIST_UPDATED, self._on_wishlist),
            bus.subscribe(Topic.WALLET_UPDATED, self._on_wallet),
        ]

    def _on_cart(self, message: BusMessage) -> None:
        self.cart_count = self.cart.count()

    def _on_wishlist(self, message: BusMessage) -> None:
        self.wishlist_count = self.wishlist.count()

    def _on_wallet(self, message: WalletUpdated) -> None:
        self.wallet_balance = message.balance

    def refresh(self) -> None:
        """Re-read both counts, e.g. after sign-in or sign-out."""
        self.cart_count = self.cart.count()
        self.wishlist_count = self.wishlist.count()

    def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def to_dict(self) -> dict:
        return {
            "cart_count": self.cart_count,
            "wishlist_count": self.wishlist_count,
            "wallet_balance": str(self.wallet_balance) if self.wallet_balance is not None else None,
        }
