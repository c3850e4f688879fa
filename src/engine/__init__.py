# Local commerce-state engine
"""
Cart, wishlist and price-alert ledgers over a keyed local store, with an
in-process event bus that keeps header badges and other surfaces in sync.
"""

from .auth import AuthContext, Identity
from .badges import HeaderBadges
from .cart import CartLedger
from .event_bus import EventBus, Topic
from .price_alerts import PriceAlertRegistry
from .store import KeyedLocalStore
from .wishlist import WishlistLedger

__all__ = [
    "AuthContext",
    "CartLedger",
    "EventBus",
    "HeaderBadges",
    "Identity",
    "KeyedLocalStore",
    "PriceAlertRegistry",
    "Topic",
    "WishlistLedger",
]
