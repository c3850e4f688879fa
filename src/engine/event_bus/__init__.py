"""Event Bus - typed in-process publish/subscribe."""

from .bus import EventBus
from .messages import (
    BusMessage,
    CartUpdated,
    NotificationType,
    PriceAlertsUpdated,
    ShowNotification,
    Topic,
    WalletUpdated,
    WishlistUpdated,
)

__all__ = [
    "BusMessage",
    "CartUpdated",
    "EventBus",
    "NotificationType",
    "PriceAlertsUpdated",
    "ShowNotification",
    "Topic",
    "WalletUpdated",
    "WishlistUpdated",
]
