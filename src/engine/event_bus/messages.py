"""Typed messages carried on the event bus, one variant per topic."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict

from ..models import LineItem, PriceAlert


class Topic(str, Enum):
    """Event bus channels; values match the browser event names."""
    CART_UPDATED = "cartUpdated"
    WISHLIST_UPDATED = "wishlistUpdated"
    PRICE_ALERTS_UPDATED = "priceAlertsUpdated"
    WALLET_UPDATED = "walletUpdated"
    SHOW_NOTIFICATION = "showNotification"


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"


class BusMessage(BaseModel):
    """Base for all bus messages. Subclasses pin their topic."""
    model_config = ConfigDict(frozen=True)

    topic: ClassVar[Topic]


class CartUpdated(BusMessage):
    """Full settled cart after a mutation."""
    topic: ClassVar[Topic] = Topic.CART_UPDATED
    items: tuple[LineItem, ...] = ()


class WishlistUpdated(BusMessage):
    topic: ClassVar[Topic] = Topic.WISHLIST_UPDATED
    count: int = 0


class PriceAlertsUpdated(BusMessage):
    topic: ClassVar[Topic] = Topic.PRICE_ALERTS_UPDATED
    alerts: tuple[PriceAlert, ...] = ()


class WalletUpdated(BusMessage):
    """Published by the external wallet component."""
    topic: ClassVar[Topic] = Topic.WALLET_UPDATED
    balance: Optional[Decimal] = None


class ShowNotification(BusMessage):
    """A user-facing toast."""
    topic: ClassVar[Topic] = Topic.SHOW_NOTIFICATION
    type: NotificationType = NotificationType.INFO
    message: str
