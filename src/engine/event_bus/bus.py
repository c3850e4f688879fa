"""In-process publish/subscribe channel for state-changed notifications.

Delivery is synchronous and best-effort: no persistence, no replay for
late subscribers. Each subscriber is isolated, so a handler that raises
is logged and the remaining handlers still run.

Usage:
    bus = EventBus()
    unsubscribe = bus.subscribe(Topic.CART_UPDATED, on_cart)
    bus.publish(CartUpdated(items=tuple(items)))
    unsubscribe()
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable

from .messages import BusMessage, NotificationType, ShowNotification, Topic

logger = logging.getLogger(__name__)

Handler = Callable[[BusMessage], None]
Unsubscribe = Callable[[], None]


class _Subscription:
    __slots__ = ("handler",)

    def __init__(self, handler: Handler) -> None:
        self.handler = handler


class EventBus:
    """Topic-keyed subscriber registry."""

    def __init__(self) -> None:
        self._subscriptions: dict[Topic, list[_Subscription]] = defaultdict(list)

    def subscribe(self, topic: Topic, handler: Handler) -> Unsubscribe:
        """Register ``handler`` for ``topic``; returns an idempotent unsubscribe handle."""
        topic = Topic(topic)
        subscription = _Subscription(handler)
        self._subscriptions[topic].append(subscription)

        def unsubscribe() -> None:
            subscriptions = self._subscriptions.get(topic, [])
            if subscription in subscriptions:
                subscriptions.remove(subscription)

        return unsubscribe

    def publish(self, message: BusMessage) -> None:
        """Deliver ``message`` to every current subscriber of its topic."""
        # Snapshot: handlers may unsubscribe during delivery
        for subscription in list(self._subscriptions.get(message.topic, ())):
            try:
                subscription.handler(message)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s", subscription.handler, message.topic.value
                )

    def notify(self, type: NotificationType | str, message: str) -> None:
        """Shortcut for publishing a ShowNotification."""
        self.publish(ShowNotification(type=NotificationType(type), message=message))

    def subscriber_count(self, topic: Topic) -> int:
        return len(self._subscriptions.get(Topic(topic), ()))
