"""Realtime push subscriptions over Supabase channels.

Subscriptions are kept under string keys (``tickets_{user_id}``) so a
session can drop exactly the channels it opened.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict], None]


class RealtimeSync:
    def __init__(self, backend) -> None:
        self.backend = backend
        self._channels: dict[str, Any] = {}

    @property
    def keys(self) -> list[str]:
        return list(self._channels)

    async def subscribe_to_support_tickets(self, user_id: str, on_change: ChangeCallback) -> str:
        """Push every insert/update/delete on the user's tickets to ``on_change``."""
        return await self._subscribe(
            key=f"tickets_{user_id}",
            channel_name="support_tickets",
            table="support_tickets",
            filter=f"user_id=eq.{user_id}",
            on_change=on_change,
        )

    async def subscribe_to_support_messages(self, ticket_id: str, on_change: ChangeCallback) -> str:
        return await self._subscribe(
            key=f"messages_{ticket_id}",
            channel_name=f"support_messages_{ticket_id}",
            table="support_messages",
            filter=f"ticket_id=eq.{ticket_id}",
            on_change=on_change,
        )

    async def _subscribe(
        self,
        key: str,
        channel_name: str,
        table: str,
        filter: str,
        on_change: ChangeCallback,
    ) -> str:
        if key in self._channels:
            await self.unsubscribe(key)

        client = await self.backend.client()
        channel = client.channel(channel_name)
        channel.on_postgres_changes(
            "*",
            schema="public",
            table=table,
            filter=filter,
            callback=on_change,
        )
        await channel.subscribe()
        self._channels[key] = channel
        logger.info("Realtime: subscribed %s (%s, %s)", key, table, filter)
        return key

    async def unsubscribe(self, key: str) -> None:
        channel = self._channels.pop(key, None)
        if channel is None:
            return
        try:
            await channel.unsubscribe()
        except Exception as e:
            logger.warning("Realtime: unsubscribe %s failed: %s", key, e)
        else:
            logger.info("Realtime: unsubscribed %s", key)

    async def unsubscribe_all(self) -> None:
        for key in list(self._channels):
            await self.unsubscribe(key)
