"""Periodic price checks for the signed-in user's armed alerts.

Usage:
    poller = PriceAlertPoller(registry, RandomWalkFeed(), interval=300)
    poller.start()          # inside a running event loop
    ...
    await poller.stop()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ...common.config import settings
from .feeds import PriceFeed
from .registry import PriceAlertRegistry

logger = logging.getLogger(__name__)


class PriceAlertPoller:
    def __init__(
        self,
        registry: PriceAlertRegistry,
        feed: PriceFeed,
        interval: float | None = None,
    ) -> None:
        self.registry = registry
        self.feed = feed
        self.interval = interval if interval is not None else settings.price_alerts.check_interval_seconds
        self.rounds = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> list:
        """One check round. Signed-out users are skipped silently."""
        self.rounds += 1
        if self.registry.auth.user_id is None:
            return []
        return self.registry.check_prices(self.feed) or []

    async def run(self, max_rounds: int | None = None) -> None:
        """Check, sleep, repeat until cancelled or ``max_rounds`` is reached."""
        logger.info("Price alert poller started (every %.0fs)", self.interval)
        try:
            while max_rounds is None or self.rounds < max_rounds:
                try:
                    await self.run_once()
                except Exception:
                    logger.exception("Price check round %d failed", self.rounds)
                if max_rounds is not None and self.rounds >= max_rounds:
                    break
                await asyncio.sleep(self.interval)
        finally:
            logger.info("Price alert poller stopped after %d round(s)", self.rounds)

    def start(self) -> asyncio.Task:
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
