"""Price sources for alert evaluation.

Any callable ``(alert) -> Decimal | None`` is a feed; ``None`` means no
quote for that product this round.
"""

from __future__ import annotations

import random
from decimal import Decimal
from typing import Mapping, Optional, Protocol

from ..models import PriceAlert
from ..pricing import money


class PriceFeed(Protocol):
    def __call__(self, alert: PriceAlert) -> Optional[Decimal]: ...


class StaticPriceFeed:
    """Quotes from a product_id → price mapping (externally fed prices)."""

    def __init__(self, prices: Mapping[str, Decimal]) -> None:
        self.prices = {str(k): Decimal(v) for k, v in prices.items()}

    def __call__(self, alert: PriceAlert) -> Optional[Decimal]:
        return self.prices.get(alert.product_id)


class RandomWalkFeed:
    """Demo feed: last observed price ± step/2, never below ``floor``."""

    def __init__(
        self,
        step: Decimal = Decimal("10"),
        floor: Decimal = Decimal("1"),
        rng: random.Random | None = None,
    ) -> None:
        self.step = Decimal(step)
        self.floor = Decimal(floor)
        self.rng = rng or random.Random()

    def __call__(self, alert: PriceAlert) -> Decimal:
        change = (Decimal(str(self.rng.random())) - Decimal("0.5")) * self.step
        return max(self.floor, money(alert.current_price + change))
