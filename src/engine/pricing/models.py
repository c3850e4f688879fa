"""Data models for cart and checkout pricing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

CENT = Decimal("0.01")


def money(amount: Decimal) -> Decimal:
    """Round to cents. Presentation only; never feed the result back into sums."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_eur(amount: Decimal, symbol: str = "€") -> str:
    return f"{symbol}{money(amount)}"


class CouponType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass
class ShippingOption:
    """A shipping tier: flat base price plus a rate per kg over the free weight."""

    id: str
    name: str
    base_price: Decimal
    price_per_kg: Decimal
    estimated_days: Optional[str] = None


@dataclass
class Coupon:
    """A checkout discount code."""

    code: str
    type: CouponType
    value: Decimal
    min_order_amount: Optional[Decimal] = None


@dataclass
class CartTotals:
    """Cart panel summary. Fields hold full-precision amounts."""

    line_count: int
    item_count: int
    subtotal: Decimal
    service_fee: Decimal
    inspection_fee: Decimal
    consolidation_fee: Decimal

    @property
    def estimated_total(self) -> Decimal:
        return self.subtotal + self.service_fee + self.inspection_fee + self.consolidation_fee

    def to_dict(self) -> dict:
        return {
            "line_count": self.line_count,
            "item_count": self.item_count,
            "subtotal": str(money(self.subtotal)),
            "service_fee": str(money(self.service_fee)),
            "inspection_fee": str(money(self.inspection_fee)),
            "consolidation_fee": str(money(self.consolidation_fee)),
            "estimated_total": str(money(self.estimated_total)),
        }


@dataclass
class CheckoutQuote:
    """Checkout summary: cart totals plus shipping and coupon discount."""

    totals: CartTotals
    total_weight: Decimal
    shipping_cost: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    shipping_option_id: Optional[str] = None
    coupon_code: Optional[str] = None

    @property
    def pre_discount_total(self) -> Decimal:
        return self.totals.estimated_total + self.shipping_cost

    @property
    def order_total(self) -> Decimal:
        return self.pre_discount_total - self.discount

    def to_dict(self) -> dict:
        return {
            **self.totals.to_dict(),
            "total_weight": str(self.total_weight),
            "shipping_option_id": self.shipping_option_id,
            "shipping_cost": str(money(self.shipping_cost)),
            "coupon_code": self.coupon_code,
            "discount": str(money(self.discount)),
            "order_total": str(money(self.order_total)),
        }
