"""Cart pricing calculator.

Pure functions over line items. Rates come from a FeeSchedule; the
defaults are the storefront's published fees:

    line total       = unit price × qty + (inspection ? 6.99 × qty : 0)
    service fee      = 1.50 per distinct line (not per unit)
    inspection fee   = Σ 6.99 × qty over inspected lines
    consolidation    = 5.00 once if any line requests it
    estimated total  = subtotal + service + inspection + consolidation

Everything accumulates in Decimal at full precision; rounding to cents
happens only in ``money()`` at presentation time.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ...common.config import FeeSchedule
from ...common.errors import ValidationFailed
from ..models import LineItem
from .models import CartTotals, CheckoutQuote, Coupon, CouponType, ShippingOption, format_eur

logger = logging.getLogger(__name__)

DEFAULT_FEES = FeeSchedule()
ZERO = Decimal("0")


def unit_price(item: LineItem) -> Decimal:
    """Base price plus every selected variant's adjustment."""
    return item.price + sum((v.price_adjustment for v in item.variants), ZERO)


def line_total(item: LineItem, fees: FeeSchedule = DEFAULT_FEES) -> Decimal:
    total = unit_price(item) * item.quantity
    if item.addons.quality_inspection:
        total += fees.quality_inspection_per_unit * item.quantity
    return total


def subtotal(items: Iterable[LineItem]) -> Decimal:
    return sum((unit_price(item) * item.quantity for item in items), ZERO)


def service_fee(items: Sequence[LineItem], fees: FeeSchedule = DEFAULT_FEES) -> Decimal:
    return fees.service_fee_per_line * len(items)


def inspection_fee(items: Iterable[LineItem], fees: FeeSchedule = DEFAULT_FEES) -> Decimal:
    return sum(
        (
            fees.quality_inspection_per_unit * item.quantity
            for item in items
            if item.addons.quality_inspection
        ),
        ZERO,
    )


def consolidation_fee(items: Iterable[LineItem], fees: FeeSchedule = DEFAULT_FEES) -> Decimal:
    if any(item.addons.package_consolidation for item in items):
        return fees.package_consolidation_flat
    return ZERO


def estimated_total(items: Sequence[LineItem], fees: FeeSchedule = DEFAULT_FEES) -> Decimal:
    return (
        subtotal(items)
        + service_fee(items, fees)
        + inspection_fee(items, fees)
        + consolidation_fee(items, fees)
    )


def cart_totals(items: Sequence[LineItem], fees: FeeSchedule = DEFAULT_FEES) -> CartTotals:
    return CartTotals(
        line_count=len(items),
        item_count=sum(item.quantity for item in items),
        subtotal=subtotal(items),
        service_fee=service_fee(items, fees),
        inspection_fee=inspection_fee(items, fees),
        consolidation_fee=consolidation_fee(items, fees),
    )


# --- Checkout ---

def total_weight(items: Iterable[LineItem], fees: FeeSchedule = DEFAULT_FEES) -> Decimal:
    """Shipping weight in kg; lines without a weight count as the default."""
    return sum(
        ((item.weight or fees.default_item_weight_kg) * item.quantity for item in items),
        ZERO,
    )


def shipping_cost(
    items: Iterable[LineItem],
    option: Optional[ShippingOption],
    fees: FeeSchedule = DEFAULT_FEES,
) -> Decimal:
    """Base price plus per-kg rate on weight above the free allowance."""
    if option is None:
        return ZERO
    excess = max(ZERO, total_weight(items, fees) - fees.free_weight_kg)
    return option.base_price + excess * option.price_per_kg


def coupon_discount(base_amount: Decimal, coupon: Optional[Coupon]) -> Decimal:
    """Percentage of the base, or a fixed amount capped at the base."""
    if coupon is None:
        return ZERO
    if CouponType(coupon.type) == CouponType.PERCENTAGE:
        return base_amount * coupon.value / 100
    return min(coupon.value, base_amount)


def validate_coupon(coupon: Coupon, items: Sequence[LineItem]) -> None:
    """Raise ValidationFailed if the cart does not qualify for the coupon."""
    if coupon.min_order_amount and subtotal(items) < coupon.min_order_amount:
        raise ValidationFailed(
            f"Minimum order amount of {format_eur(coupon.min_order_amount)} "
            f"required for this coupon"
        )


def quote(
    items: Sequence[LineItem],
    shipping: Optional[ShippingOption] = None,
    coupon: Optional[Coupon] = None,
    fees: FeeSchedule = DEFAULT_FEES,
) -> CheckoutQuote:
    """Full checkout figures for a cart."""
    if coupon is not None:
        validate_coupon(coupon, items)

    result = CheckoutQuote(
        totals=cart_totals(items, fees),
        total_weight=total_weight(items, fees),
        shipping_cost=shipping_cost(items, shipping, fees),
        shipping_option_id=shipping.id if shipping else None,
        coupon_code=coupon.code if coupon else None,
    )
    result.discount = coupon_discount(result.pre_discount_total, coupon)
    return result


class PricingCalculator:
    """Binds the pricing functions to one fee schedule.

    Usage:
        calc = PricingCalculator(settings.fees)
        totals = calc.totals(items)
        print(format_eur(totals.estimated_total))
    """

    def __init__(self, fees: FeeSchedule | None = None) -> None:
        self.fees = fees or DEFAULT_FEES

    def line_total(self, item: LineItem) -> Decimal:
        return line_total(item, self.fees)

    def totals(self, items: Sequence[LineItem]) -> CartTotals:
        return cart_totals(items, self.fees)

    def estimated_total(self, items: Sequence[LineItem]) -> Decimal:
        return estimated_total(items, self.fees)

    def quote(
        self,
        items: Sequence[LineItem],
        shipping: Optional[ShippingOption] = None,
        coupon: Optional[Coupon] = None,
    ) -> CheckoutQuote:
        result = quote(items, shipping, coupon, self.fees)
        logger.debug(
            "Quote: %d line(s), total %s", result.totals.line_count, format_eur(result.order_total)
        )
        return result
