"""Pricing Calculator - subtotal, fees, shipping and discounts."""

from .calculator import (
    PricingCalculator,
    cart_totals,
    consolidation_fee,
    coupon_discount,
    estimated_total,
    inspection_fee,
    line_total,
    quote,
    service_fee,
    shipping_cost,
    subtotal,
    total_weight,
    unit_price,
)
from .models import CartTotals, CheckoutQuote, Coupon, CouponType, ShippingOption, format_eur, money

__all__ = [
    "CartTotals",
    "CheckoutQuote",
    "Coupon",
    "CouponType",
    "PricingCalculator",
    "ShippingOption",
    "cart_totals",
    "consolidation_fee",
    "coupon_discount",
    "estimated_total",
    "format_eur",
    "inspection_fee",
    "line_total",
    "money",
    "quote",
    "service_fee",
    "shipping_cost",
    "subtotal",
    "total_weight",
    "unit_price",
]
