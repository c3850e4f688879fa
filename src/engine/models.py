"""Persisted entity schemas for the commerce-state engine.

These models define what the Keyed Local Store writes for each entity kind.
Field validation aliases accept the legacy camelCase / marketplace field
names so older persisted collections migrate on read.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Lenient price parsing: unparseable or missing prices become ``default``."""
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


# === Enums ===

class AlertType(str, Enum):
    """Direction of a price watch."""
    BELOW = "below"
    ABOVE = "above"


# === Cart ===

class Addons(BaseModel):
    """Optional paid services attached to a cart line."""
    quality_inspection: bool = Field(
        default=False, validation_alias=AliasChoices("quality_inspection", "qualityInspection")
    )
    package_consolidation: bool = Field(
        default=False, validation_alias=AliasChoices("package_consolidation", "packageConsolidation")
    )


class VariantSelection(BaseModel):
    """A chosen product option and the amount it adds to the unit price."""
    name: str
    value: str
    price_adjustment: Decimal = Field(
        default=Decimal("0"), validation_alias=AliasChoices("price_adjustment", "price_diff")
    )


class LineItem(BaseModel):
    """One cart entry: a product, its quantity and selected add-ons."""
    id: str
    title: str
    price: Decimal = Field(ge=0, description="Unit price (EUR)")
    quantity: int = Field(ge=1)
    image_url: str = ""
    seller_name: Optional[str] = None
    weight: Optional[Decimal] = Field(default=None, ge=0, description="Weight per unit (kg)")
    addons: Addons = Field(default_factory=Addons)
    variants: list[VariantSelection] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("addons", mode="before")
    @classmethod
    def _missing_addons(cls, v: Any) -> Any:
        return {} if v is None else v

    @classmethod
    def from_product(cls, product: Product, quantity: int = 1) -> LineItem:
        return cls(
            id=product.id,
            title=product.title,
            price=product.price,
            quantity=quantity,
            image_url=product.image_url,
            seller_name=product.seller_name,
            weight=product.weight,
            variants=list(product.variants),
        )


class Product(BaseModel):
    """Catalogue product as handed over by the UI (not persisted)."""
    id: str = Field(validation_alias=AliasChoices("id", "num_iid", "product_id", "productId"))
    title: str
    price: Decimal = Decimal("0")
    image_url: str = Field(default="", validation_alias=AliasChoices("image_url", "pic_url"))
    seller_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("seller_name", "nick"))
    weight: Optional[Decimal] = Field(default=None, validation_alias=AliasChoices("weight", "item_weight"))
    original_price: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("original_price", "originalPrice")
    )
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    variants: list[VariantSelection] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("price", mode="before")
    @classmethod
    def _lenient_price(cls, v: Any) -> Decimal:
        return _to_decimal(v)

    @field_validator("original_price", "weight", mode="before")
    @classmethod
    def _lenient_optional(cls, v: Any) -> Optional[Decimal]:
        if v is None or v == "" or v == 0:
            return None
        return _to_decimal(v)

    @field_validator("rating", mode="before")
    @classmethod
    def _whole_star_rating(cls, v: Any) -> Optional[int]:
        if v in (None, "", 0):
            return None
        return min(5, max(1, round(float(v))))

    @classmethod
    def coerce(cls, product: Product | dict) -> Product:
        """Accept either a Product or a raw marketplace dict."""
        if isinstance(product, Product):
            return product
        return cls.model_validate(product)


# === Wishlist ===

class PricePoint(BaseModel):
    """A single observed price in a wishlist entry's history."""
    price: Decimal
    date: datetime


class WishlistEntry(BaseModel):
    """A saved product. ``id`` is per save event, ``product_id`` dedupes."""
    id: str
    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    title: str
    price: Decimal = Field(ge=0)
    original_price: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("original_price", "originalPrice")
    )
    image_url: str = ""
    seller_name: Optional[str] = None
    rating: int = Field(default=4, ge=1, le=5)
    added_at: datetime = Field(validation_alias=AliasChoices("added_at", "addedAt"))
    last_price_check: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("last_price_check", "lastPriceCheck")
    )
    price_history: list[PricePoint] = Field(
        default_factory=list, validation_alias=AliasChoices("price_history", "priceHistory")
    )

    @field_validator("id", "product_id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("rating", mode="before")
    @classmethod
    def _default_rating(cls, v: Any) -> Any:
        return 4 if v in (None, 0) else v

    @property
    def discount_percent(self) -> int:
        """Whole-percent markdown from original price, 0 when not discounted."""
        if not self.original_price or self.original_price <= self.price:
            return 0
        ratio = (self.original_price - self.price) / self.original_price * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# === Price alerts ===

class PriceAlert(BaseModel):
    """A user-defined target-price watch on one product."""
    id: str
    product_id: str = Field(validation_alias=AliasChoices("product_id", "productId"))
    product_title: str = Field(validation_alias=AliasChoices("product_title", "productTitle"))
    product_image: str = Field(default="", validation_alias=AliasChoices("product_image", "productImage"))
    current_price: Decimal = Field(validation_alias=AliasChoices("current_price", "currentPrice"))
    target_price: Decimal = Field(gt=0, validation_alias=AliasChoices("target_price", "targetPrice"))
    alert_type: AlertType = Field(
        default=AlertType.BELOW, validation_alias=AliasChoices("alert_type", "alertType")
    )
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"))
    created_at: datetime = Field(validation_alias=AliasChoices("created_at", "createdAt"))
    triggered_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("triggered_at", "triggeredAt")
    )

    @field_validator("id", "product_id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @model_validator(mode="after")
    def _triggered_is_inactive(self) -> PriceAlert:
        if self.triggered_at is not None and self.is_active:
            self.is_active = False
        return self

    @property
    def is_armed(self) -> bool:
        """Eligible for automatic evaluation."""
        return self.is_active and self.triggered_at is None
