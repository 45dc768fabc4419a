"""Pydantic v2 schemas for API request/response models."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HealthResponse(BaseModel):
    """Schema for health check response."""

    status: str
    base_currency: str


# Exchange Rate Schemas
class ExchangeRateCreate(BaseModel):
    """Schema for storing an exchange rate manually."""

    model_config = ConfigDict(str_strip_whitespace=True)

    base_currency: str | None = Field(default=None, min_length=3, max_length=3)
    quote_currency: str = Field(..., min_length=3, max_length=3)
    rate: Decimal = Field(..., gt=0)
    source: str | None = Field(default="manual", max_length=50)


class ExchangeRateResponse(BaseModel):
    """Schema for exchange rate response."""

    base_currency: str
    quote_currency: str
    rate: str
    observed_at: datetime
    source: str | None


class RateRefreshResponse(BaseModel):
    stored: int


# Vendor Schemas
class VendorCurrencyUpdate(BaseModel):
    """Schema for assigning a vendor's currency."""

    model_config = ConfigDict(str_strip_whitespace=True)

    currency: str = Field(..., max_length=10)


class VendorCurrencyResponse(BaseModel):
    vendor_id: UUID
    currency: str


# Product Schemas
class _ProductWrite(BaseModel):
    """Fields shared by product create and update requests.

    Prices are kept as text; malformed values are stored but never converted.
    ``author``, ``vendor_id`` and ``seller_id`` identify the vendor the
    prices belong to, checked in that order.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    regular_price: str | None = None
    sale_price: str | None = None
    stock_quantity: int | None = None
    import_source: str | None = Field(default=None, max_length=50)
    status: str | None = Field(
        default=None,
        pattern=r"^(draft|pending|publish|private|auto-draft|trash)$",
    )
    author: UUID | None = None
    vendor_id: UUID | None = None
    seller_id: UUID | None = None

    @field_validator("regular_price", "sale_price", mode="before")
    @classmethod
    def coerce_price_to_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
            return str(v)
        return v

    def vendor_candidates(self) -> list[UUID | None]:
        return [self.author, self.vendor_id, self.seller_id]


class ProductCreate(_ProductWrite):
    """Schema for creating a product or variation."""

    name: str = Field(..., min_length=1, max_length=255)
    parent_id: UUID | None = None


class ProductUpdate(_ProductWrite):
    """Schema for updating a product; only the fields sent are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=255)


class ProductResponse(BaseModel):
    """Schema for product response."""

    id: UUID
    name: str
    owner_id: UUID | None
    parent_id: UUID | None
    status: str
    import_source: str | None
    stock_quantity: int | None
    regular_price: str | None
    sale_price: str | None
    price: str | None
    fx_audit: dict[str, str]
    created_at: datetime
    updated_at: datetime


class ReconcileResponse(BaseModel):
    converted: bool
    product: ProductResponse | None = None
