"""Catalog products and the FX audit trail stored alongside their prices."""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID, uuid4

from catalog_fx.domain.value_objects import PriceField, ProductStatus

# Stable metadata keys shared with external tooling.
ORIGINAL_CURRENCY = "original_currency"
ORIGINAL_REGULAR_PRICE = "original_regular_price"
ORIGINAL_SALE_PRICE = "original_sale_price"
FX_RATE_USED = "fx_rate_used"
FX_CONVERTED_AT = "fx_converted_at"
LAST_CONVERTED_REGULAR_OUTPUT = "last_converted_regular_output"
LAST_CONVERTED_SALE_OUTPUT = "last_converted_sale_output"

AUDIT_META_KEYS = (
    ORIGINAL_CURRENCY,
    ORIGINAL_REGULAR_PRICE,
    ORIGINAL_SALE_PRICE,
    FX_RATE_USED,
    FX_CONVERTED_AT,
    LAST_CONVERTED_REGULAR_OUTPUT,
    LAST_CONVERTED_SALE_OUTPUT,
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class FxAuditTrail:
    """Record of the last currency conversion applied to a product.

    ``original_*_price`` hold the vendor-currency input exactly as received;
    ``last_converted_*_output`` hold the base-currency value that was written
    and serve as the baseline for detecting a fresh vendor-currency write.
    A field set to None is absent from the persisted metadata.
    """

    original_currency: str | None = None
    original_regular_price: str | None = None
    original_sale_price: str | None = None
    fx_rate_used: Decimal | None = None
    fx_converted_at: datetime | None = None
    last_converted_regular_output: str | None = None
    last_converted_sale_output: str | None = None

    @property
    def is_converted(self) -> bool:
        return self.fx_converted_at is not None

    def baseline_for(self, price_field: PriceField) -> str | None:
        if price_field == PriceField.SALE:
            return self.last_converted_sale_output
        return self.last_converted_regular_output

    def record_original(self, price_field: PriceField, value: str) -> None:
        if price_field == PriceField.SALE:
            self.original_sale_price = value
        else:
            self.original_regular_price = value

    def record_output(self, price_field: PriceField, value: str) -> None:
        if price_field == PriceField.SALE:
            self.last_converted_sale_output = value
        else:
            self.last_converted_regular_output = value

    def clear_sale(self) -> None:
        """Forget the sale baseline so a re-introduced sale price converts."""
        self.original_sale_price = None
        self.last_converted_sale_output = None

    def stamp(self, currency: str, rate: Decimal, converted_at: datetime) -> None:
        self.original_currency = currency.upper()
        self.fx_rate_used = rate
        self.fx_converted_at = converted_at

    def to_meta(self) -> dict[str, str]:
        """Serialize the set fields to metadata strings."""
        meta: dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, datetime):
                meta[f.name] = value.isoformat()
            else:
                meta[f.name] = str(value)
        return meta

    @classmethod
    def from_meta(cls, meta: Mapping[str, str]) -> "FxAuditTrail":
        """Build a trail from stored metadata, ignoring unreadable values."""
        trail = cls(
            original_currency=meta.get(ORIGINAL_CURRENCY) or None,
            original_regular_price=meta.get(ORIGINAL_REGULAR_PRICE) or None,
            original_sale_price=meta.get(ORIGINAL_SALE_PRICE) or None,
            last_converted_regular_output=meta.get(LAST_CONVERTED_REGULAR_OUTPUT)
            or None,
            last_converted_sale_output=meta.get(LAST_CONVERTED_SALE_OUTPUT) or None,
        )
        raw_rate = meta.get(FX_RATE_USED)
        if raw_rate:
            try:
                trail.fx_rate_used = Decimal(raw_rate)
            except InvalidOperation:
                trail.fx_rate_used = None
        raw_converted_at = meta.get(FX_CONVERTED_AT)
        if raw_converted_at:
            try:
                trail.fx_converted_at = datetime.fromisoformat(raw_converted_at)
            except ValueError:
                trail.fx_converted_at = None
        return trail


@dataclass
class Product:
    """A vendor's catalog product or a variation of one.

    Prices are kept as the stored text: an importer may have written a
    vendor-currency value, a malformed value, or nothing at all.
    """

    name: str
    id: UUID = field(default_factory=uuid4)
    owner_id: UUID | None = None
    parent_id: UUID | None = None
    status: ProductStatus = ProductStatus.PUBLISH
    import_source: str | None = None
    stock_quantity: int | None = None
    regular_price: str | None = None
    sale_price: str | None = None
    price: str | None = None
    fx_audit: FxAuditTrail = field(default_factory=FxAuditTrail)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def set_price(self, price_field: PriceField, value: str | None) -> None:
        if price_field == PriceField.SALE:
            self.sale_price = value
        else:
            self.regular_price = value

    def sync_active_price(self) -> None:
        """Point the active price at the sale price, else the regular price."""
        active = self.sale_price or self.regular_price
        if active:
            self.price = active

    def touch(self) -> None:
        self.updated_at = _utc_now()
