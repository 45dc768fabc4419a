from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.products import AUDIT_META_KEYS, FxAuditTrail, Product
from catalog_fx.domain.value_objects import (
    PriceField,
    ProductStatus,
    normalize_currency_code,
)
from catalog_fx.domain.vendors import VendorCurrencySetting

__all__ = [
    "AUDIT_META_KEYS",
    "ExchangeRate",
    "FxAuditTrail",
    "PriceField",
    "Product",
    "ProductStatus",
    "VendorCurrencySetting",
    "normalize_currency_code",
]
