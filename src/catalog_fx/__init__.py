from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.products import FxAuditTrail, Product
from catalog_fx.domain.value_objects import PriceField, ProductStatus
from catalog_fx.domain.vendors import VendorCurrencySetting

__all__ = [
    "ExchangeRate",
    "FxAuditTrail",
    "PriceField",
    "Product",
    "ProductStatus",
    "VendorCurrencySetting",
]

__version__ = "0.1.0"
