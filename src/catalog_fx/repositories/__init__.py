from catalog_fx.repositories.interfaces import (
    ExchangeRateRepository,
    ProductRepository,
    VendorCurrencyRepository,
)
from catalog_fx.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteExchangeRateRepository,
    SQLiteProductRepository,
    SQLiteVendorCurrencyRepository,
)

__all__ = [
    "ExchangeRateRepository",
    "ProductRepository",
    "SQLiteDatabase",
    "SQLiteExchangeRateRepository",
    "SQLiteProductRepository",
    "SQLiteVendorCurrencyRepository",
    "VendorCurrencyRepository",
]
