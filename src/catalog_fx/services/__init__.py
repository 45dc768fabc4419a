from catalog_fx.services.conversion import (
    convert_to_base,
    format_price,
    parse_price,
    prices_match,
)
from catalog_fx.services.currency import (
    RateLookupServiceImpl,
    VendorCurrencyServiceImpl,
)
from catalog_fx.services.import_sync import ImportSyncHook
from catalog_fx.services.interfaces import (
    RateLookupService,
    RateProvider,
    RateQuote,
    VendorCurrencyResolver,
)
from catalog_fx.services.price_conversion import PriceConversionEngine
from catalog_fx.services.rate_updater import FrankfurterRateProvider, RateUpdaterService

__all__ = [
    "FrankfurterRateProvider",
    "ImportSyncHook",
    "PriceConversionEngine",
    "RateLookupService",
    "RateLookupServiceImpl",
    "RateProvider",
    "RateQuote",
    "RateUpdaterService",
    "VendorCurrencyResolver",
    "VendorCurrencyServiceImpl",
    "convert_to_base",
    "format_price",
    "parse_price",
    "prices_match",
]
