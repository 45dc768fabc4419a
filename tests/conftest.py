from collections.abc import Iterator
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from catalog_fx.config import Settings
from catalog_fx.domain.products import Product
from catalog_fx.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteExchangeRateRepository,
    SQLiteProductRepository,
    SQLiteVendorCurrencyRepository,
)
from catalog_fx.services.currency import RateLookupServiceImpl, VendorCurrencyServiceImpl
from catalog_fx.services.price_conversion import PriceConversionEngine

FIXED_NOW = datetime(2026, 3, 2, 9, 30, tzinfo=UTC)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        base_currency="GBP",
        sqlite_path=":memory:",
        rate_target_currencies=["EUR", "CAD", "AED", "INR"],
    )


@pytest.fixture
def db() -> Iterator[SQLiteDatabase]:
    """Create an in-memory SQLite database for testing."""
    database = SQLiteDatabase(":memory:", check_same_thread=False)
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def rate_repo(db: SQLiteDatabase) -> SQLiteExchangeRateRepository:
    return SQLiteExchangeRateRepository(db)


@pytest.fixture
def vendor_repo(db: SQLiteDatabase) -> SQLiteVendorCurrencyRepository:
    return SQLiteVendorCurrencyRepository(db)


@pytest.fixture
def product_repo(db: SQLiteDatabase) -> SQLiteProductRepository:
    return SQLiteProductRepository(db)


@pytest.fixture
def rate_lookup(rate_repo: SQLiteExchangeRateRepository) -> RateLookupServiceImpl:
    return RateLookupServiceImpl(rate_repo)


@pytest.fixture
def vendor_currencies(
    vendor_repo: SQLiteVendorCurrencyRepository,
) -> VendorCurrencyServiceImpl:
    return VendorCurrencyServiceImpl(
        vendor_repo,
        base_currency="GBP",
        allowed_currencies=["GBP", "EUR", "CAD", "AED", "INR"],
    )


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def engine(
    rate_lookup: RateLookupServiceImpl,
    vendor_currencies: VendorCurrencyServiceImpl,
    product_repo: SQLiteProductRepository,
    fixed_now: datetime,
) -> PriceConversionEngine:
    return PriceConversionEngine(
        rate_lookup=rate_lookup,
        vendor_currencies=vendor_currencies,
        product_repo=product_repo,
        base_currency="GBP",
        clock=lambda: fixed_now,
    )


@pytest.fixture
def eur_vendor(
    vendor_currencies: VendorCurrencyServiceImpl, rate_lookup: RateLookupServiceImpl
) -> UUID:
    """A vendor pricing in EUR, with GBP/EUR stored at 1.17."""
    vendor_id = uuid4()
    vendor_currencies.set_currency(vendor_id, "EUR")
    rate_lookup.store_rate("GBP", "EUR", Decimal("1.17"), source="test")
    return vendor_id


@pytest.fixture
def gbp_vendor(vendor_currencies: VendorCurrencyServiceImpl) -> UUID:
    vendor_id = uuid4()
    vendor_currencies.set_currency(vendor_id, "GBP")
    return vendor_id


@pytest.fixture
def imported_product(
    product_repo: SQLiteProductRepository, eur_vendor: UUID
) -> Product:
    """A product the importer saved with a EUR price and no audit trail."""
    product = Product(
        name="Linen Shirt",
        owner_id=eur_vendor,
        import_source="syncspider",
        stock_quantity=10,
        regular_price="100.00",
        price="100.00",
    )
    product_repo.add(product)
    return product
