"""Dependency injection container for Catalog FX.

Provides lazily built, cached access to the database, repositories and
services, all configured from one Settings instance.

Usage:
    from catalog_fx.container import get_container

    container = get_container()
    engine = container.conversion_engine
"""

from functools import cached_property, lru_cache

from catalog_fx.config import Settings, get_settings
from catalog_fx.logging_config import get_logger
from catalog_fx.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteExchangeRateRepository,
    SQLiteProductRepository,
    SQLiteVendorCurrencyRepository,
)
from catalog_fx.services.currency import RateLookupServiceImpl, VendorCurrencyServiceImpl
from catalog_fx.services.import_sync import ImportSyncHook
from catalog_fx.services.price_conversion import PriceConversionEngine
from catalog_fx.services.rate_updater import FrankfurterRateProvider, RateUpdaterService

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    The container can be configured with custom settings or an existing
    database for testing:

        container = Container(settings=Settings(), database=SQLiteDatabase(":memory:"))
    """

    def __init__(
        self,
        settings: Settings | None = None,
        database: SQLiteDatabase | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._provided_database = database
        logger.debug(
            "container_created",
            base_currency=self._settings.base_currency,
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @cached_property
    def database(self) -> SQLiteDatabase:
        """Get the initialized SQLite database."""
        if self._provided_database is not None:
            db = self._provided_database
        else:
            db_path = str(self._settings.sqlite_path)
            logger.info("initializing_sqlite_database", path=db_path)
            db = SQLiteDatabase(db_path, check_same_thread=False)
        db.initialize()
        return db

    @cached_property
    def exchange_rate_repository(self) -> SQLiteExchangeRateRepository:
        return SQLiteExchangeRateRepository(self.database)

    @cached_property
    def vendor_currency_repository(self) -> SQLiteVendorCurrencyRepository:
        return SQLiteVendorCurrencyRepository(self.database)

    @cached_property
    def product_repository(self) -> SQLiteProductRepository:
        return SQLiteProductRepository(self.database)

    @cached_property
    def rate_lookup(self) -> RateLookupServiceImpl:
        return RateLookupServiceImpl(self.exchange_rate_repository)

    @cached_property
    def vendor_currency_service(self) -> VendorCurrencyServiceImpl:
        return VendorCurrencyServiceImpl(
            self.vendor_currency_repository,
            base_currency=self._settings.base_currency,
            allowed_currencies=self._settings.vendor_currencies,
        )

    @cached_property
    def conversion_engine(self) -> PriceConversionEngine:
        """Get the price conversion decision engine."""
        return PriceConversionEngine(
            rate_lookup=self.rate_lookup,
            vendor_currencies=self.vendor_currency_service,
            product_repo=self.product_repository,
            base_currency=self._settings.base_currency,
            price_decimals=self._settings.price_decimals,
        )

    @cached_property
    def import_hook(self) -> ImportSyncHook:
        return ImportSyncHook(
            self.product_repository,
            self.conversion_engine,
            source_marker=self._settings.import_source_marker,
        )

    @cached_property
    def rate_provider(self) -> FrankfurterRateProvider:
        return FrankfurterRateProvider(
            api_url=self._settings.rate_api_url,
            timeout=self._settings.rate_api_timeout,
            source_label=self._settings.rate_source_label,
        )

    @cached_property
    def rate_updater(self) -> RateUpdaterService:
        return RateUpdaterService(
            self.rate_provider,
            self.rate_lookup,
            base_currency=self._settings.base_currency,
            target_currencies=self._settings.rate_target_currencies,
        )

    def close(self) -> None:
        """Close all resources held by the container."""
        if "rate_provider" in self.__dict__:
            self.rate_provider.close()
        if "database" in self.__dict__:
            logger.info("closing_database_connection")
            self.database.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


_container: Container | None = None


@lru_cache
def get_container() -> Container:
    """Get the global container singleton.

    For testing, create a Container directly with custom settings instead
    of using this function.
    """
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset the global container, closing its resources."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
    get_container.cache_clear()
