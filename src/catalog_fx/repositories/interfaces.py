from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.products import Product
from catalog_fx.domain.vendors import VendorCurrencySetting


class ExchangeRateRepository(ABC):
    """Repository interface for the current exchange rate of each pair."""

    @abstractmethod
    def get_rate(self, base_currency: str, quote_currency: str) -> ExchangeRate | None:
        """Get the current rate for the exact (base, quote) pair."""
        pass

    @abstractmethod
    def upsert(self, rate: ExchangeRate) -> None:
        """Insert the rate, replacing any rate stored for the same pair."""
        pass

    @abstractmethod
    def list_all(self) -> Iterable[ExchangeRate]:
        """List all stored rates ordered by base and quote currency."""
        pass


class VendorCurrencyRepository(ABC):
    """Repository interface for per-vendor currency settings."""

    @abstractmethod
    def get(self, vendor_id: UUID) -> VendorCurrencySetting | None:
        pass

    @abstractmethod
    def set(self, setting: VendorCurrencySetting) -> None:
        """Store the setting, replacing any previous one for the vendor."""
        pass

    @abstractmethod
    def list_all(self) -> Iterable[VendorCurrencySetting]:
        pass


class ProductRepository(ABC):
    """Repository interface for catalog products and their FX metadata."""

    @abstractmethod
    def add(self, product: Product) -> None:
        pass

    @abstractmethod
    def get(self, product_id: UUID) -> Product | None:
        pass

    @abstractmethod
    def save(self, product: Product) -> None:
        """Commit price fields and FX audit metadata of an existing product."""
        pass

    @abstractmethod
    def get_owner(self, product_id: UUID) -> UUID | None:
        """Get the vendor recorded as the product's owner."""
        pass

    @abstractmethod
    def get_parent_owner(self, product_id: UUID) -> UUID | None:
        """Get the owner of the product's parent, for variations."""
        pass

    @abstractmethod
    def list_all(self) -> Iterable[Product]:
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: UUID) -> Iterable[Product]:
        pass
