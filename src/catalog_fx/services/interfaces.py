from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from catalog_fx.domain.exchange_rates import ExchangeRate


@dataclass(frozen=True)
class RateQuote:
    """Rates delivered by a remote provider for one base currency."""

    base_currency: str
    rates: dict[str, Decimal]
    source: str
    as_of: str | None = None


class RateLookupService(ABC):
    @abstractmethod
    def get_rate(self, quote_currency: str, base_currency: str) -> Decimal | None:
        """Return units of quote currency per 1 base unit, or None if unknown."""
        pass

    @abstractmethod
    def store_rate(
        self,
        base_currency: str,
        quote_currency: str,
        rate: Decimal,
        observed_at: datetime | None = None,
        source: str | None = None,
    ) -> ExchangeRate:
        pass

    @abstractmethod
    def list_rates(self) -> Iterable[ExchangeRate]:
        pass


class VendorCurrencyResolver(ABC):
    @abstractmethod
    def get_currency(self, vendor_id: UUID) -> str:
        """Return the vendor's currency, defaulting to the base currency."""
        pass

    @abstractmethod
    def set_currency(self, vendor_id: UUID, code: str) -> str:
        """Store the vendor's currency and return the code actually stored."""
        pass


class RateProvider(ABC):
    name: str = "provider"

    @abstractmethod
    def fetch_latest(self, base_currency: str, symbols: list[str]) -> RateQuote:
        """Fetch the latest rates for ``symbols`` against ``base_currency``."""
        pass
