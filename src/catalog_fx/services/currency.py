from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.value_objects import normalize_currency_code
from catalog_fx.domain.vendors import VendorCurrencySetting
from catalog_fx.exceptions import InvalidAmountError, InvalidCurrencyError
from catalog_fx.logging_config import get_logger
from catalog_fx.repositories.interfaces import (
    ExchangeRateRepository,
    VendorCurrencyRepository,
)
from catalog_fx.services.interfaces import RateLookupService, VendorCurrencyResolver

logger = get_logger(__name__)

_IDENTITY_RATE = Decimal("1")


def _normalize(code: str) -> str:
    return code.strip().upper()


class RateLookupServiceImpl(RateLookupService):
    def __init__(self, exchange_rate_repo: ExchangeRateRepository) -> None:
        self._repo = exchange_rate_repo

    def get_rate(self, quote_currency: str, base_currency: str) -> Decimal | None:
        quote = _normalize(quote_currency)
        base = _normalize(base_currency)
        if quote == base:
            return _IDENTITY_RATE

        # Only the exact base -> quote row counts; a reverse row is never inverted.
        rate = self._repo.get_rate(base, quote)
        if rate is None:
            return None
        return rate.rate

    def store_rate(
        self,
        base_currency: str,
        quote_currency: str,
        rate: Decimal,
        observed_at: datetime | None = None,
        source: str | None = None,
    ) -> ExchangeRate:
        for code in (base_currency, quote_currency):
            try:
                normalize_currency_code(code)
            except ValueError as e:
                raise InvalidCurrencyError(code) from e
        if not rate.is_finite() or rate <= 0:
            raise InvalidAmountError(str(rate), "exchange rate must be positive")

        exchange_rate = ExchangeRate(
            base_currency=base_currency,
            quote_currency=quote_currency,
            rate=rate,
            observed_at=observed_at or datetime.now(UTC),
            source=source,
        )
        self._repo.upsert(exchange_rate)
        logger.info(
            "exchange_rate_stored",
            pair=exchange_rate.pair,
            rate=str(exchange_rate.rate),
            source=exchange_rate.source,
        )
        return exchange_rate

    def list_rates(self) -> Iterable[ExchangeRate]:
        return self._repo.list_all()


class VendorCurrencyServiceImpl(VendorCurrencyResolver):
    """Per-vendor currency settings with a silent fallback to the base currency."""

    def __init__(
        self,
        vendor_currency_repo: VendorCurrencyRepository,
        base_currency: str,
        allowed_currencies: Iterable[str],
    ) -> None:
        self._repo = vendor_currency_repo
        self._base_currency = _normalize(base_currency)
        self._allowed = {_normalize(code) for code in allowed_currencies}
        self._allowed.add(self._base_currency)

    @property
    def base_currency(self) -> str:
        return self._base_currency

    @property
    def allowed_currencies(self) -> list[str]:
        return sorted(self._allowed)

    def get_currency(self, vendor_id: UUID) -> str:
        setting = self._repo.get(vendor_id)
        if setting is None or not setting.currency.strip():
            return self._base_currency
        return _normalize(setting.currency)

    def set_currency(self, vendor_id: UUID, code: str) -> str:
        normalized = _normalize(code or "")
        if normalized not in self._allowed:
            logger.warning(
                "vendor_currency_coerced_to_base",
                vendor_id=str(vendor_id),
                requested=code,
                stored=self._base_currency,
            )
            normalized = self._base_currency

        setting = self._repo.get(vendor_id)
        if setting is None:
            setting = VendorCurrencySetting(vendor_id=vendor_id, currency=normalized)
        else:
            setting.change_currency(normalized)
        self._repo.set(setting)
        logger.info(
            "vendor_currency_set", vendor_id=str(vendor_id), currency=normalized
        )
        return normalized
