"""Refresh of stored exchange rates from a remote provider.

The provider is frankfurter.app (ECB reference rates, no API key). Rates
are requested with the base currency as ``from``, so every returned value
is already "units of quote currency per 1 base unit", the direction the
conversion engine expects.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from catalog_fx.domain.value_objects import normalize_currency_code
from catalog_fx.exceptions import RateProviderError
from catalog_fx.logging_config import get_logger
from catalog_fx.services.interfaces import RateLookupService, RateProvider, RateQuote

logger = get_logger(__name__)


class FrankfurterRateProvider(RateProvider):
    name = "frankfurter.app"

    def __init__(
        self,
        api_url: str = "https://api.frankfurter.app/latest",
        timeout: float = 15.0,
        source_label: str = "frankfurter.app",
        client: httpx.Client | None = None,
    ) -> None:
        self._api_url = api_url
        self._timeout = timeout
        self._source_label = source_label
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def fetch_latest(self, base_currency: str, symbols: list[str]) -> RateQuote:
        params = {"from": base_currency, "to": ",".join(symbols)}
        try:
            response = self._client.get(
                self._api_url, params=params, timeout=self._timeout
            )
        except httpx.HTTPError as e:
            raise RateProviderError(self.name, str(e)) from e

        logger.debug(
            "rate_provider_response",
            url=str(response.request.url),
            status_code=response.status_code,
        )
        if response.status_code != 200:
            raise RateProviderError(self.name, f"HTTP {response.status_code}")

        try:
            data: Any = response.json()
        except ValueError as e:
            raise RateProviderError(self.name, "response is not JSON") from e

        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict) or not rates:
            raise RateProviderError(self.name, "response has no rates")

        parsed: dict[str, Decimal] = {}
        for currency, value in rates.items():
            if isinstance(value, bool):
                continue
            try:
                parsed[str(currency).strip().upper()] = Decimal(str(value))
            except InvalidOperation:
                logger.warning(
                    "rate_provider_value_skipped", currency=currency, value=value
                )

        return RateQuote(
            base_currency=str(data.get("base") or base_currency).upper(),
            rates=parsed,
            source=self._source_label,
            as_of=data.get("date"),
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "FrankfurterRateProvider":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class RateUpdaterService:
    """Fetch the configured target currencies and upsert their rates."""

    def __init__(
        self,
        provider: RateProvider,
        rate_lookup: RateLookupService,
        base_currency: str,
        target_currencies: Iterable[str],
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._provider = provider
        self._rate_lookup = rate_lookup
        self._base_currency = base_currency.strip().upper()
        self._targets = list(target_currencies)
        self._clock = clock or (lambda: datetime.now(UTC))

    def symbols(self) -> list[str]:
        """Normalized, de-duplicated targets without the base currency."""
        symbols: list[str] = []
        for code in self._targets:
            code = str(code).strip().upper()
            if code and code != self._base_currency and code not in symbols:
                symbols.append(code)
        return symbols

    def run(self) -> int:
        """Refresh rates and return how many quote currencies were stored.

        Raises:
            RateProviderError: If the provider cannot deliver rates.
        """
        symbols = self.symbols()
        if not symbols:
            logger.info("rate_refresh_skipped", reason="no_target_currencies")
            return 0

        quote = self._provider.fetch_latest(self._base_currency, symbols)
        observed_at = self._clock()

        stored = 0
        for currency, rate in sorted(quote.rates.items()):
            try:
                normalize_currency_code(currency)
            except ValueError:
                logger.warning("rate_refresh_currency_skipped", currency=currency)
                continue
            if currency == self._base_currency:
                continue
            if not rate.is_finite() or rate <= 0:
                logger.warning(
                    "rate_refresh_rate_skipped", currency=currency, rate=str(rate)
                )
                continue
            self._rate_lookup.store_rate(
                self._base_currency, currency, rate, observed_at, quote.source
            )
            stored += 1

        # Self-rate kept for listings; lookups short-circuit identity pairs.
        self._rate_lookup.store_rate(
            self._base_currency,
            self._base_currency,
            Decimal("1"),
            observed_at,
            quote.source,
        )

        logger.info(
            "rate_refresh_completed",
            base_currency=self._base_currency,
            stored=stored,
            source=quote.source,
            as_of=quote.as_of,
        )
        return stored
