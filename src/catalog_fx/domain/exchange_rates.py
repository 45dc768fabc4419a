"""Exchange rate domain model for vendor price normalization."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from catalog_fx.domain.value_objects import normalize_currency_code


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class ExchangeRate:
    """Immutable exchange rate value object.

    ``rate`` is expressed as units of ``quote_currency`` per 1 unit of
    ``base_currency``. With GBP as base and EUR as quote, a rate of 1.17
    means 1 GBP = 1.17 EUR, so a EUR amount is converted to GBP by dividing.

    Only the latest rate per (base, quote) pair is kept; storing a new one
    for the same pair replaces it.
    """

    base_currency: str
    quote_currency: str
    rate: Decimal
    observed_at: datetime = field(default_factory=_utc_now)
    source: str | None = None

    def __post_init__(self) -> None:
        """Normalize currency codes and validate the rate."""
        object.__setattr__(
            self, "base_currency", normalize_currency_code(self.base_currency)
        )
        object.__setattr__(
            self, "quote_currency", normalize_currency_code(self.quote_currency)
        )
        if not isinstance(self.rate, Decimal):
            object.__setattr__(self, "rate", Decimal(str(self.rate)))
        if not self.rate.is_finite() or self.rate <= 0:
            raise ValueError(f"Exchange rate must be positive, got {self.rate}")

    @property
    def pair(self) -> str:
        """Return currency pair string like 'GBP/EUR'."""
        return f"{self.base_currency}/{self.quote_currency}"

    @property
    def is_identity(self) -> bool:
        return self.base_currency == self.quote_currency
