"""Domain exception hierarchy for Catalog FX.

All domain-specific exceptions inherit from CatalogFxError.
This allows catching all application errors with a single base class
while preserving specificity for individual error types.

Conditions the conversion engine treats as "nothing to do" (no vendor,
no usable rate, malformed price) are deliberately not modelled here.
"""

from typing import Any
from uuid import UUID


class CatalogFxError(Exception):
    """Base exception for all Catalog FX errors.

    Includes optional error_code for API responses and extra context.
    """

    error_code: str = "CFX_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Product Errors
# =============================================================================


class ProductError(CatalogFxError):
    """Base exception for product-related errors."""

    error_code = "PRODUCT_ERROR"
    status_code = 400


class ProductNotFoundError(ProductError):
    """Raised when a product cannot be found."""

    error_code = "PRODUCT_NOT_FOUND"
    status_code = 404

    def __init__(self, product_id: UUID | str) -> None:
        super().__init__(
            f"Product not found: {product_id}",
            context={"product_id": str(product_id)},
        )


# =============================================================================
# Exchange Rate Errors
# =============================================================================


class ExchangeRateError(CatalogFxError):
    """Base exception for exchange rate errors."""

    error_code = "EXCHANGE_RATE_ERROR"
    status_code = 400


class RateProviderError(ExchangeRateError):
    """Raised when the remote rate provider cannot deliver usable rates."""

    error_code = "RATE_PROVIDER_ERROR"
    status_code = 502

    def __init__(self, provider: str, reason: str) -> None:
        super().__init__(
            f"Rate provider {provider} failed: {reason}",
            context={"provider": provider, "reason": reason},
        )


# =============================================================================
# Database Errors
# =============================================================================


class DatabaseError(CatalogFxError):
    """Base exception for database-related errors."""

    error_code = "DATABASE_ERROR"
    status_code = 500


class PersistenceError(DatabaseError):
    """Raised when a write to the catalog store fails."""

    error_code = "PERSISTENCE_ERROR"

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(
            f"Persistence failed during {operation}: {reason}",
            context={"operation": operation, "reason": reason},
        )


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(CatalogFxError):
    """Base exception for validation errors."""

    error_code = "VALIDATION_ERROR"
    status_code = 422


class InvalidCurrencyError(ValidationError):
    """Raised when an invalid currency code is provided."""

    error_code = "INVALID_CURRENCY"

    def __init__(self, currency_code: str) -> None:
        super().__init__(
            f"Invalid currency code: {currency_code}",
            context={"currency_code": currency_code},
        )


class InvalidAmountError(ValidationError):
    """Raised when an invalid rate or amount is provided."""

    error_code = "INVALID_AMOUNT"

    def __init__(self, amount: str, reason: str) -> None:
        super().__init__(
            f"Invalid amount '{amount}': {reason}",
            context={"amount": amount, "reason": reason},
        )
