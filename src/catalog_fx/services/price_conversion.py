"""Decision engine that normalizes vendor prices into the base currency.

Two entry points share the same math and audit trail handling:

- ``convert_on_incoming_write`` runs before an external write is saved. It
  converts the proposed vendor-currency prices on the draft and leaves the
  save to the caller.
- ``reconcile_existing_entity`` runs after an importer has saved a product
  without telling us whether the prices are new. It compares the stored
  prices against the last converted output to tell a vendor re-price apart
  from an unrelated update, and saves the product itself when it converts.

Missing vendors, unknown rates and malformed prices are not errors: the
product is simply left as it is.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID

from catalog_fx.domain.products import FxAuditTrail, Product
from catalog_fx.domain.value_objects import PriceField
from catalog_fx.logging_config import get_logger
from catalog_fx.repositories.interfaces import ProductRepository
from catalog_fx.services.conversion import (
    DEFAULT_DECIMALS,
    convert_to_base,
    parse_price,
    prices_match,
)
from catalog_fx.services.interfaces import RateLookupService, VendorCurrencyResolver

logger = get_logger(__name__)

_IDENTITY_RATE = Decimal("1")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PriceConversionEngine:
    def __init__(
        self,
        rate_lookup: RateLookupService,
        vendor_currencies: VendorCurrencyResolver,
        product_repo: ProductRepository,
        base_currency: str,
        price_decimals: int = DEFAULT_DECIMALS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._rate_lookup = rate_lookup
        self._vendor_currencies = vendor_currencies
        self._products = product_repo
        self._base_currency = base_currency.strip().upper()
        self._decimals = price_decimals
        self._clock = clock

    @property
    def base_currency(self) -> str:
        return self._base_currency

    def convert_on_incoming_write(
        self,
        draft: Product,
        vendor_id: UUID | None,
        proposed_regular: object,
        proposed_sale: object,
    ) -> Product:
        """Convert prices arriving with an external write, before it is saved.

        The draft is expected to already carry the proposed values; converted
        prices and audit fields are written onto it and the same object is
        returned. Nothing is persisted here.
        """
        log = logger.bind(product_id=str(draft.id))
        if vendor_id is None:
            log.debug("incoming_write_skipped", reason="no_vendor")
            return draft

        vendor_currency = self._vendor_currencies.get_currency(vendor_id)
        proposed = self._present_prices(
            {PriceField.REGULAR: proposed_regular, PriceField.SALE: proposed_sale}
        )

        if vendor_currency == self._base_currency:
            if proposed:
                for price_field, (text, _) in proposed.items():
                    draft.fx_audit.record_original(price_field, text)
                draft.fx_audit.stamp(vendor_currency, _IDENTITY_RATE, self._clock())
                log.debug("incoming_write_base_currency_stamped")
            return draft

        rate = self._usable_rate(vendor_currency)
        if rate is None:
            log.debug(
                "incoming_write_skipped",
                reason="no_rate",
                vendor_currency=vendor_currency,
            )
            return draft
        if not proposed:
            return draft

        self._apply_conversion(draft, proposed, rate)
        draft.sync_active_price()
        draft.fx_audit.stamp(vendor_currency, rate, self._clock())

        log.info(
            "incoming_prices_converted",
            vendor_id=str(vendor_id),
            vendor_currency=vendor_currency,
            rate=str(rate),
            regular_price=draft.regular_price,
            sale_price=draft.sale_price,
        )
        return draft

    def reconcile_existing_entity(self, product: Product) -> bool:
        """Convert an already-saved product if its prices are pending conversion.

        Returns True when the product was changed and saved. Persistence
        errors from the repository propagate unchanged.
        """
        log = logger.bind(product_id=str(product.id))

        vendor_id = self.resolve_vendor(product)
        if vendor_id is None:
            log.debug("reconcile_skipped", reason="no_vendor")
            return False

        vendor_currency = self._vendor_currencies.get_currency(vendor_id)
        if vendor_currency == self._base_currency:
            return False

        rate = self._usable_rate(vendor_currency)
        if rate is None:
            log.debug(
                "reconcile_skipped", reason="no_rate", vendor_currency=vendor_currency
            )
            return False

        candidates = self._present_prices(
            {
                PriceField.REGULAR: product.regular_price,
                PriceField.SALE: product.sale_price,
            }
        )
        if not candidates:
            log.debug("reconcile_skipped", reason="no_prices")
            return False

        audit = product.fx_audit
        pending = [
            price_field
            for price_field, (_, amount) in candidates.items()
            if not self._matches_baseline(audit, price_field, amount)
        ]

        if audit.is_converted and not pending:
            if PriceField.SALE not in candidates and self._has_sale_baseline(audit):
                # The sale was removed while the regular price stayed as converted.
                audit.clear_sale()
                product.sync_active_price()
                product.touch()
                self._products.save(product)
                log.info("reconcile_sale_baseline_cleared")
                return True
            log.debug("reconcile_skipped", reason="matches_baseline")
            return False

        self._apply_conversion(product, candidates, rate)
        if PriceField.SALE not in candidates:
            audit.clear_sale()
        product.sync_active_price()
        audit.stamp(vendor_currency, rate, self._clock())
        product.touch()
        self._products.save(product)

        log.info(
            "reconcile_prices_converted",
            vendor_id=str(vendor_id),
            vendor_currency=vendor_currency,
            rate=str(rate),
            changed_fields=[price_field.value for price_field in pending],
            regular_price=product.regular_price,
            sale_price=product.sale_price,
        )
        return True

    def resolve_vendor(self, product: Product) -> UUID | None:
        """Owner of the product, falling back to the parent's owner."""
        owner = self._products.get_owner(product.id)
        if owner is None:
            owner = self._products.get_parent_owner(product.id)
        return owner

    def _usable_rate(self, vendor_currency: str) -> Decimal | None:
        rate = self._rate_lookup.get_rate(vendor_currency, self._base_currency)
        if rate is None or rate <= 0:
            return None
        return rate

    def _present_prices(
        self, values: Mapping[PriceField, object]
    ) -> dict[PriceField, tuple[str, Decimal]]:
        """Keep the well-formed prices, paired with their original text."""
        present: dict[PriceField, tuple[str, Decimal]] = {}
        for price_field, value in values.items():
            amount = parse_price(value)
            if amount is None:
                continue
            text = value.strip() if isinstance(value, str) else str(value)
            present[price_field] = (text, amount)
        return present

    def _apply_conversion(
        self,
        product: Product,
        prices: Mapping[PriceField, tuple[str, Decimal]],
        rate: Decimal,
    ) -> None:
        for price_field, (text, amount) in prices.items():
            converted = convert_to_base(amount, rate, self._decimals)
            product.set_price(price_field, converted)
            product.fx_audit.record_original(price_field, text)
            product.fx_audit.record_output(price_field, converted)

    def _matches_baseline(
        self, audit: FxAuditTrail, price_field: PriceField, amount: Decimal
    ) -> bool:
        baseline = audit.baseline_for(price_field)
        if baseline is None:
            return False
        return prices_match(amount, baseline, self._decimals)

    @staticmethod
    def _has_sale_baseline(audit: FxAuditTrail) -> bool:
        return (
            audit.last_converted_sale_output is not None
            or audit.original_sale_price is not None
        )
