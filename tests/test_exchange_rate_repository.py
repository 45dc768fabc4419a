"""Tests for SQLite exchange rate and vendor currency repositories."""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from catalog_fx.domain.exchange_rates import ExchangeRate
from catalog_fx.domain.vendors import VendorCurrencySetting
from catalog_fx.exceptions import PersistenceError
from catalog_fx.repositories.sqlite import (
    SQLiteDatabase,
    SQLiteExchangeRateRepository,
    SQLiteVendorCurrencyRepository,
)


class TestSQLiteExchangeRateRepository:
    def test_upsert_and_get_rate(self, rate_repo: SQLiteExchangeRateRepository):
        observed = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)
        rate_repo.upsert(
            ExchangeRate(
                base_currency="GBP",
                quote_currency="EUR",
                rate=Decimal("1.17"),
                observed_at=observed,
                source="frankfurter.app",
            )
        )

        retrieved = rate_repo.get_rate("GBP", "EUR")

        assert retrieved is not None
        assert retrieved.rate == Decimal("1.17")
        assert retrieved.observed_at == observed
        assert retrieved.source == "frankfurter.app"

    def test_get_rate_is_case_insensitive(
        self, rate_repo: SQLiteExchangeRateRepository
    ):
        rate_repo.upsert(
            ExchangeRate(base_currency="GBP", quote_currency="EUR", rate=Decimal("1.17"))
        )
        assert rate_repo.get_rate("gbp", "eur") is not None

    def test_missing_pair_returns_none(self, rate_repo: SQLiteExchangeRateRepository):
        assert rate_repo.get_rate("GBP", "CAD") is None

    def test_reverse_pair_is_a_different_row(
        self, rate_repo: SQLiteExchangeRateRepository
    ):
        rate_repo.upsert(
            ExchangeRate(base_currency="EUR", quote_currency="GBP", rate=Decimal("0.85"))
        )
        assert rate_repo.get_rate("GBP", "EUR") is None

    def test_upsert_replaces_existing_pair(
        self, rate_repo: SQLiteExchangeRateRepository
    ):
        rate_repo.upsert(
            ExchangeRate(base_currency="GBP", quote_currency="EUR", rate=Decimal("1.17"))
        )
        rate_repo.upsert(
            ExchangeRate(
                base_currency="GBP",
                quote_currency="EUR",
                rate=Decimal("1.19"),
                source="manual",
            )
        )

        rates = list(rate_repo.list_all())

        assert len(rates) == 1
        assert rates[0].rate == Decimal("1.19")
        assert rates[0].source == "manual"

    def test_list_all_is_ordered_by_pair(self, rate_repo: SQLiteExchangeRateRepository):
        for quote, value in [("INR", "105.3"), ("CAD", "1.71"), ("EUR", "1.17")]:
            rate_repo.upsert(
                ExchangeRate(base_currency="GBP", quote_currency=quote, rate=Decimal(value))
            )

        pairs = [r.pair for r in rate_repo.list_all()]

        assert pairs == ["GBP/CAD", "GBP/EUR", "GBP/INR"]

    def test_rate_precision_survives_round_trip(
        self, rate_repo: SQLiteExchangeRateRepository
    ):
        rate_repo.upsert(
            ExchangeRate(
                base_currency="GBP", quote_currency="AED", rate=Decimal("4.67123456")
            )
        )
        retrieved = rate_repo.get_rate("GBP", "AED")
        assert retrieved is not None
        assert retrieved.rate == Decimal("4.67123456")

    def test_upsert_failure_raises_persistence_error(self):
        db = SQLiteDatabase(":memory:")
        db.initialize()
        repo = SQLiteExchangeRateRepository(db)
        db.get_connection().execute("DROP TABLE fx_rates")

        with pytest.raises(PersistenceError):
            repo.upsert(
                ExchangeRate(base_currency="GBP", quote_currency="EUR", rate=Decimal("1.17"))
            )


class TestSQLiteVendorCurrencyRepository:
    def test_set_and_get(self, vendor_repo: SQLiteVendorCurrencyRepository):
        vendor_id = uuid4()
        vendor_repo.set(VendorCurrencySetting(vendor_id=vendor_id, currency="EUR"))

        setting = vendor_repo.get(vendor_id)

        assert setting is not None
        assert setting.vendor_id == vendor_id
        assert setting.currency == "EUR"

    def test_get_unknown_vendor_returns_none(
        self, vendor_repo: SQLiteVendorCurrencyRepository
    ):
        assert vendor_repo.get(uuid4()) is None

    def test_set_overwrites(self, vendor_repo: SQLiteVendorCurrencyRepository):
        vendor_id = uuid4()
        vendor_repo.set(VendorCurrencySetting(vendor_id=vendor_id, currency="EUR"))
        vendor_repo.set(VendorCurrencySetting(vendor_id=vendor_id, currency="CAD"))

        assert vendor_repo.get(vendor_id).currency == "CAD"
        assert len(list(vendor_repo.list_all())) == 1
