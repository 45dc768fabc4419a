"""Tests for settings and structured logging helpers."""

import json
import logging
from decimal import Decimal
from uuid import UUID

import pytest
import structlog
from pydantic import ValidationError

from catalog_fx.config import DEFAULT_CURRENCIES, Environment, Settings, get_settings
from catalog_fx.logging_config import build_processors, get_logger, log_context
from catalog_fx.services.currency import VendorCurrencyServiceImpl


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("CFX_BASE_CURRENCY", "CFX_VENDOR_CURRENCIES", "CFX_PRICE_DECIMALS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.base_currency == "GBP"
        assert settings.price_decimals == 2
        assert settings.vendor_currencies == DEFAULT_CURRENCIES
        assert settings.rate_api_url == "https://api.frankfurter.app/latest"
        assert settings.rate_api_timeout == 15.0
        assert settings.import_source_marker == "syncspider"

    def test_environment_variables_override(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CFX_BASE_CURRENCY", "eur")
        monkeypatch.setenv("CFX_VENDOR_CURRENCIES", '["gbp", "usd"]')
        monkeypatch.setenv("CFX_ENVIRONMENT", "production")

        settings = Settings()

        assert settings.base_currency == "EUR"
        assert settings.vendor_currencies == ["EUR", "GBP", "USD"]
        assert settings.is_production

    def test_currency_lists_are_normalized(self) -> None:
        settings = Settings(
            base_currency="GBP",
            vendor_currencies=[" eur", "EUR", "", "cad"],
            rate_target_currencies=["inr", "INR"],
        )
        assert settings.vendor_currencies == ["GBP", "EUR", "CAD"]
        assert settings.rate_target_currencies == ["INR"]

    def test_invalid_base_currency_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(base_currency="POUND")

    def test_price_decimals_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Settings(price_decimals=9)

    def test_is_testing(self) -> None:
        assert Settings(environment=Environment.TESTING).is_testing

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestLogging:
    def test_vendor_coercion_is_logged(self, vendor_currencies: VendorCurrencyServiceImpl):
        from uuid import uuid4

        with structlog.testing.capture_logs() as logs:
            vendor_currencies.set_currency(uuid4(), "XYZ")

        events = [entry["event"] for entry in logs]
        assert "vendor_currency_coerced_to_base" in events
        warning = next(e for e in logs if e["event"] == "vendor_currency_coerced_to_base")
        assert warning["log_level"] == "warning"
        assert warning["requested"] == "XYZ"
        assert warning["stored"] == "GBP"

    def test_log_context_binds_and_unbinds(self) -> None:
        with log_context(product_id="abc"):
            assert structlog.contextvars.get_contextvars()["product_id"] == "abc"
        assert "product_id" not in structlog.contextvars.get_contextvars()

    def test_log_context_restores_outer_value(self) -> None:
        with log_context(product_id="outer"):
            with log_context(product_id="inner"):
                assert structlog.contextvars.get_contextvars()["product_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["product_id"] == "outer"

    def test_json_chain_renders_domain_values(self) -> None:
        vendor_id = UUID("7d4c0b1e-2f8a-4e39-9a51-0c6b2f3d8e10")
        event: object = {
            "event": "reconcile_prices_converted",
            "rate": Decimal("1.17"),
            "vendor_id": vendor_id,
        }

        for processor in build_processors("json"):
            event = processor(logging.getLogger("catalog_fx.tests"), "info", event)

        record = json.loads(event)
        assert record["rate"] == "1.17"
        assert record["vendor_id"] == str(vendor_id)
        assert record["level"] == "INFO"
        assert record["logger"] == "catalog_fx.tests"
        assert record["base_currency"] == get_settings().base_currency

    def test_get_logger_returns_usable_logger(self) -> None:
        logger = get_logger("catalog_fx.tests")
        with structlog.testing.capture_logs() as logs:
            logger.info("prices_converted", rate="1.17")
        assert logs == [{"event": "prices_converted", "rate": "1.17", "log_level": "info"}]
