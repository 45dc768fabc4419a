"""Tests for fixed-precision price conversion."""

from decimal import Decimal

import pytest

from catalog_fx.services.conversion import (
    convert_to_base,
    format_price,
    parse_price,
    prices_match,
    round_price,
)


class TestConvertToBase:
    def test_divides_by_rate_and_rounds_to_two_places(self) -> None:
        assert convert_to_base(Decimal("100.00"), Decimal("1.17")) == "85.47"

    def test_vendor_reprice_scenario(self) -> None:
        assert convert_to_base(Decimal("120.00"), Decimal("1.17")) == "102.56"

    def test_rounds_half_up_not_half_even(self) -> None:
        # 0.25 / 2 = 0.125 exactly; banker's rounding would give 0.12
        assert convert_to_base(Decimal("0.25"), Decimal("2")) == "0.13"

    def test_result_always_has_fixed_decimals(self) -> None:
        assert convert_to_base(Decimal("10"), Decimal("2")) == "5.00"

    def test_identity_rate_passes_amount_through(self) -> None:
        assert convert_to_base(Decimal("19.999"), Decimal("1")) == "19.999"

    def test_zero_amount(self) -> None:
        assert convert_to_base(Decimal("0"), Decimal("1.17")) == "0.00"

    def test_large_rate(self) -> None:
        # 1 GBP = 105.3 INR
        assert convert_to_base(Decimal("2500"), Decimal("105.3")) == "23.74"

    def test_custom_precision(self) -> None:
        assert convert_to_base(Decimal("10"), Decimal("3"), decimals=0) == "3"
        assert convert_to_base(Decimal("10"), Decimal("3"), decimals=3) == "3.333"

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-1.17")])
    def test_rejects_non_positive_rate(self, rate: Decimal) -> None:
        with pytest.raises(ValueError, match="positive"):
            convert_to_base(Decimal("100"), rate)

    def test_converting_back_lands_within_one_minor_unit(self) -> None:
        for amount, rate in [
            (Decimal("100.00"), Decimal("1.17")),
            (Decimal("2500"), Decimal("105.3")),
            (Decimal("0.99"), Decimal("4.6712")),
        ]:
            converted = Decimal(convert_to_base(amount, rate))
            assert abs(converted - amount / rate) <= Decimal("0.005")
            assert abs(converted * rate - amount) <= Decimal("0.005") * rate

    def test_amount_wider_than_default_precision(self) -> None:
        amount = parse_price("1e30")

        assert convert_to_base(amount, Decimal("1.17")) == (
            "854700854700854700854700854700.85"
        )

    def test_long_integer_price_converts_exactly(self) -> None:
        amount = parse_price("1170000000000000000000000000000")

        assert convert_to_base(amount, Decimal("1.17")) == (
            "1000000000000000000000000000000.00"
        )

    def test_output_is_never_in_exponent_notation(self) -> None:
        result = convert_to_base(Decimal("0.000001"), Decimal("1000"))
        assert result == "0.00"
        assert "E" not in result


class TestParsePrice:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("100.00", Decimal("100.00")),
            (" 42.5 ", Decimal("42.5")),
            ("0", Decimal("0")),
            (12, Decimal("12")),
            (12.5, Decimal("12.5")),
            (Decimal("7.10"), Decimal("7.10")),
        ],
    )
    def test_parses_well_formed_values(self, value: object, expected: Decimal) -> None:
        assert parse_price(value) == expected

    @pytest.mark.parametrize(
        "value", [None, "", "   ", "abc", "12,50", "NaN", "Infinity", "-5", True, []]
    )
    def test_rejects_malformed_values(self, value: object) -> None:
        assert parse_price(value) is None


class TestPricesMatch:
    def test_equal_at_fixed_precision(self) -> None:
        assert prices_match("85.47", "85.47")
        assert prices_match("85.470", "85.47")
        assert prices_match(Decimal("85.47"), "85.47")

    def test_different_values(self) -> None:
        assert not prices_match("100.00", "85.47")

    def test_missing_side_never_matches(self) -> None:
        assert not prices_match("85.47", None)
        assert not prices_match(None, "85.47")

    def test_malformed_side_never_matches(self) -> None:
        assert not prices_match("abc", "85.47")

    def test_long_values_compare_without_error(self) -> None:
        assert prices_match(
            "99999999999999999999999999999", "99999999999999999999999999999.00"
        )
        assert not prices_match(
            "99999999999999999999999999999", "99999999999999999999999999998"
        )


class TestFormatting:
    def test_format_price_drops_negative_zero(self) -> None:
        assert format_price(Decimal("-0.00")) == "0.00"

    def test_round_price_half_up(self) -> None:
        assert round_price(Decimal("2.345")) == Decimal("2.35")
        assert round_price(Decimal("2.344")) == Decimal("2.34")
