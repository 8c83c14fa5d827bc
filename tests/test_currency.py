"""Tests for currency formatting helpers."""

from decimal import Decimal

import pytest

from app.core.currency import (
    calculate_multi_currency_total,
    format_currency,
    format_multi_currency_total,
    get_currency_name,
    get_currency_symbol,
    to_display_amount,
    to_smallest_unit,
)


class TestFormatting:
    """Tests for single and multi currency formatting."""

    @pytest.mark.parametrize("currency,expected", [
        ("EUR", "€123.45"),
        ("RSD", "123.45 дин"),
        ("CHF", "Fr 123.45"),
    ])
    def test_format_currency(self, currency, expected):
        assert format_currency(12345, currency) == expected

    def test_format_negative_amount(self):
        assert format_currency(-10000, "EUR") == "€-100.00"

    def test_symbols_and_names(self):
        assert get_currency_symbol("RSD") == "дин"
        assert get_currency_name("CHF") == "Swiss Franc"

    def test_unknown_currency_falls_back_to_euro(self):
        assert get_currency_symbol("USD") == "€"
        assert get_currency_name("USD") == "Euro"
        assert format_currency(100, "USD") == "€1.00"

    def test_empty_total_formats_as_zero_euro(self):
        assert format_multi_currency_total({}) == "€0.00"

    def test_single_currency_total(self):
        assert format_multi_currency_total({"CHF": 0}) == "Fr 0.00"

    def test_multi_currency_sorted_by_magnitude(self):
        totals = {"EUR": 1000, "RSD": -50000, "CHF": 0}
        assert format_multi_currency_total(totals) == "-500.00 дин + €10.00"


class TestConversion:
    """Tests for smallest-unit conversion."""

    @pytest.mark.parametrize("value,expected", [
        ("12.34", 1234),
        (12.345, 1235),
        ("0,5", 50),
        (7, 700),
        ("abc", 0),
        (-1, 0),
    ])
    def test_to_smallest_unit(self, value, expected):
        assert to_smallest_unit(value) == expected

    def test_to_display_amount(self):
        assert to_display_amount(1999) == Decimal("19.99")

    def test_multi_currency_total_never_combines(self):
        totals = calculate_multi_currency_total([
            (1000, "EUR"),
            (-400, "EUR"),
            (50000, "RSD"),
        ])
        assert totals == {"EUR": 600, "RSD": 50000}
