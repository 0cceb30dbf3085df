"""
Unit tests for payments.money module.

Amounts shown to the customer before checkout and the amounts charged must
agree to the cent, so rounding here is pinned down explicitly.
"""

import pytest
from decimal import Decimal

from payments.money import (
    calculate_tax,
    currency_exponent,
    format_money,
    from_minor,
    parse_money,
    quantize,
    to_minor,
)


class TestCurrencyExponent:
    """Test currency exponent lookup."""

    def test_usd_exponent(self):
        assert currency_exponent("USD") == 2

    def test_case_insensitive(self):
        assert currency_exponent("usd") == 2

    def test_zero_decimal_currency(self):
        assert currency_exponent("JPY") == 0

    def test_unknown_currency_defaults_to_2(self):
        assert currency_exponent("XXX") == 2


class TestRounding:
    """Half-cent amounts round away from zero."""

    def test_quantize_half_rounds_up(self):
        assert quantize("USD", "10.125") == Decimal("10.13")

    def test_to_minor(self):
        assert to_minor("USD", "15.99") == 1599

    def test_floats_are_rejected(self):
        with pytest.raises(TypeError):
            quantize("USD", 15.99)

    def test_from_minor(self):
        assert from_minor("USD", 1013) == Decimal("10.13")


class TestParseMoney:
    """Displayed menu prices parse to exact cents."""

    @pytest.mark.parametrize("display,expected", [
        ("$15.99", 1599),
        ("$8", 800),
        ("$1,234.50", 123450),
        ("12.30", 1230),
        ("$0.10", 10),
    ])
    def test_valid_prices(self, display, expected):
        assert parse_money("USD", display) == expected

    @pytest.mark.parametrize("display", ["", "$", "free", "$12.3.4", None])
    def test_invalid_prices(self, display):
        with pytest.raises(ValueError):
            parse_money("USD", display)


class TestCalculateTax:

    def test_rounds_half_up(self):
        # 333 * 0.0625 = 20.8125
        assert calculate_tax(333, Decimal("0.0625")) == 21

    def test_exact_half_cent_rounds_up(self):
        # 10 * 0.05 = 0.5
        assert calculate_tax(10, "0.05") == 1

    def test_restaurant_rate(self):
        # 2 x $10.00 at 8.25%
        assert calculate_tax(2000, "0.0825") == 165

    def test_zero_subtotal(self):
        assert calculate_tax(0, "0.07") == 0


class TestFormatMoney:

    def test_usd(self):
        assert format_money("USD", 1599) == "$15.99"

    def test_lowercase_currency(self):
        assert format_money("usd", 5) == "$0.05"

    def test_thousands(self):
        assert format_money("USD", 123450) == "$1,234.50"

    def test_round_trip_with_parse(self):
        assert parse_money("USD", format_money("USD", 2075)) == 2075
