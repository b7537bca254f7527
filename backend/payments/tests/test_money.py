"""
Unit tests for payments.money module.

These tests guard against penny drift between order totals, ledgers and
the minor units sent to the card processor.
"""

import pytest
from decimal import Decimal

from payments.money import (
    amounts_match,
    currency_exponent,
    format_money,
    from_minor,
    quantize,
    quantize_decimal,
    to_decimal,
    to_minor,
)


class TestCurrencyExponent:
    """Test currency exponent lookup."""

    def test_usd_exponent(self):
        assert currency_exponent("USD") == 2

    def test_jpy_exponent(self):
        assert currency_exponent("JPY") == 0

    def test_kwd_exponent(self):
        assert currency_exponent("KWD") == 3

    def test_case_insensitive(self):
        assert currency_exponent("usd") == 2

    def test_unknown_currency_defaults_to_2(self):
        assert currency_exponent("XXX") == 2

    def test_quantize_decimal(self):
        assert quantize_decimal("USD") == Decimal("0.01")
        assert quantize_decimal("JPY") == Decimal("1")


class TestQuantize:
    """Test Decimal quantization with banker's rounding."""

    def test_quantize_usd_normal(self):
        assert quantize("USD", "10.127") == Decimal("10.13")

    def test_quantize_usd_bankers_rounding_down(self):
        # 10.125 -> 10.12 (round to even)
        assert quantize("USD", "10.125") == Decimal("10.12")

    def test_quantize_usd_bankers_rounding_up(self):
        # 10.135 -> 10.14 (round to even)
        assert quantize("USD", "10.135") == Decimal("10.14")

    def test_quantize_jpy_no_decimals(self):
        assert quantize("JPY", "1234.56") == Decimal("1235")

    def test_quantize_from_float(self):
        # Floats go through str() so 10.127 does not become 10.1269999...
        assert quantize("USD", 10.127) == Decimal("10.13")

    def test_to_decimal_keeps_decimals(self):
        value = Decimal("1.005")
        assert to_decimal(value) is value

    def test_to_decimal_rejects_garbage(self):
        with pytest.raises(ArithmeticError):
            to_decimal("not-a-number")


class TestMinorUnits:
    """Conversion to and from the integer amounts the gateway sees."""

    @pytest.mark.parametrize(
        "currency,amount,expected",
        [
            ("USD", "20.00", 2000),
            ("USD", "0.01", 1),
            ("USD", "10.125", 1012),
            ("JPY", "1234.56", 1235),
            ("KWD", "1.2345", 1234),
        ],
    )
    def test_to_minor(self, currency, amount, expected):
        assert to_minor(currency, amount) == expected

    def test_to_minor_returns_int(self):
        assert isinstance(to_minor("USD", "9.99"), int)

    def test_from_minor(self):
        assert from_minor("USD", 1013) == Decimal("10.13")
        assert from_minor("JPY", 500) == Decimal("500")

    def test_from_minor_of_to_minor_is_quantized_amount(self):
        assert from_minor("USD", to_minor("USD", "33.333")) == Decimal("33.33")


class TestAmountsMatch:
    """Reconciliation of client amounts against frozen order totals."""

    def test_exact_match(self):
        assert amounts_match(Decimal("20.00"), Decimal("20.00"))

    def test_sub_cent_noise_is_accepted(self):
        assert amounts_match("20.00", "20.005")

    def test_one_cent_is_the_boundary(self):
        assert amounts_match("20.00", "20.01")
        assert amounts_match("20.00", "19.99")

    def test_beyond_tolerance_is_rejected(self):
        assert not amounts_match("20.00", "20.02")
        assert not amounts_match("20.00", "19.98")


class TestFormatMoney:
    def test_usd(self):
        assert format_money("USD", "25") == "$25.00"

    def test_thousands_separator(self):
        assert format_money("USD", "1234.5") == "$1,234.50"

    def test_jpy(self):
        assert format_money("JPY", "1500") == "¥1,500"

    def test_unknown_currency_uses_code(self):
        assert format_money("CHF", "5") == "CHF 5.00"
