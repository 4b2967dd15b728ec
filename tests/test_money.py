"""Tests for money helpers."""

from decimal import Decimal

import pytest

from swiss_coin.exceptions import InvalidAmountError
from swiss_coin.money import (
    format_money,
    from_cents,
    parse_amount,
    parse_decimal,
    round2,
    sanitize_amount_input,
    to_cents,
)


class TestRounding:
    """Test minor-unit rounding and cent conversion."""

    def test_round2_half_up(self):
        assert round2(Decimal("0.125")) == Decimal("0.13")
        assert round2(Decimal("0.005")) == Decimal("0.01")
        assert round2(Decimal("33.333333")) == Decimal("33.33")

    def test_round2_negative_half_up_away_from_zero(self):
        assert round2(Decimal("-0.125")) == Decimal("-0.13")

    def test_to_cents(self):
        assert to_cents(Decimal("33.33")) == 3333
        assert to_cents(Decimal("33.335")) == 3334
        assert to_cents(Decimal("-5.10")) == -510

    def test_from_cents(self):
        assert from_cents(3333) == Decimal("33.33")
        assert from_cents(0) == Decimal("0.00")
        assert from_cents(-1) == Decimal("-0.01")


class TestParseDecimal:
    """Lenient parsing used while inputs are still being typed."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("12.50", Decimal("12.50")),
            ("$1,234.50", Decimal("1234.50")),
            ("  7 ", Decimal("7")),
            ("€3", Decimal("3")),
            ("-2.5", Decimal("-2.5")),
        ],
    )
    def test_parses_numbers(self, raw, expected):
        assert parse_decimal(raw, Decimal("0")) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "1.2.3", "NaN", "Infinity"])
    def test_unusable_input_returns_default(self, raw):
        assert parse_decimal(raw, Decimal("1")) == Decimal("1")

    def test_out_of_range_returns_default(self):
        assert parse_decimal("1e30", Decimal("0")) == Decimal("0")
        assert parse_decimal("-1e16", Decimal("0")) == Decimal("0")
        assert parse_decimal("1e15", Decimal("0")) == Decimal("1e15")

    def test_unbounded_parse(self):
        assert parse_decimal("1e30", Decimal("0"), limit=None) == Decimal("1e30")


class TestParseAmount:
    """Strict amount parsing."""

    def test_plain_and_formatted(self):
        assert parse_amount("12.50") == Decimal("12.50")
        assert parse_amount("$1,234.56") == Decimal("1234.56")

    def test_parentheses_are_negative(self):
        assert parse_amount("(3.00)") == Decimal("-3.00")

    @pytest.mark.parametrize("raw", ["", "  ", "abc", "NaN"])
    def test_invalid_raises(self, raw):
        with pytest.raises(InvalidAmountError):
            parse_amount(raw)


class TestSanitizeAmountInput:
    """Input filtering for amount fields."""

    def test_keeps_two_decimals(self):
        assert sanitize_amount_input("12.345") == "12.34"

    def test_strips_non_numeric(self):
        assert sanitize_amount_input("a1b2.3.4") == "12.34"

    def test_caps_at_maximum(self):
        assert sanitize_amount_input("9999999999") == "999999999.99"
        assert sanitize_amount_input("9" * 40) == "999999999.99"
        assert sanitize_amount_input("150", max_amount=Decimal("100")) == "100.00"


class TestFormatMoney:
    """Accounting-style display."""

    def test_positive(self):
        assert format_money(Decimal("1234.5")) == "$1,234.50"

    def test_negative_uses_parentheses(self):
        assert format_money(Decimal("-85.02")) == "($85.02)"

    def test_currency_symbols(self):
        assert format_money(Decimal("10"), "EUR") == "€10.00"
        assert format_money(Decimal("10"), "chf") == "CHF 10.00"
