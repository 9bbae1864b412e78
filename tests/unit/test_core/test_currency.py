#!/usr/bin/env python3
"""Tests for core currency utilities."""

import pytest

from tally.core.currency import (
    amount_bucket,
    cents_to_dollars_str,
    format_amount,
    format_cents,
    parse_amount,
    parse_amount_or_zero,
    truncating_mean,
)
from tally.core.errors import AmountFormatError, FormatError


class TestParseAmount:
    """Test free-text amount parsing."""

    @pytest.mark.currency
    def test_plain_and_signed_amounts(self):
        """Test amounts with and without a leading minus sign."""
        assert parse_amount("12.34") == 1234
        assert parse_amount("-1,050.00") == -105000
        assert parse_amount("1,285.00") == 128500
        assert parse_amount("7") == 700

    @pytest.mark.currency
    def test_currency_symbols(self):
        """Test that currency symbols are ignored."""
        assert parse_amount("$1,234.56") == 123456
        assert parse_amount("-$5.00") == -500
        assert parse_amount("€12.00") == 1200

    @pytest.mark.currency
    def test_negative_markers(self):
        """Test parenthetical and trailing-minus negatives."""
        assert parse_amount("(100.00)") == -10000
        assert parse_amount("($5.25)") == -525
        assert parse_amount("50.00-") == -5000

    @pytest.mark.currency
    def test_explicit_plus_is_positive(self):
        """Test a leading plus sign under both sign policies."""
        assert parse_amount("+12.00") == 1200
        assert parse_amount("+$1,285.00") == 128500
        assert parse_amount("+5.50", unsigned_is_charge=True) == 550
        with pytest.raises(AmountFormatError):
            parse_amount("+-5.00")

    @pytest.mark.currency
    def test_credit_suffix_is_always_positive(self):
        """Test CR-suffixed amounts under both sign policies."""
        assert parse_amount("113.19CR") == 11319
        assert parse_amount("113.19CR", unsigned_is_charge=True) == 11319
        assert parse_amount("113.19cr") == 11319

    @pytest.mark.currency
    def test_unsigned_is_charge_policy(self):
        """Test that the charge policy negates only unsigned amounts."""
        assert parse_amount("5.50", unsigned_is_charge=True) == -550
        assert parse_amount("-5.50", unsigned_is_charge=True) == -550
        assert parse_amount("5.50") == 550

    @pytest.mark.currency
    def test_decimal_comma(self):
        """Test European decimal-comma amounts."""
        assert parse_amount("1.234,56") == 123456
        assert parse_amount("5,50") == 550

    @pytest.mark.currency
    def test_rounds_half_up(self):
        """Test rounding to the nearest cent, never truncating."""
        assert parse_amount("0.005") == 1
        assert parse_amount("0.004") == 0
        assert parse_amount("-2.675") == -268

    @pytest.mark.currency
    @pytest.mark.parametrize("text", ["", "abc", "12.34.56", "$", "--5", None])
    def test_rejects_malformed_text(self, text):
        """Test that malformed amounts raise AmountFormatError."""
        with pytest.raises(AmountFormatError):
            parse_amount(text)

    @pytest.mark.currency
    def test_format_error_is_a_value_error(self):
        """Test that callers catching ValueError still see amount errors."""
        with pytest.raises(ValueError):
            parse_amount("not money")
        assert issubclass(AmountFormatError, FormatError)

    @pytest.mark.currency
    def test_blank_cells_are_zero(self):
        """Test parse_amount_or_zero for debit/credit columns."""
        assert parse_amount_or_zero("") == 0
        assert parse_amount_or_zero("   ") == 0
        assert parse_amount_or_zero(None) == 0
        assert parse_amount_or_zero("19.99") == 1999
        with pytest.raises(AmountFormatError):
            parse_amount_or_zero("n/a")


class TestFormatting:
    """Test cent formatting helpers."""

    @pytest.mark.currency
    def test_cents_to_dollars_str(self):
        """Test formatting cents as plain dollar strings."""
        assert cents_to_dollars_str(4599) == "45.99"
        assert cents_to_dollars_str(5) == "0.05"
        assert cents_to_dollars_str(0) == "0.00"
        assert cents_to_dollars_str(-105000) == "-1050.00"

    @pytest.mark.currency
    def test_format_cents_for_display(self):
        """Test display formatting with a dollar sign."""
        assert format_cents(4599) == "$45.99"
        assert format_cents(-550) == "-$5.50"

    @pytest.mark.currency
    @pytest.mark.parametrize("cents", [0, 1, -1, 99, 100, -105000, 123456789])
    def test_format_amount_parses_back(self, cents):
        """Test that canonical text survives a parse."""
        assert parse_amount(format_amount(cents)) == cents


class TestAggregation:
    """Test grouping and averaging helpers."""

    @pytest.mark.currency
    def test_amount_bucket(self):
        """Test $5 magnitude buckets."""
        assert amount_bucket(-1599) == 1500
        assert amount_bucket(1599) == 1500
        assert amount_bucket(1500) == 1500
        assert amount_bucket(499) == 0
        assert amount_bucket(-1599, bucket_size=1000) == 1000

    @pytest.mark.currency
    def test_truncating_mean(self):
        """Test integer mean truncated toward zero."""
        assert truncating_mean([100, 101]) == 100
        assert truncating_mean([-100, -101]) == -100
        assert truncating_mean([-1599, -1599, -1599]) == -1599
        assert truncating_mean([]) == 0
