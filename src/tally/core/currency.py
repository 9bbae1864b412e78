#!/usr/bin/env python3
"""
Currency Parsing and Formatting Utilities

Monetary normalizer for statement imports. Every amount that enters the
system is converted to integer cents here, so no floating-point value ever
reaches the ledger.

Accepted input shapes:
- Plain and signed amounts: "12.34", "-1,050.00"
- Currency symbols: "$1,234.56", "€12.00"
- Parenthetical negatives: "(100.00)"
- Trailing negatives: "100.00-"
- Explicit positives: "+12.00"
- Credit suffixes: "113.19CR"
- Decimal-comma amounts: "1.234,56", "5,50"

Key Principles:
- Never use floating-point arithmetic for currency calculations
- Round half-up to the nearest cent (never truncate)
- Sign handling is a per-source policy, chosen by the caller
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import AmountFormatError

CURRENCY_SYMBOLS = "$€£¥"

# Largest magnitude accepted from statement text ($10,000,000.00)
MAX_STATEMENT_CENTS = 1_000_000_000

_CENT = Decimal("0.01")
_DECIMAL_COMMA = re.compile(r"^\d{1,3}(\.\d{3})+,\d{1,2}$|^\d+,\d{1,2}$")
_NUMERIC = re.compile(r"^\d+(\.\d+)?$|^\.\d+$")


def _split_sign_markers(text: str) -> tuple[str, bool, bool]:
    """
    Strip sign and credit markers from an amount token.

    Returns:
        Tuple of (bare number text, is_credit, is_negative)
    """
    cleaned = text.strip()
    for symbol in CURRENCY_SYMBOLS:
        cleaned = cleaned.replace(symbol, "")
    cleaned = cleaned.replace(" ", "")

    is_credit = False
    if cleaned.upper().endswith("CR"):
        is_credit = True
        cleaned = cleaned[:-2]

    is_negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        is_negative = True
        cleaned = cleaned[1:-1]
    elif cleaned.startswith("-"):
        is_negative = True
        cleaned = cleaned[1:]
    elif cleaned.endswith("-"):
        is_negative = True
        cleaned = cleaned[:-1]
    elif cleaned.startswith("+"):
        is_credit = True
        cleaned = cleaned[1:]

    # A currency symbol may sit inside the sign: "-$5.00", "($5.00)"
    for symbol in CURRENCY_SYMBOLS:
        cleaned = cleaned.replace(symbol, "")

    return cleaned, is_credit, is_negative


def _normalize_separators(number: str) -> str:
    """Convert thousands/decimal separators to a plain decimal string."""
    if _DECIMAL_COMMA.match(number):
        return number.replace(".", "").replace(",", ".")
    return number.replace(",", "")


def parse_amount(text: str, unsigned_is_charge: bool = False) -> int:
    """
    Parse a free-text amount into integer cents.

    Args:
        text: Amount text like "$1,285.00", "(100.00)", "50.00-" or "113.19CR"
        unsigned_is_charge: Sign policy for amounts without any sign marker.
            False keeps them positive (amounts as authored); True treats them
            as charges and returns them negative (credit-card statements).

    Returns:
        Signed amount in cents. CR-suffixed and "+"-prefixed amounts are always
        positive.

    Raises:
        AmountFormatError: If the text does not contain a parseable amount

    Examples:
        parse_amount("1,285.00") -> 128500
        parse_amount("-1,050.00") -> -105000
        parse_amount("(100.00)") -> -10000
        parse_amount("5.50", unsigned_is_charge=True) -> -550
    """
    if text is None:
        raise AmountFormatError("Amount is missing")

    number, is_credit, is_negative = _split_sign_markers(str(text))
    number = _normalize_separators(number)

    if not number or not _NUMERIC.match(number):
        raise AmountFormatError(f"Could not parse amount: {text!r}")

    try:
        cents = int((Decimal(number) / _CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise AmountFormatError(f"Could not parse amount: {text!r}") from e

    if is_credit:
        return cents
    if is_negative or unsigned_is_charge:
        return -cents
    return cents


def parse_amount_or_zero(text: str | None) -> int:
    """
    Parse an amount cell that may legitimately be blank.

    Blank cells (common in separate debit/credit columns) count as zero;
    non-blank malformed cells still raise.
    """
    if text is None or not str(text).strip():
        return 0
    return parse_amount(text)


def cents_to_dollars_str(cents: int) -> str:
    """
    Convert cents to dollar string using pure integer arithmetic.

    Example:
        cents_to_dollars_str(4599) -> "45.99"
        cents_to_dollars_str(-105000) -> "-1050.00"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))

    dollars = abs_cents // 100
    remainder = abs_cents % 100

    if is_negative:
        return f"-{dollars}.{remainder:02d}"
    return f"{dollars}.{remainder:02d}"


def format_amount(cents: int) -> str:
    """
    Canonical machine-readable amount text.

    parse_amount(format_amount(c)) == c for every integer c.
    """
    return cents_to_dollars_str(cents)


def format_cents(cents: int) -> str:
    """Format cents for display, e.g. -4599 -> "-$45.99"."""
    if cents < 0:
        return f"-${cents_to_dollars_str(-cents)}"
    return f"${cents_to_dollars_str(cents)}"


def amount_bucket(cents: int, bucket_size: int = 500) -> int:
    """
    Round an amount's magnitude down to a bucket boundary.

    Used to group near-identical amounts ($5 buckets by default).

    Example:
        amount_bucket(-1599) -> 1500
    """
    return (abs(cents) // bucket_size) * bucket_size


def truncating_mean(amounts: list[int]) -> int:
    """Integer mean of cent amounts, truncated toward zero."""
    if not amounts:
        return 0
    total = sum(amounts)
    quotient = abs(total) // len(amounts)
    return -quotient if total < 0 else quotient
