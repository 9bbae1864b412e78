#!/usr/bin/env python3
"""
Statement Line Classifiers

Text pulled out of a PDF statement has no structure left: transaction rows
sit next to spending charts, monthly summary tables, category subtotals and
page furniture. Each line is classified by running an ordered list of small
predicate functions; the first one that claims the line decides its kind.

Gated order (first pass):
    section start -> column header -> category header -> skip -> transaction

Fallback order (second pass, no section gating):
    category header -> skip -> transaction
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

DATE_PATTERNS = [
    re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}"),
    re.compile(r"^\d{4}-\d{2}-\d{2}"),
    re.compile(r"^\d{1,2}-\d{1,2}-\d{2,4}"),
]

HEADER_KEYWORDS = [
    "date",
    "description",
    "amount",
    "balance",
    "debit",
    "credit",
    "withdrawal",
    "deposit",
    "transaction",
    "posted",
]

SECTION_KEYWORDS = ["transaction", "activity", "details", "account activity"]

SUMMARY_KEYWORDS = [
    "total",
    "summary",
    "subtotal",
    "balance forward",
    "previous balance",
    "ending balance",
    "beginning balance",
    "opening balance",
    "closing balance",
    "average",
    "minimum",
    "maximum",
    "page",
    "continued",
    "spending",
    "income",
    "net",
    "cash flow",
    "overview",
    "breakdown",
]

CATEGORY_KEYWORDS = [
    "groceries",
    "dining",
    "restaurants",
    "shopping",
    "entertainment",
    "utilities",
    "bills",
    "transportation",
    "gas",
    "travel",
    "healthcare",
    "medical",
    "insurance",
    "education",
    "subscriptions",
    "personal",
    "home",
    "automotive",
    "clothing",
    "electronics",
    "gifts",
    "donations",
    "fees",
    "taxes",
    "income",
    "salary",
    "transfer",
    "payment",
]

MONTH_ABBREVIATIONS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]

MONTH_NAMES = [
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
]

_BARE_DOLLAR_AMOUNT = re.compile(r"^\$[\d,]+\.\d{2}$")
_CHART_LABEL = re.compile(r"^\d+\.?\d*\s+[A-Z]{3}$")
_CATEGORY_TOTAL = re.compile(r"^[A-Za-z][A-Za-z\s/]+\$[\d,]+\.\d{2}$")
_NUMERIC_LABEL_CHARS = set("0123456789.,%$")


class LineKind(Enum):
    """What a statement line turned out to be."""

    HEADER = "header"
    SECTION_START = "section_start"
    CATEGORY_HEADER = "category_header"
    SKIP = "skip"
    TRANSACTION = "transaction"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class LineClassification:
    """
    Result of classifying one line.

    category is set for CATEGORY_HEADER lines; reason names the rule that
    caused a SKIP.
    """

    kind: LineKind
    category: str | None = None
    reason: str | None = None


Classifier = Callable[[str], LineClassification | None]


# Predicates


def starts_with_date(line: str) -> bool:
    trimmed = line.strip()
    return any(pattern.match(trimmed) for pattern in DATE_PATTERNS)


def is_header_line(line: str) -> bool:
    """A column header row names at least two header keywords."""
    return len(header_keywords_in(line)) >= 2


def header_keywords_in(line: str) -> list[str]:
    lower = line.lower()
    return [keyword for keyword in HEADER_KEYWORDS if keyword in lower]


def is_section_start(line: str) -> bool:
    lower = line.lower()
    return any(keyword in lower for keyword in SECTION_KEYWORDS)


def extract_category_header(line: str) -> str | None:
    """
    Category name if the line is a category heading like "Groceries" or "Dining:".

    The name keeps the line's original casing.
    """
    if starts_with_date(line):
        return None

    trimmed = line.lower().strip().rstrip(":")
    for category in CATEGORY_KEYWORDS:
        if trimmed == category or trimmed.startswith(f"{category} "):
            return line.strip().rstrip(":")
    return None


def is_summary_table_line(line: str) -> bool:
    """Monthly breakdown rows mention two or more month abbreviations."""
    lower = line.lower()
    return sum(1 for month in MONTH_ABBREVIATIONS if month in lower) >= 2


def is_chart_noise(line: str) -> bool:
    """Residue from charts: stray labels, bare amounts and month names."""
    trimmed = line.strip()

    if len(trimmed) < 3:
        return True

    if _BARE_DOLLAR_AMOUNT.match(trimmed):
        return True

    if all(ch in _NUMERIC_LABEL_CHARS or ch.isspace() for ch in trimmed):
        if "." not in trimmed or len(trimmed) < 4:
            return True

    # "1957.35 FEB"
    if _CHART_LABEL.match(trimmed):
        return True

    lower = trimmed.lower()
    for month in MONTH_ABBREVIATIONS:
        if lower == month or lower == f"{month}.":
            return True

    for month in MONTH_NAMES:
        if lower == month:
            return True
        # "JANUARY $1,312.74 $382.13 $57.54"
        if lower.startswith(month) and "$" in lower:
            return True

    return False


def is_category_total_line(line: str) -> bool:
    """Subtotal lines like "Department Store $60.73"."""
    trimmed = line.strip()
    if "$" not in trimmed or starts_with_date(line):
        return False
    return bool(_CATEGORY_TOTAL.match(trimmed))


def is_period_total_line(line: str) -> bool:
    lower = line.lower()
    return lower.startswith("quarterly") or lower.startswith("annual")


def skip_reason(line: str) -> str | None:
    """
    Name of the first skip rule the line trips, or None to keep it.

    Rules are checked in a fixed order; the first match wins.
    """
    lower = line.lower()
    for keyword in SUMMARY_KEYWORDS:
        if keyword in lower:
            return f"summary keyword {keyword!r}"

    if is_summary_table_line(line):
        return "monthly summary table"
    if extract_category_header(line) is not None:
        return "category header"
    if is_chart_noise(line):
        return "chart noise"
    if is_category_total_line(line):
        return "category total"
    if is_period_total_line(line):
        return "period total"
    return None


# Classifiers


def classify_section_start(line: str) -> LineClassification | None:
    if is_section_start(line):
        return LineClassification(LineKind.SECTION_START)
    return None


def classify_header(line: str) -> LineClassification | None:
    if is_header_line(line):
        return LineClassification(LineKind.HEADER)
    return None


def classify_category_header(line: str) -> LineClassification | None:
    category = extract_category_header(line)
    if category is not None:
        return LineClassification(LineKind.CATEGORY_HEADER, category=category)
    return None


def classify_skip(line: str) -> LineClassification | None:
    reason = skip_reason(line)
    if reason is not None:
        return LineClassification(LineKind.SKIP, reason=reason)
    return None


def classify_transaction(line: str) -> LineClassification | None:
    if starts_with_date(line):
        return LineClassification(LineKind.TRANSACTION)
    return None


GATED_CLASSIFIERS: list[Classifier] = [
    classify_section_start,
    classify_header,
    classify_category_header,
    classify_skip,
    classify_transaction,
]

FALLBACK_CLASSIFIERS: list[Classifier] = [
    classify_category_header,
    classify_skip,
    classify_transaction,
]


def classify_line(line: str, classifiers: list[Classifier] | None = None) -> LineClassification:
    """
    Classify a non-empty, trimmed statement line.

    Args:
        line: The line to classify
        classifiers: Ordered classifier list (default: GATED_CLASSIFIERS)

    Returns:
        The first classifier's verdict, or UNCLASSIFIED if none claims the line
    """
    for classifier in classifiers if classifiers is not None else GATED_CLASSIFIERS:
        result = classifier(line)
        if result is not None:
            return result
    return LineClassification(LineKind.UNCLASSIFIED)
