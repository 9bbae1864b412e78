#!/usr/bin/env python3
"""
Heuristic Document Statement Importer

Extracts transactions from the text of a statement document (usually a
credit-card PDF) where no table structure survives extraction. Each line is
classified (see classifiers.py); date-led lines that survive the filters are
parsed into transactions, and the share of date-led lines that parsed cleanly
is reported as a confidence score.

Sign policy for this format: unsuffixed amounts are charges (negative),
"(x)", "-x" and "x-" are negative too, and "CR"-suffixed amounts are credits
(positive).
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..core.currency import MAX_STATEMENT_CENTS, parse_amount
from ..core.dates import FinancialDate
from ..core.errors import AmountFormatError, LowSignalDocument
from ..core.models import ParsedTransaction
from ..core.money import Money
from .classifiers import (
    DATE_PATTERNS,
    FALLBACK_CLASSIFIERS,
    GATED_CLASSIFIERS,
    Classifier,
    LineKind,
    classify_line,
    header_keywords_in,
    is_header_line,
)
from .extraction import PdfTextExtractor, TextExtractor

logger = logging.getLogger(__name__)

# Exactly two decimals are required, so years and reference numbers never match
AMOUNT_PATTERN = re.compile(r"[$]?[-(]?[\d,]{1,12}\.\d{2}[)-]?(?:CR)?")
AMOUNT_START_PATTERN = re.compile(r"[$]?[-(]?[\d,]{1,12}\.\d{2}")

MAX_AMOUNTS_PER_LINE = 3
MIN_DESCRIPTION_LENGTH = 2
MIN_GATED_TRANSACTIONS = 3
MIN_DOCUMENT_CHARS = 100
RAW_TEXT_SAMPLE_CHARS = 500

ISSUER_MARKERS = [
    ("bank of america", "Bank of America"),
    ("chase", "Chase"),
    ("wells fargo", "Wells Fargo"),
    ("citi", "Citi"),
]


@dataclass
class DocumentPreview:
    """Result of parsing statement document text."""

    transactions: list[ParsedTransaction]
    total_rows: int
    detected_format: str | None
    detected_columns: list[str] = field(default_factory=list)
    raw_text_sample: str = ""
    confidence: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "total_rows": self.total_rows,
            "detected_format": self.detected_format,
            "detected_columns": list(self.detected_columns),
            "raw_text_sample": self.raw_text_sample,
            "confidence": self.confidence,
        }


@dataclass
class _ScanResult:
    transactions: list[ParsedTransaction]
    date_lines: int
    parsed_lines: int

    @property
    def confidence(self) -> float:
        if self.date_lines == 0:
            return 0.0
        return self.parsed_lines / self.date_lines


def parse_document_amount(token: str) -> int | None:
    """Parse one amount token under this format's sign policy."""
    try:
        return parse_amount(token, unsigned_is_charge=True)
    except AmountFormatError:
        return None


def extract_amounts(line: str) -> list[int]:
    """
    Amounts at the end of a line, left to right.

    Only the last three amount-shaped tokens are considered, and anything
    above MAX_STATEMENT_CENTS is dropped as a misread.
    """
    amounts = []
    for token in reversed(AMOUNT_PATTERN.findall(line)[-MAX_AMOUNTS_PER_LINE:]):
        cents = parse_document_amount(token)
        if cents is not None and abs(cents) <= MAX_STATEMENT_CENTS:
            amounts.append(cents)
    amounts.reverse()
    return amounts


def extract_leading_date(line: str) -> tuple[FinancialDate, int] | None:
    """
    Date at the start of a trimmed line and the index where it ends.

    Returns None when the line does not start with a date, or when the
    date-shaped text is not a real calendar date.
    """
    for pattern in DATE_PATTERNS:
        match = pattern.match(line)
        if not match:
            continue
        text = match.group(0)
        try:
            if "/" in text:
                month, day, year = (int(part) for part in text.split("/"))
            elif len(text.split("-")[0]) == 4:
                year, month, day = (int(part) for part in text.split("-"))
            else:
                month, day, year = (int(part) for part in text.split("-"))
            return FinancialDate.from_ymd(year, month, day), match.end()
        except ValueError:
            return None
    return None


def parse_transaction_line(line: str, category: str | None = None) -> ParsedTransaction | None:
    """
    Parse one date-led statement line.

    The description is the text between the date and the first amount.

    Args:
        line: Trimmed statement line
        category: Category heading the line appeared under, if any

    Returns:
        ParsedTransaction, or None if the line has no amount or no usable
        description

    Examples:
        "01/15/25 COFFEE SHOP PALO ALTO, CA 5.50" -> 2025-01-15, -550
        "01/29/24 SQ *SELF EDGE WEB STOR San Francisco, CA 113.19CR" -> 2024-01-29, +11319
    """
    leading = extract_leading_date(line)
    if leading is None:
        return None
    parsed_date, date_end = leading

    amounts = extract_amounts(line)
    if not amounts:
        return None

    amount = amounts[0]
    running_balance = amounts[-1] if len(amounts) >= 2 else None

    after_date = line[date_end:]
    first_amount = AMOUNT_START_PATTERN.search(after_date)
    description = (after_date[: first_amount.start()] if first_amount else after_date).strip()
    if len(description) < MIN_DESCRIPTION_LENGTH:
        return None

    raw_fields = {"line": line}
    if running_balance is not None:
        raw_fields["running_balance"] = str(running_balance)

    return ParsedTransaction(
        date=parsed_date,
        amount=Money.from_cents(amount),
        payee=description,
        memo=description,
        category_hint=category,
        raw_fields=raw_fields,
    )


def detect_format(text: str) -> tuple[str | None, list[str]]:
    """
    Find the column header row and guess the issuer.

    Returns:
        (issuer name or "Generic", header keywords on the header row), or
        (None, []) when no header row exists
    """
    for line in text.splitlines():
        if is_header_line(line):
            columns = header_keywords_in(line)
            lower_text = text.lower()
            for marker, issuer in ISSUER_MARKERS:
                if marker in lower_text:
                    return issuer, columns
            return "Generic", columns
    return None, []


def _scan_lines(lines: list[str], classifiers: list[Classifier], gated: bool) -> _ScanResult:
    transactions: list[ParsedTransaction] = []
    in_section = False
    past_summary = False
    current_category: str | None = None
    date_lines = 0
    parsed_lines = 0

    for line in lines:
        trimmed = line.strip()
        if not trimmed:
            continue

        result = classify_line(trimmed, classifiers)

        if result.kind == LineKind.SECTION_START:
            in_section = True
            past_summary = True
        elif result.kind == LineKind.HEADER:
            past_summary = True
        elif result.kind == LineKind.CATEGORY_HEADER:
            current_category = result.category
        elif result.kind == LineKind.SKIP:
            logger.debug(f"Skipped ({result.reason}): {trimmed[:60]!r}")
        elif result.kind == LineKind.TRANSACTION:
            date_lines += 1
            txn = parse_transaction_line(trimmed, current_category)
            if txn is None:
                logger.debug(f"Unparseable date line: {trimmed[:60]!r}")
                continue
            parsed_lines += 1
            # Before any section marker, only the very first transaction is trusted
            if not gated or past_summary or in_section or not transactions:
                transactions.append(txn)

    return _ScanResult(transactions=transactions, date_lines=date_lines, parsed_lines=parsed_lines)


def _count_content_chars(text: str) -> int:
    return sum(1 for ch in text if not ch.isspace())


def preview_document_text(text: str, limit: int = 20, min_chars: int = MIN_DOCUMENT_CHARS) -> DocumentPreview:
    """
    Parse extracted statement text.

    A gated pass only keeps transactions found after a section marker or
    column header. If it yields fewer than three, the text is scanned again
    from scratch with section gating off.

    Args:
        text: Newline-delimited document text
        limit: Maximum number of transactions to return
        min_chars: Minimum non-whitespace characters for the text to be usable

    Returns:
        DocumentPreview with total_rows counting all parsed transactions

    Raises:
        LowSignalDocument: If the text has fewer than min_chars content
            characters (typically a scanned, image-only document)
    """
    char_count = _count_content_chars(text)
    if char_count < min_chars:
        raise LowSignalDocument(
            "Document appears to be image-based or contains very little text. "
            "Please export the statement as CSV from your bank.",
            char_count=char_count,
        )

    detected_format, detected_columns = detect_format(text)
    lines = text.splitlines()

    scan = _scan_lines(lines, GATED_CLASSIFIERS, gated=True)
    if len(scan.transactions) < MIN_GATED_TRANSACTIONS:
        logger.info(f"Only {len(scan.transactions)} transactions in gated pass, rescanning without sections")
        scan = _scan_lines(lines, FALLBACK_CLASSIFIERS, gated=False)

    logger.info(
        f"Parsed {len(scan.transactions)} transactions (format: {detected_format}, "
        f"confidence: {scan.confidence:.2f})"
    )

    return DocumentPreview(
        transactions=scan.transactions[:limit],
        total_rows=len(scan.transactions),
        detected_format=detected_format,
        detected_columns=detected_columns,
        raw_text_sample=text[:RAW_TEXT_SAMPLE_CHARS],
        confidence=scan.confidence,
    )


def preview_document(
    path: str | Path,
    limit: int = 20,
    extractor: TextExtractor | None = None,
    min_chars: int = MIN_DOCUMENT_CHARS,
) -> DocumentPreview:
    """
    Extract and preview a statement document.

    Raises:
        SourceUnreadable: If the document cannot be opened or decoded
        LowSignalDocument: If the extracted text is too short to parse
    """
    extractor = extractor or PdfTextExtractor()
    text = extractor.extract_text(Path(path))
    return preview_document_text(text, limit=limit, min_chars=min_chars)


def parse_document(
    path: str | Path, extractor: TextExtractor | None = None, min_chars: int = MIN_DOCUMENT_CHARS
) -> list[ParsedTransaction]:
    """Extract and parse every transaction of a statement document."""
    extractor = extractor or PdfTextExtractor()
    text = extractor.extract_text(Path(path))
    preview = preview_document_text(text, limit=len(text), min_chars=min_chars)
    return preview.transactions
