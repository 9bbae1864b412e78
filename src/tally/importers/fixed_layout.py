#!/usr/bin/env python3
"""
Fixed-Layout Statement Importer

Best-effort parser for line-oriented bank text exports, where each
transaction line starts with a fixed-width M/D/YYYY date and ends with one or
two right-aligned numbers (amount, then running balance):

    Date        Description                                   Amount  Running Bal.
    01/06/2025  Zelle payment from JANE DOE                 1,285.00     8,988.79
    01/07/2025  ONLINE BANKING TRANSFER TO SAV             -1,050.00     7,938.79

Amounts are kept as authored; no sign is forced. Lines that do not yield a
date and an amount are skipped silently.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from ..core.currency import parse_amount
from ..core.dates import FinancialDate
from ..core.errors import AmountFormatError, SourceUnreadable
from ..core.models import ParsedTransaction
from ..core.money import Money

logger = logging.getLogger(__name__)

DATE_FIELD_WIDTH = 10
DESCRIPTION_START = 12
MIN_LINE_LENGTH = 15
BEGINNING_BALANCE_PREFIX = "Beginning balance as of"
ENDING_BALANCE_PREFIX = "Ending balance as of"
HEADER_WORDS = ("date", "description", "amount")

_NUMBER_CHARS = set("0123456789.,-")


@dataclass
class FixedLayoutPreview:
    """Transactions (up to the preview limit) plus statement summary balances."""

    transactions: list[ParsedTransaction]
    total_rows: int
    beginning_balance: Money | None = None
    ending_balance: Money | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "total_rows": self.total_rows,
            "beginning_balance": self.beginning_balance.to_cents() if self.beginning_balance else None,
            "ending_balance": self.ending_balance.to_cents() if self.ending_balance else None,
        }


def _read_source(source: str | Path | TextIO) -> str:
    if hasattr(source, "read"):
        return source.read()
    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadable(f"Cannot read statement {source}: {e}") from e


def is_header_line(line: str) -> bool:
    """True for the transaction table header row (case and spacing tolerant)."""
    normalized = " ".join(line.lower().split())
    return all(word in normalized for word in HEADER_WORDS)


def _parse_fixed_date(text: str) -> FinancialDate | None:
    parts = text.strip().split("/")
    if len(parts) != 3:
        return None
    try:
        month, day, year = (int(part) for part in parts)
        return FinancialDate.from_ymd(year, month, day)
    except ValueError:
        return None


def _summary_amount(line: str) -> Money | None:
    """The last whitespace-separated token of a summary line, as an amount."""
    parts = line.split()
    if not parts:
        return None
    try:
        return Money.from_text(parts[-1])
    except AmountFormatError:
        return None


def extract_trailing_numbers(text: str) -> list[int]:
    """
    Collect numeric tokens scanning from the end of the text.

    Stops once two tokens have been parsed; tokens made only of punctuation
    are ignored. Returned in left-to-right order.
    """
    numbers: list[int] = []
    current: list[str] = []

    def flush() -> None:
        if current:
            token = "".join(reversed(current))
            current.clear()
            try:
                numbers.append(parse_amount(token))
            except AmountFormatError:
                pass

    for ch in reversed(text):
        if ch in _NUMBER_CHARS:
            current.append(ch)
        elif current:
            flush()
            if len(numbers) >= 2:
                break
    else:
        flush()

    numbers.reverse()
    return numbers


def find_amount_start(line: str) -> int:
    """Index where the trailing amount columns begin (end of the description)."""
    space_count = 0
    for i in range(DESCRIPTION_START, len(line)):
        ch = line[i]
        if ch == " ":
            space_count += 1
            continue
        if space_count >= 3 and (ch.isdigit() or ch == "-"):
            return i - space_count
        space_count = 0
    return len(line)


def parse_transaction_line(line: str) -> ParsedTransaction | None:
    """
    Parse one fixed-layout transaction line.

    Returns:
        ParsedTransaction, or None when the line lacks a valid date or amount
    """
    if len(line) < MIN_LINE_LENGTH:
        return None

    parsed_date = _parse_fixed_date(line[:DATE_FIELD_WIDTH])
    if parsed_date is None:
        return None

    numbers = extract_trailing_numbers(line[DATE_FIELD_WIDTH:])
    if not numbers:
        return None

    if len(numbers) >= 2:
        amount, running_balance = numbers[-2], numbers[-1]
    else:
        amount, running_balance = numbers[0], None

    desc_end = find_amount_start(line)
    if desc_end > DESCRIPTION_START:
        description = line[DESCRIPTION_START:desc_end].strip()
    else:
        description = line[DESCRIPTION_START:].strip()

    raw_fields = {"line": line.rstrip()}
    if running_balance is not None:
        raw_fields["running_balance"] = str(running_balance)

    return ParsedTransaction(
        date=parsed_date,
        amount=Money.from_cents(amount),
        payee=description or None,
        memo=description or None,
        raw_fields=raw_fields,
    )


def preview_fixed_layout_text(content: str, limit: int = 20) -> FixedLayoutPreview:
    """Parse fixed-layout statement text; see preview_fixed_layout."""
    transactions: list[ParsedTransaction] = []
    beginning_balance: Money | None = None
    ending_balance: Money | None = None
    in_transactions = False

    for line in content.splitlines():
        trimmed = line.strip()

        if trimmed.startswith(BEGINNING_BALANCE_PREFIX):
            beginning_balance = _summary_amount(trimmed) or beginning_balance
        elif trimmed.startswith(ENDING_BALANCE_PREFIX):
            ending_balance = _summary_amount(trimmed) or ending_balance

        if not in_transactions:
            if is_header_line(trimmed):
                in_transactions = True
            continue

        if not trimmed:
            continue

        txn = parse_transaction_line(line)
        if txn is None:
            logger.debug(f"Skipped line: {trimmed[:60]!r}")
            continue
        if txn.payee and "Beginning balance" in txn.payee:
            continue
        transactions.append(txn)

    if not in_transactions:
        logger.info("No transaction header found in fixed-layout statement")

    logger.info(f"Parsed {len(transactions)} fixed-layout transactions")
    return FixedLayoutPreview(
        transactions=transactions[:limit],
        total_rows=len(transactions),
        beginning_balance=beginning_balance,
        ending_balance=ending_balance,
    )


def preview_fixed_layout(source: str | Path | TextIO, limit: int = 20) -> FixedLayoutPreview:
    """
    Preview a fixed-layout statement.

    Lines before the "Date ... Description ... Amount" header only contribute
    the beginning/ending summary balances.

    Args:
        source: File path or open text stream
        limit: Maximum number of transactions to return

    Returns:
        FixedLayoutPreview with the true transaction count in total_rows

    Raises:
        SourceUnreadable: If the file cannot be read
    """
    return preview_fixed_layout_text(_read_source(source), limit=limit)


def parse_fixed_layout(source: str | Path | TextIO) -> list[ParsedTransaction]:
    """Parse every transaction of a fixed-layout statement."""
    content = _read_source(source)
    return preview_fixed_layout_text(content, limit=len(content)).transactions
