#!/usr/bin/env python3
"""
Tabular Statement Importer

Reads delimited exports (CSV, TSV, semicolon-separated) with pandas and maps
their columns onto ParsedTransaction records using a caller-supplied
ColumnMapping.

Functions:
- preview_tabular: headers, first rows and true row count, no mapping needed
- parse_tabular: full parse with per-row error collection
"""

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import pandas as pd

from ..core.currency import parse_amount, parse_amount_or_zero
from ..core.dates import parse_date
from ..core.errors import FormatError, SourceUnreadable, ValidationError
from ..core.models import ColumnMapping, ParsedTransaction
from ..core.money import Money

logger = logging.getLogger(__name__)

# A file path, or an open text stream (io.StringIO for in-memory text)
TabularSource = str | Path | TextIO

CANDIDATE_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_CHARS = 8192


@dataclass
class RowError:
    """A data row that could not be turned into a transaction."""

    row_number: int
    message: str
    raw_fields: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"row_number": self.row_number, "message": self.message, "raw_fields": dict(self.raw_fields)}


@dataclass
class TabularParseResult:
    """Transactions from the good rows plus one RowError per bad row."""

    transactions: list[ParsedTransaction]
    errors: list[RowError]
    total_rows: int

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class TabularPreview:
    """Headers and leading rows of a delimited file."""

    headers: list[str]
    rows: list[list[str]]
    total_rows: int

    def to_dict(self) -> dict[str, Any]:
        return {"headers": self.headers, "rows": self.rows, "total_rows": self.total_rows}


def _rewind(source: TabularSource) -> None:
    if hasattr(source, "seek"):
        source.seek(0)


def _read_sample(source: TabularSource) -> str:
    if hasattr(source, "read"):
        sample = source.read(SNIFF_SAMPLE_CHARS)
        _rewind(source)
        return sample
    with open(source, encoding="utf-8") as f:
        return f.read(SNIFF_SAMPLE_CHARS)


def sniff_delimiter(sample: str) -> str:
    """
    Pick the field delimiter of a delimited sample.

    Only comma, semicolon, tab and pipe are considered; a sample with no
    consistent candidate (a single-column file, for one) is read as comma
    separated.
    """
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _read_frame(source: TabularSource, delimiter: str | None) -> tuple[list[str], pd.DataFrame]:
    """
    Load a delimited source as all-string columns.

    Rows with more fields than the header are truncated to the header width;
    rows with fewer fields are padded with blanks.

    Raises:
        SourceUnreadable: If the file cannot be opened or has no header row
    """
    if delimiter is None:
        try:
            delimiter = sniff_delimiter(_read_sample(source))
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnreadable(f"Failed to read header: {e}") from e
        logger.debug(f"Sniffed delimiter {delimiter!r}")

    read_options: dict[str, Any] = {
        "dtype": str,
        "keep_default_na": False,
        "engine": "python",
        "sep": delimiter,
        "skip_blank_lines": True,
    }

    try:
        headers = [str(h) for h in pd.read_csv(source, nrows=0, **read_options).columns]
    except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError, csv.Error) as e:
        raise SourceUnreadable(f"Failed to read header: {e}") from e

    width = len(headers)

    def truncate_wide_row(bad_line: list[str]) -> list[str]:
        return bad_line[:width]

    _rewind(source)
    try:
        df = pd.read_csv(source, on_bad_lines=truncate_wide_row, **read_options)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError, csv.Error) as e:
        raise SourceUnreadable(f"Failed to read rows: {e}") from e

    return headers, df.fillna("")


def preview_tabular(source: TabularSource, max_rows: int = 10, delimiter: str | None = None) -> TabularPreview:
    """
    Preview a delimited file without a column mapping.

    Args:
        source: File path or open text stream
        max_rows: Number of leading data rows to return
        delimiter: Field delimiter (default: sniffed)

    Returns:
        TabularPreview with headers, up to max_rows rows and the true row count

    Raises:
        SourceUnreadable: If the file cannot be opened or the header read
    """
    headers, df = _read_frame(source, delimiter)
    rows = [[str(value) for value in row] for row in df.head(max_rows).itertuples(index=False, name=None)]
    logger.debug(f"Previewed {len(rows)} of {len(df)} rows, {len(headers)} columns")
    return TabularPreview(headers=headers, rows=rows, total_rows=len(df))


def _resolve_column(headers: list[str], column: str | int | None, role: str) -> int | None:
    """Turn a header name or 0-based index into a column position."""
    if column is None:
        return None
    if isinstance(column, int):
        if not 0 <= column < len(headers):
            raise ValidationError(f"{role} column index {column} out of range (file has {len(headers)} columns)")
        return column

    if column in headers:
        return headers.index(column)
    wanted = column.strip().lower()
    for index, header in enumerate(headers):
        if header.strip().lower() == wanted:
            return index
    raise ValidationError(f"{role} column {column!r} not found in headers {headers}")


def _optional_text(fields: list[str], index: int | None) -> str | None:
    if index is None:
        return None
    value = fields[index].strip()
    return value or None


def parse_tabular(
    source: TabularSource, mapping: ColumnMapping, delimiter: str | None = None
) -> TabularParseResult:
    """
    Parse a delimited file into transactions using a column mapping.

    Amounts: with a debit and/or credit column, amount = credit - debit
    (blank cells count as zero); otherwise the amount column is parsed as
    authored. invert_amounts flips the sign of the result in both cases.

    Args:
        source: File path or open text stream
        mapping: Which columns hold date, amount(s), payee, memo and category
        delimiter: Field delimiter (default: sniffed)

    Returns:
        TabularParseResult; malformed rows are reported in errors, not raised

    Raises:
        SourceUnreadable: If the file cannot be opened or the header read
        ValidationError: If the mapping names columns the file does not have
    """
    if mapping.amount_column is None and mapping.debit_column is None and mapping.credit_column is None:
        raise ValidationError("Column mapping needs an amount column or debit/credit columns")

    headers, df = _read_frame(source, delimiter)

    date_idx = _resolve_column(headers, mapping.date_column, "Date")
    amount_idx = _resolve_column(headers, mapping.amount_column, "Amount")
    debit_idx = _resolve_column(headers, mapping.debit_column, "Debit")
    credit_idx = _resolve_column(headers, mapping.credit_column, "Credit")
    payee_idx = _resolve_column(headers, mapping.payee_column, "Payee")
    memo_idx = _resolve_column(headers, mapping.memo_column, "Memo")
    category_idx = _resolve_column(headers, mapping.category_column, "Category")
    split_columns = debit_idx is not None or credit_idx is not None

    transactions: list[ParsedTransaction] = []
    errors: list[RowError] = []

    for row_number, values in enumerate(df.itertuples(index=False, name=None), start=1):
        fields = [str(value) for value in values]
        raw_fields = dict(zip(headers, fields, strict=False))

        try:
            parsed_date = parse_date(fields[date_idx], mapping.date_format or None)  # type: ignore[index]

            if split_columns:
                debit = parse_amount_or_zero(fields[debit_idx]) if debit_idx is not None else 0
                credit = parse_amount_or_zero(fields[credit_idx]) if credit_idx is not None else 0
                cents = credit - debit
            else:
                cents = parse_amount(fields[amount_idx])  # type: ignore[index]

            if mapping.invert_amounts:
                cents = -cents
        except FormatError as e:
            logger.debug(f"Row {row_number} rejected: {e}")
            errors.append(RowError(row_number=row_number, message=str(e), raw_fields=raw_fields))
            continue

        transactions.append(
            ParsedTransaction(
                date=parsed_date,
                amount=Money.from_cents(cents),
                payee=_optional_text(fields, payee_idx),
                memo=_optional_text(fields, memo_idx),
                category_hint=_optional_text(fields, category_idx),
                raw_fields=raw_fields,
            )
        )

    logger.info(f"Parsed {len(transactions)} of {len(df)} rows ({len(errors)} rejected)")
    return TabularParseResult(transactions=transactions, errors=errors, total_rows=len(df))
