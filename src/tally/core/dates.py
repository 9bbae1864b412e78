#!/usr/bin/env python3
"""
FinancialDate Primitive Type and Date Normalizer

Immutable date wrapper with consistent ISO formatting, plus the statement date
parser used by every importer.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .errors import DateFormatError

# Tried in order when no explicit format is given; first success wins.
COMMON_DATE_FORMATS = [
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%d-%m-%Y",
]


@dataclass(frozen=True)
class FinancialDate:
    """Immutable financial date wrapper with consistent formatting."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, date_format: str = "%Y-%m-%d") -> "FinancialDate":
        """
        Parse from string in a single explicit format.

        Two-digit years are windowed into the 2000s.

        Raises:
            ValueError: If the string does not match the format
        """
        parsed = datetime.strptime(date_str.strip(), date_format).date()
        if "%y" in date_format and parsed.year < 2000:
            parsed = parsed.replace(year=parsed.year + 100)
        return cls(date=parsed)

    @classmethod
    def from_ymd(cls, year: int, month: int, day: int) -> "FinancialDate":
        """Create from components; two-digit years land in the 2000s."""
        if year < 100:
            year += 2000
        return cls(date=date(year, month, day))

    @classmethod
    def today(cls) -> "FinancialDate":
        """Get today's date."""
        return cls(date=date.today())

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def add_days(self, days: int) -> "FinancialDate":
        """Return a new date shifted by a number of days."""
        return FinancialDate(date=self.date + timedelta(days=days))

    def days_until(self, other: "FinancialDate") -> int:
        """Signed number of days from this date to another."""
        return (other.date - self.date).days

    def __str__(self) -> str:
        return self.to_iso_string()

    def __lt__(self, other: "FinancialDate") -> bool:
        return self.date < other.date

    def __le__(self, other: "FinancialDate") -> bool:
        return self.date <= other.date

    def __gt__(self, other: "FinancialDate") -> bool:
        return self.date > other.date

    def __ge__(self, other: "FinancialDate") -> bool:
        return self.date >= other.date

    def __repr__(self) -> str:
        return f"FinancialDate(date={self.date!r})"


def parse_date(text: str, format_hint: str | None = None) -> FinancialDate:
    """
    Parse a statement date into a FinancialDate.

    Args:
        text: Date text such as "2025-01-15", "01/15/2025" or "1/5/25"
        format_hint: Explicit strptime format. When empty or None, the
            COMMON_DATE_FORMATS list is tried in order.

    Returns:
        Parsed FinancialDate

    Raises:
        DateFormatError: If no format matches
    """
    trimmed = (text or "").strip()
    if not trimmed:
        raise DateFormatError("Empty date")

    formats = [format_hint] if format_hint else COMMON_DATE_FORMATS
    for fmt in formats:
        try:
            return FinancialDate.from_string(trimmed, fmt)
        except ValueError:
            continue

    raise DateFormatError(f"Could not parse date: {text!r}")


def parse_iso_date(text: str) -> FinancialDate:
    """Parse a stored YYYY-MM-DD date."""
    try:
        return FinancialDate(date=date.fromisoformat(text))
    except (TypeError, ValueError) as e:
        raise DateFormatError(f"Invalid ISO date: {text!r}") from e
