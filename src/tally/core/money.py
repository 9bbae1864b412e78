#!/usr/bin/env python3
"""
Money Primitive Type

Immutable currency value wrapper that uses integer cents internally.
Prevents floating-point errors and provides type-safe currency operations.
"""

from dataclasses import dataclass

from .currency import format_amount, format_cents, parse_amount


@dataclass(frozen=True)
class Money:
    """
    Immutable money value in cents.

    Negative amounts are money leaving an account (charges, withdrawals);
    positive amounts are money entering it (deposits, refunds, credits).

    Examples:
        >>> charge = Money.from_cents(-550)
        >>> str(charge)
        '-$5.50'
        >>> Money.from_text("113.19CR").to_cents()
        11319
        >>> (charge + Money.from_cents(550)).is_zero()
        True
    """

    cents: int

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        """Create Money from cents."""
        return cls(cents=int(cents))

    @classmethod
    def from_text(cls, text: str, unsigned_is_charge: bool = False) -> "Money":
        """
        Parse from statement text like '$1,234.56', '(10.00)' or '50.00-'.

        Raises:
            AmountFormatError: If the text is not a parseable amount
        """
        return cls(cents=parse_amount(text, unsigned_is_charge=unsigned_is_charge))

    @classmethod
    def zero(cls) -> "Money":
        """Zero amount."""
        return cls(cents=0)

    def to_cents(self) -> int:
        """Get value in cents."""
        return self.cents

    def to_text(self) -> str:
        """Canonical text form ('-1050.00'), parseable by Money.from_text."""
        return format_amount(self.cents)

    def abs(self) -> "Money":
        """Return absolute value of Money."""
        return Money(cents=abs(self.cents))

    def is_zero(self) -> bool:
        """Check for a zero amount."""
        return self.cents == 0

    def __neg__(self) -> "Money":
        """Negate."""
        return Money(cents=-self.cents)

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects."""
        return Money(cents=self.cents + other.cents)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects."""
        return Money(cents=self.cents - other.cents)

    def __mul__(self, scalar: int) -> "Money":
        """Multiply Money by integer scalar."""
        return Money(cents=self.cents * scalar)

    def __lt__(self, other: "Money") -> bool:
        return self.cents < other.cents

    def __le__(self, other: "Money") -> bool:
        return self.cents <= other.cents

    def __gt__(self, other: "Money") -> bool:
        return self.cents > other.cents

    def __ge__(self, other: "Money") -> bool:
        return self.cents >= other.cents

    def __str__(self) -> str:
        """Format as dollar string."""
        return format_cents(self.cents)

    def __repr__(self) -> str:
        return f"Money(cents={self.cents})"
