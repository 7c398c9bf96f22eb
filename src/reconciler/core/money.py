#!/usr/bin/env python3
"""
Money Primitive Type

Immutable currency value that stores integer cents, so order prices and
transaction amounts never pick up floating-point rounding drift.
"""

from dataclasses import dataclass
from decimal import Decimal

from .currency import cents_to_dollars_str, is_valid_cents, parse_dollars_to_cents


@dataclass(frozen=True)
class Money:
    """
    Immutable money value in cents.

    Negative values are allowed: refunds arrive as negative transaction
    amounts.

    Examples:
        >>> price = Money.from_cents(120000)
        >>> str(price)
        '$1200.00'
        >>> refund = Money.from_dollars("-12.30")
        >>> refund.to_cents()
        -1230
        >>> (price + refund).to_cents()
        118770
    """

    cents: int

    def __post_init__(self) -> None:
        if not is_valid_cents(self.cents):
            raise TypeError(f"Money requires integer cents, got {self.cents!r}")

    @classmethod
    def from_cents(cls, cents: int) -> "Money":
        """Create Money from cents."""
        return cls(cents=cents)

    @classmethod
    def from_dollars(cls, dollars: str | int | float | Decimal) -> "Money":
        """
        Parse from a dollar amount like '$123.45', 12, or Decimal("1.5").

        Raises:
            ValueError: If the amount cannot be parsed
        """
        return cls(cents=parse_dollars_to_cents(dollars))

    @classmethod
    def zero(cls) -> "Money":
        return cls(cents=0)

    def to_cents(self) -> int:
        """Get value in cents."""
        return self.cents

    def to_dollars(self) -> str:
        """Get formatted dollar string."""
        return str(self)

    @property
    def is_negative(self) -> bool:
        return self.cents < 0

    def __add__(self, other: "Money") -> "Money":
        return Money(cents=self.cents + other.cents)

    def __sub__(self, other: "Money") -> "Money":
        return Money(cents=self.cents - other.cents)

    def __neg__(self) -> "Money":
        return Money(cents=-self.cents)

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
        return f"${cents_to_dollars_str(self.cents)}"

    def __repr__(self) -> str:
        return f"Money(cents={self.cents})"
