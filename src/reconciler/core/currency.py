#!/usr/bin/env python3
"""
Currency Parsing and Formatting

All amounts are carried as integer cents. Dollar strings only exist at the
edges: CSV uploads (parsed here) and text output (formatted here).

Key Principles:
- Never use floating-point arithmetic for currency calculations
- Parse with Decimal, store as int
- Reject values that cannot be represented exactly as cents
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union


def cents_to_dollars_str(cents: int) -> str:
    """
    Convert cents to a dollar string using integer arithmetic.

    Example:
        cents_to_dollars_str(-12300) -> "-123.00"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))

    dollars, remainder = divmod(abs_cents, 100)
    text = f"{dollars}.{remainder:02d}"
    return f"-{text}" if is_negative else text


def format_cents(cents: int) -> str:
    """Format cents as dollar string with $ prefix."""
    return f"${cents_to_dollars_str(cents)}"


def parse_dollars_to_cents(dollars: Union[str, int, float, Decimal]) -> int:
    """
    Parse a dollar amount into integer cents.

    Accepts strings such as "$1,200.50", "-1.23" or "12", integers (whole
    dollars), Decimals, and floats. Fractions of a cent are rounded half-up,
    matching how spreadsheet exports round displayed prices.

    Args:
        dollars: Dollar amount

    Returns:
        Amount in cents

    Raises:
        ValueError: If the value is empty, not a number, or not finite

    Examples:
        parse_dollars_to_cents("$12.34") -> 1234
        parse_dollars_to_cents("1,234.5") -> 123450
        parse_dollars_to_cents(-1.23) -> -123
    """
    if isinstance(dollars, bool):
        raise ValueError(f"Not a dollar amount: {dollars!r}")

    if isinstance(dollars, float):
        if not math.isfinite(dollars):
            raise ValueError(f"Not a finite dollar amount: {dollars!r}")
        # repr() gives the shortest round-tripping form, avoiding binary noise
        amount = Decimal(repr(dollars))
    elif isinstance(dollars, int):
        return dollars * 100
    elif isinstance(dollars, Decimal):
        amount = dollars
    else:
        clean = str(dollars).replace("$", "").replace(",", "").strip()
        if not clean:
            raise ValueError("Empty dollar amount")
        try:
            amount = Decimal(clean)
        except InvalidOperation as e:
            raise ValueError(f"Not a dollar amount: {dollars!r}") from e

    if not amount.is_finite():
        raise ValueError(f"Not a finite dollar amount: {dollars!r}")

    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_cents(value: Union[str, int, float]) -> int:
    """
    Parse an amount that is already expressed in cents.

    Integral floats are accepted because pandas reads integer columns with
    missing cells as float64.

    Raises:
        ValueError: If the value is not an integral, finite number of cents
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a cent amount: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValueError(f"Not an integral cent amount: {value!r}")
        return int(value)

    clean = str(value).replace(",", "").strip()
    try:
        return int(clean)
    except ValueError:
        as_float = float(clean)
        return parse_cents(as_float)


def is_valid_cents(value: object) -> bool:
    """Check that a value is a plain integer cent amount (bool excluded)."""
    return isinstance(value, int) and not isinstance(value, bool)
