#!/usr/bin/env python3
"""
FinancialDate Primitive Type

Immutable date wrapper shared by orders and transactions, with lenient
parsing for the handful of formats that show up in uploaded CSVs.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

# Tried in order by FinancialDate.parse
ACCEPTED_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d", "%d-%b-%Y")


@dataclass(frozen=True, order=True)
class FinancialDate:
    """Immutable financial date wrapper with consistent formatting."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, date_format: str = "%Y-%m-%d") -> "FinancialDate":
        """
        Parse from string in specified format.

        Args:
            date_str: Date string to parse
            date_format: strptime format (default: ISO format "%Y-%m-%d")

        Returns:
            FinancialDate object

        Raises:
            ValueError: If the string does not match the format
        """
        return cls(date=datetime.strptime(date_str.strip(), date_format).date())

    @classmethod
    def parse(cls, value: Any) -> "FinancialDate":
        """
        Build a FinancialDate from a date, datetime, pandas Timestamp, or string.

        ISO timestamps such as "2024-01-15T00:00:00.000Z" (what the database
        driver emits for DATE columns) are truncated to their date part.

        Raises:
            ValueError: If the value cannot be interpreted as a date
        """
        if isinstance(value, FinancialDate):
            return value
        if isinstance(value, datetime):
            return cls(date=value.date())
        if isinstance(value, date):
            return cls(date=value)
        if hasattr(value, "to_pydatetime"):
            return cls(date=value.to_pydatetime().date())

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Not a date: {value!r}")

        text = value.strip()
        if "T" in text:
            text = text.split("T", 1)[0]

        for fmt in ACCEPTED_FORMATS:
            try:
                return cls.from_string(text, fmt)
            except ValueError:
                continue
        raise ValueError(f"Unrecognized date format: {value!r}")

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def __str__(self) -> str:
        return self.to_iso_string()

    def __repr__(self) -> str:
        return f"FinancialDate(date={self.date!r})"
