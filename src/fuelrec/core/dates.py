#!/usr/bin/env python3
"""
FinancialDate Primitive Type

Immutable calendar-day wrapper used for all matching comparisons.

Fuel-card and expense-card timestamps are routinely offset by time zone and
settlement delay, so time of day is always discarded here.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

# Card portal exports use US-style dates, sometimes with a time of day
_US_FORMATS = ("%m/%d/%Y", "%m/%d/%Y %H:%M", "%m/%d/%Y %I:%M %p", "%m/%d/%Y %H:%M:%S")


def parse_timestamp(text: str) -> datetime:
    """
    Parse a CSV timestamp in US (``03/15/2024 2:30 PM``) or ISO-8601 form.

    Raises:
        ValueError: If the text matches no known format
    """
    text = text.strip()
    for fmt in _US_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


@dataclass(frozen=True, order=True)
class FinancialDate:
    """Immutable calendar date with consistent formatting."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, date_format: str = "%Y-%m-%d") -> "FinancialDate":
        """
        Parse from string in specified format.

        Args:
            date_str: Date string to parse
            date_format: Date format (default: ISO format "%Y-%m-%d")

        Returns:
            FinancialDate object
        """
        return cls(date=datetime.strptime(date_str.strip(), date_format).date())

    @classmethod
    def from_value(cls, value: Any) -> "FinancialDate":
        """
        Coerce a database or CSV value to a calendar day.

        Accepts ``datetime`` (time discarded), ``date``, ``FinancialDate`` and
        ISO-8601 strings with or without a time component.

        Raises:
            ValueError: If the value is missing or cannot be parsed
        """
        if value is None:
            raise ValueError("date is required but was None")
        if isinstance(value, FinancialDate):
            return value
        if isinstance(value, datetime):
            return cls(date=value.date())
        if isinstance(value, date):
            return cls(date=value)
        if isinstance(value, str):
            text = value.strip()
            if not text:
                raise ValueError("date is required but was empty")
            return cls(date=parse_timestamp(text).date())
        raise ValueError(f"Unsupported date value: {value!r}")

    @classmethod
    def today(cls) -> "FinancialDate":
        """Get today's date."""
        return cls(date=date.today())

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def days_between(self, other: "FinancialDate") -> int:
        """Absolute number of calendar days between two dates."""
        return abs((other.date - self.date).days)

    def ordinal(self) -> int:
        """Proleptic Gregorian ordinal, used as a day bucket key."""
        return self.date.toordinal()

    def __str__(self) -> str:
        return self.to_iso_string()

    def __repr__(self) -> str:
        return f"FinancialDate(date={self.date!r})"
