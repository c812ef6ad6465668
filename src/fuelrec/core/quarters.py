#!/usr/bin/env python3
"""
Quarter Windows

Inclusive date ranges that scope which transactions and fuel logs are
reconciled together. Quarter boundaries are owned by quarter settings
elsewhere in the back office; calendar quarters are the fallback.
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta

from .dates import FinancialDate

_QUARTER_PATTERN = re.compile(r"^(\d{4})-Q(\d)$")


@dataclass(frozen=True)
class QuarterWindow:
    """
    Inclusive ``[start, end]`` date range.

    No ordering check happens here: a window with ``end < start`` is rejected
    by the candidate generator when a matching run tries to use it.
    """

    start: FinancialDate
    end: FinancialDate
    label: str | None = None

    @classmethod
    def from_dates(cls, start: date | str, end: date | str, label: str | None = None) -> "QuarterWindow":
        """Build a window from ``date`` objects or ISO strings."""
        return cls(start=FinancialDate.from_value(start), end=FinancialDate.from_value(end), label=label)

    @classmethod
    def from_quarter_string(cls, quarter_string: str) -> "QuarterWindow":
        """
        Parse a quarter label like ``"2024-Q3"`` into its calendar window.

        Raises:
            ValueError: If the label is malformed or the quarter is not 1-4
        """
        match = _QUARTER_PATTERN.match(quarter_string.strip())
        if not match:
            raise ValueError(f"Invalid quarter format: {quarter_string!r} (expected YYYY-QN)")

        year = int(match.group(1))
        quarter = int(match.group(2))
        if quarter < 1 or quarter > 4:
            raise ValueError(f"Invalid quarter number: {quarter}")

        start = date(year, 3 * (quarter - 1) + 1, 1)
        if quarter == 4:
            end = date(year, 12, 31)
        else:
            end = date(year, 3 * quarter + 1, 1) - timedelta(days=1)

        return cls(start=FinancialDate(date=start), end=FinancialDate(date=end), label=f"{year}-Q{quarter}")

    @property
    def is_valid(self) -> bool:
        """True when the window is non-empty."""
        return self.start <= self.end

    def contains(self, day: FinancialDate) -> bool:
        """Inclusive membership test."""
        return self.start <= day <= self.end

    def __str__(self) -> str:
        if self.label:
            return self.label
        return f"{self.start}..{self.end}"


def current_quarter_string(today: date | None = None) -> str:
    """Get the calendar quarter label for ``today``, e.g. ``"2024-Q3"``."""
    today = today or date.today()
    quarter = (today.month - 1) // 3 + 1
    return f"{today.year}-Q{quarter}"
