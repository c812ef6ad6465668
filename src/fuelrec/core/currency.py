#!/usr/bin/env python3
"""
Currency Conversion and Handling Utilities

All amount comparisons use integer cents to avoid floating-point errors.

Currency Systems:
- Database columns use NUMERIC(10, 2) dollars (Decimal in Python)
- Internal calculations use cents: 100 cents = $1.00
- Display uses dollar strings: "$12.34"
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


def cents_to_dollars_str(cents: int) -> str:
    """
    Convert cents to dollar string using pure integer arithmetic.

    Example:
        cents_to_dollars_str(4599) -> "45.99"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))

    dollars = abs_cents // 100
    remainder = abs_cents % 100

    if is_negative:
        return f"-{dollars}.{remainder:02d}"
    return f"{dollars}.{remainder:02d}"


def parse_dollars_to_cents(dollars_str: str) -> int:
    """
    Parse dollar string to cents using integer arithmetic only.

    Examples:
        parse_dollars_to_cents("12.34") -> 1234
        parse_dollars_to_cents("$1,234.56") -> 123456
        parse_dollars_to_cents("12.5") -> 1250
    """
    clean = dollars_str.replace("$", "").replace(",", "").strip()

    if not clean:
        return 0

    is_negative = clean.startswith("-")
    if is_negative:
        clean = clean[1:]

    if "." in clean:
        whole, fraction = clean.split(".", 1)
        dollars = int(whole) if whole else 0
        # Pad to 2 digits, truncate beyond 2
        cents = int(fraction.ljust(2, "0")[:2])
        total = dollars * 100 + cents
    else:
        total = int(clean) * 100

    return -total if is_negative else total


def decimal_to_cents(amount: Decimal | float | int | str) -> int:
    """
    Convert a NUMERIC/Decimal dollar amount to integer cents.

    Floats go through ``str`` first so that ``52.1`` becomes 5210, not 5209.

    Raises:
        ValueError: If the value is not a finite number
    """
    try:
        value = Decimal(str(amount).replace("$", "").replace(",", "").strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"Not a currency amount: {amount!r}") from e

    if not value.is_finite():
        raise ValueError(f"Not a currency amount: {amount!r}")

    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(cents: int) -> str:
    """Format cents as dollar string with $ prefix."""
    return f"${cents_to_dollars_str(cents)}"
