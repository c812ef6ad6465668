#!/usr/bin/env python3
"""Tests for Money primitive type."""

from decimal import Decimal

import pytest

from fuelrec.core.money import Money


class TestMoneyConstruction:
    """Test Money class construction."""

    @pytest.mark.currency
    def test_from_cents(self):
        """Test creating Money from cents."""
        m = Money.from_cents(1234)
        assert m.to_cents() == 1234

    @pytest.mark.currency
    def test_from_dollars_string(self):
        """Test parsing from dollar strings."""
        assert Money.from_dollars("$12.34").to_cents() == 1234
        assert Money.from_dollars("12.34").to_cents() == 1234
        assert Money.from_dollars("$1,234.50").to_cents() == 123450

    @pytest.mark.currency
    def test_from_dollars_int(self):
        """Test creating from integer dollars."""
        assert Money.from_dollars(12).to_cents() == 1200

    @pytest.mark.currency
    @pytest.mark.parametrize(
        "value,expected_cents",
        [
            (Decimal("52.10"), 5210),
            (Decimal("18.5"), 1850),
            (52.1, 5210),
            ("0.005", 1),
            (Decimal("-3.20"), -320),
            (40, 4000),
        ],
        ids=["decimal", "decimal_one_place", "float", "half_up", "negative", "int"],
    )
    def test_from_decimal(self, value, expected_cents):
        """Test conversion from database NUMERIC values."""
        assert Money.from_decimal(value).to_cents() == expected_cents

    @pytest.mark.currency
    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", ""])
    def test_from_decimal_rejects_non_numbers(self, value):
        """Test that non-numeric amounts raise ValueError."""
        with pytest.raises(ValueError):
            Money.from_decimal(value)


class TestMoneyOperations:
    """Test Money arithmetic and comparison."""

    @pytest.mark.currency
    def test_arithmetic(self):
        """Test adding and subtracting Money objects."""
        a = Money.from_cents(100)
        b = Money.from_cents(30)
        assert (a + b).to_cents() == 130
        assert (a - b).to_cents() == 70
        assert (b - a).abs().to_cents() == 70

    @pytest.mark.currency
    def test_comparison(self):
        """Test Money ordering and equality."""
        assert Money.from_cents(100) == Money.from_cents(100)
        assert Money.from_cents(50) < Money.from_cents(100)
        assert Money.from_cents(100) >= Money.from_cents(100)

    @pytest.mark.currency
    def test_to_decimal_round_trips_to_two_places(self):
        """Test conversion back to a NUMERIC-friendly Decimal."""
        assert Money.from_cents(5210).to_decimal() == Decimal("52.10")

    @pytest.mark.currency
    def test_string_format(self):
        """Test dollar formatting."""
        assert str(Money.from_cents(5210)) == "$52.10"
        assert str(Money.from_cents(-5)) == "$-0.05"
