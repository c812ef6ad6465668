#!/usr/bin/env python3
"""Tests for the CSV row models."""

from datetime import datetime
from decimal import Decimal

import pytest

from fuelrec.ingest.models import ExpenseCsvRow, FuelCsvRow
from tests.fixtures.csv_exports import expense_row, fuel_row


@pytest.mark.ingest
class TestExpenseCsvRow:
    """Test parsing expense statement lines."""

    def test_parses_required_and_optional_fields(self):
        """Test a complete line becomes a typed row."""
        row = ExpenseCsvRow.from_csv_row(expense_row(fuel_quantity="18.500"))

        assert row.cardholder_name == "Test Driver"
        assert row.transaction_reference == "REF-00001"
        assert row.transaction_date == datetime(2024, 7, 3)
        assert row.billing_amount == Decimal("52.10")
        assert row.line_number == 1
        assert row.gl_code == "6110"
        assert row.supplier_name == "Shell #4521"
        assert row.fuel_quantity == Decimal("18.500")
        assert row.dedup_key == ("REF-00001", 1)

    def test_blank_optional_fields_become_none(self):
        """Test empty strings are treated as missing."""
        row = ExpenseCsvRow.from_csv_row(expense_row(supplier_name="", fuel_quantity=""))
        assert row.supplier_name is None
        assert row.fuel_quantity is None

    def test_unparseable_fuel_quantity_becomes_none(self):
        """Test optional numeric fields are coerced, not fatal."""
        assert ExpenseCsvRow.from_csv_row(expense_row(fuel_quantity="N/A")).fuel_quantity is None

    def test_dollar_formatted_amounts(self):
        """Test currency symbols and separators are accepted."""
        assert ExpenseCsvRow.from_csv_row(expense_row(amount="$1,052.10")).billing_amount == Decimal("1052.10")

    @pytest.mark.parametrize(
        "overrides,message",
        [
            ({"cardholder": ""}, "Cardholder Name"),
            ({"reference": ""}, "Transaction Reference"),
            ({"transaction_date": "someday"}, "Transaction Date"),
            ({"amount": "lots"}, "Billing Amount"),
            ({"line_number": "first"}, "Line Number"),
        ],
    )
    def test_invalid_required_fields(self, overrides, message):
        """Test bad required fields raise ValueError naming the column."""
        with pytest.raises(ValueError, match=message):
            ExpenseCsvRow.from_csv_row(expense_row(**overrides))


@pytest.mark.ingest
class TestFuelCsvRow:
    """Test parsing fuel portal lines."""

    def test_parses_fields(self):
        """Test header renames onto the typed row."""
        row = FuelCsvRow.from_csv_row(fuel_row())

        assert row.vehicle_id == "MHK-101"
        assert row.driver == "Test Driver"
        assert row.date == datetime(2024, 7, 3, 8, 15)
        assert row.invoice_number == "INV-00001"
        assert row.gallons == Decimal("18.500")
        assert row.cost == Decimal("52.10")
        assert row.seller_state == "Kansas"
        assert row.odometer == 120345

    def test_blank_amounts_default_to_zero(self):
        """Test missing gallons and cost are stored as zero."""
        row = FuelCsvRow.from_csv_row(fuel_row(gallons="", cost=""))
        assert row.gallons == Decimal("0")
        assert row.cost == Decimal("0")

    @pytest.mark.parametrize("field", ["vehicle", "driver", "invoice"])
    def test_missing_required_field(self, field):
        """Test vehicle, driver and invoice number are required."""
        with pytest.raises(ValueError):
            FuelCsvRow.from_csv_row(fuel_row(**{field: ""}))

    @pytest.mark.parametrize(
        "vehicle,branch",
        [("MHK-101", "MHK"), ("den-7", "DEN"), ("TRUCK12", "TRUCK12")],
    )
    def test_branch_code(self, vehicle, branch):
        """Test the branch prefix is read from the vehicle id."""
        assert FuelCsvRow.from_csv_row(fuel_row(vehicle=vehicle)).branch_code == branch
