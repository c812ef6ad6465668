#!/usr/bin/env python3
"""Tests for the row loaders."""

from datetime import datetime
from decimal import Decimal

import pytest

from fuelrec.core.quarters import QuarterWindow
from fuelrec.store.queries import (
    find_driver_by_name,
    find_driver_by_name_and_branch,
    list_drivers,
    load_fuel_logs_for_driver,
    load_transactions_for_driver,
)
from fuelrec.store.schema import Branch, Driver, Transaction


@pytest.mark.store
class TestDriverLookup:
    """Test driver lookups used by the importers."""

    def test_find_by_name_is_case_insensitive(self, database, records):
        """Test cardholder names match regardless of case."""
        driver_id = records.driver("Jordan Rivers")
        with database.session_scope() as session:
            assert find_driver_by_name(session, "  JORDAN RIVERS ").id == driver_id

    def test_find_by_alias(self, database, records):
        """Test the alias column catches alternate spellings."""
        driver_id = records.driver("Jordan Rivers", alias="J Rivers")
        with database.session_scope() as session:
            assert find_driver_by_name(session, "j rivers").id == driver_id

    def test_inactive_drivers_are_not_found(self, database):
        """Test deactivated drivers no longer claim transactions."""
        with database.session_scope() as session:
            session.add(Driver(name="Former Driver", is_active=False))

        with database.session_scope() as session:
            assert find_driver_by_name(session, "Former Driver") is None
            assert list_drivers(session) == []
            assert len(list_drivers(session, include_inactive=True)) == 1

    def test_find_by_name_and_branch(self, database, records):
        """Test the same name in two branches is two drivers."""
        manhattan = records.driver("Sam Lee", branch=Branch.MHK)
        records.driver("Sam Lee", branch=Branch.DEN)
        with database.session_scope() as session:
            assert find_driver_by_name_and_branch(session, "sam lee", Branch.MHK).id == manhattan
            assert find_driver_by_name_and_branch(session, "Sam Lee", None) is None


@pytest.mark.store
class TestWindowedLoads:
    """Test SQL-side window filtering."""

    def test_whole_last_day_is_included(self, database, records):
        """Test a late-evening purchase on the last day is in the window."""
        driver_id = records.driver()
        with database.session_scope() as session:
            session.add(
                Transaction(
                    driver_id=driver_id,
                    cardholder_name="Test Driver",
                    transaction_reference="REF-LATE",
                    line_number=1,
                    transaction_date=datetime(2024, 9, 30, 23, 45),
                    posting_date=datetime(2024, 10, 1, 8, 0),
                    billing_amount=Decimal("30.00"),
                    line_amount=Decimal("30.00"),
                    gl_code="6110",
                )
            )
        records.transaction(driver_id, "2024-10-01")

        with database.session_scope() as session:
            rows = load_transactions_for_driver(session, driver_id, QuarterWindow.from_quarter_string("2024-Q3"))
            assert [r.transaction_reference for r in rows] == ["REF-LATE"]

    def test_no_window_loads_everything(self, database, records):
        """Test a missing window means no date bound."""
        driver_id = records.driver()
        records.fuel_log(driver_id, "2023-01-15")
        records.fuel_log(driver_id, "2024-07-03")

        with database.session_scope() as session:
            rows = load_fuel_logs_for_driver(session, driver_id)
            assert len(rows) == 2
            assert rows[0].date < rows[1].date

    def test_other_drivers_rows_are_excluded(self, database, records):
        """Test loads are scoped to one driver."""
        mine = records.driver("Mine")
        theirs = records.driver("Theirs")
        records.fuel_log(mine, "2024-07-03")
        records.fuel_log(theirs, "2024-07-03")

        with database.session_scope() as session:
            assert len(load_fuel_logs_for_driver(session, mine)) == 1
