#!/usr/bin/env python3
"""
Upload Importer

Writes parsed card-export rows into the store.

Expense uploads only keep lines whose cardholder is a known driver; other
employees share the same card program and are skipped. Fuel uploads create
drivers on first sight, taking the branch from the vehicle id prefix.

Both importers skip duplicates, whether repeated inside the upload or
already stored by an earlier upload, and report which drivers gained rows
so matching can be re-run for just those drivers.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import select

from ..store.database import Database
from ..store.queries import find_driver_by_name, find_driver_by_name_and_branch
from ..store.schema import Branch, Driver, FuelLog, Transaction
from .models import ExpenseCsvRow, FuelCsvRow

logger = logging.getLogger(__name__)

# Keeps IN (...) lists under SQLite's bound-parameter limit
_CHUNK_SIZE = 500


def _chunks(values: list[Any]) -> Iterable[list[Any]]:
    for start in range(0, len(values), _CHUNK_SIZE):
        yield values[start : start + _CHUNK_SIZE]


@dataclass
class ImportResult:
    """Outcome of one upload."""

    transactions_created: int = 0
    duplicates_skipped: int = 0
    non_drivers_skipped: int = 0
    drivers_created: int = 0
    validation_errors: list[str] = field(default_factory=list)
    affected_driver_ids: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions_created": self.transactions_created,
            "duplicates_skipped": self.duplicates_skipped,
            "non_drivers_skipped": self.non_drivers_skipped,
            "drivers_created": self.drivers_created,
            "validation_errors": list(self.validation_errors),
            "affected_driver_ids": sorted(self.affected_driver_ids),
        }


def _branch_for(row: FuelCsvRow) -> Branch | None:
    code = row.branch_code
    return Branch(code) if code in Branch.__members__ else None


def import_transactions(
    database: Database, rows: Iterable[ExpenseCsvRow], errors: Iterable[str] = ()
) -> ImportResult:
    """
    Store expense-card lines for known drivers.

    Args:
        database: Target database
        rows: Parsed export rows
        errors: Parse errors from the loader, carried into the result

    Returns:
        ImportResult; ``transactions_created`` counts stored lines
    """
    rows = list(rows)
    result = ImportResult(validation_errors=list(errors))
    if not rows:
        return result

    with database.session_scope() as session:
        references = sorted({row.transaction_reference for row in rows})
        stored: set[tuple[str, int]] = set()
        for chunk in _chunks(references):
            stored.update(
                (reference, line_number)
                for reference, line_number in session.execute(
                    select(Transaction.transaction_reference, Transaction.line_number).where(
                        Transaction.transaction_reference.in_(chunk)
                    )
                )
            )

        drivers: dict[str, Driver | None] = {}
        seen: set[tuple[str, int]] = set()

        for row in rows:
            name_key = row.cardholder_name.strip().lower()
            if name_key not in drivers:
                drivers[name_key] = find_driver_by_name(session, row.cardholder_name)
            driver = drivers[name_key]

            if driver is None:
                result.non_drivers_skipped += 1
                result.validation_errors.append(
                    f"Skipping transaction for non-driver employee: {row.cardholder_name}"
                )
                continue

            if row.dedup_key in seen or row.dedup_key in stored:
                result.duplicates_skipped += 1
                logger.debug("Skipping duplicate transaction %s line %d", *row.dedup_key)
                continue
            seen.add(row.dedup_key)

            session.add(
                Transaction(
                    driver_id=driver.id,
                    cardholder_name=row.cardholder_name,
                    last_four_digits=row.last_four_digits,
                    transaction_reference=row.transaction_reference,
                    line_number=row.line_number,
                    transaction_date=row.transaction_date,
                    posting_date=row.posting_date,
                    billing_amount=row.billing_amount,
                    line_amount=row.line_amount,
                    gl_code=row.gl_code,
                    gl_code_description=row.gl_code_description,
                    supplier_name=row.supplier_name,
                    supplier_city=row.supplier_city,
                    supplier_state=row.supplier_state,
                    workflow_status=row.workflow_status,
                    fuel_quantity=row.fuel_quantity,
                    fuel_unit_cost=row.fuel_unit_cost,
                    odometer_reading=row.odometer_reading,
                )
            )
            result.transactions_created += 1
            result.affected_driver_ids.add(driver.id)

    logger.info(
        "Imported %d transactions (%d duplicates, %d non-driver lines skipped)",
        result.transactions_created,
        result.duplicates_skipped,
        result.non_drivers_skipped,
    )
    return result


def import_fuel_logs(database: Database, rows: Iterable[FuelCsvRow], errors: Iterable[str] = ()) -> ImportResult:
    """
    Store fuel-card purchases, creating drivers that do not exist yet.

    Returns:
        ImportResult; ``transactions_created`` counts stored fuel logs
    """
    rows = list(rows)
    result = ImportResult(validation_errors=list(errors))
    if not rows:
        return result

    with database.session_scope() as session:
        invoices = sorted({row.invoice_number for row in rows})
        stored: set[tuple[str, str, str, datetime]] = set()
        for chunk in _chunks(invoices):
            stored.update(
                tuple(key)
                for key in session.execute(
                    select(FuelLog.driver_id, FuelLog.vehicle_id, FuelLog.invoice_number, FuelLog.date).where(
                        FuelLog.invoice_number.in_(chunk)
                    )
                )
            )

        drivers: dict[tuple[str, Branch | None], Driver] = {}
        seen: set[tuple[str, str, str, datetime]] = set()

        for row in rows:
            branch = _branch_for(row)
            driver_key = (row.driver.strip().lower(), branch)

            driver = drivers.get(driver_key)
            if driver is None:
                driver = find_driver_by_name_and_branch(session, row.driver, branch)
                if driver is None:
                    driver = Driver(name=row.driver.strip(), branch=branch)
                    session.add(driver)
                    session.flush()
                    result.drivers_created += 1
                    logger.info("Created driver %s (%s)", driver.name, branch.value if branch else "no branch")
                drivers[driver_key] = driver

            key = (driver.id, row.vehicle_id, row.invoice_number, row.date)
            if key in seen or key in stored:
                result.duplicates_skipped += 1
                logger.debug("Skipping duplicate fuel log %s for vehicle %s", row.invoice_number, row.vehicle_id)
                continue
            seen.add(key)

            session.add(
                FuelLog(
                    driver_id=driver.id,
                    vehicle_id=row.vehicle_id,
                    date=row.date,
                    invoice_number=row.invoice_number,
                    gallons=row.gallons,
                    cost=row.cost,
                    seller_name=row.seller_name,
                    seller_state=row.seller_state,
                    odometer=row.odometer,
                    receipt=row.receipt,
                )
            )
            result.transactions_created += 1
            result.affected_driver_ids.add(driver.id)

    logger.info(
        "Imported %d fuel logs (%d duplicates skipped, %d drivers created)",
        result.transactions_created,
        result.duplicates_skipped,
        result.drivers_created,
    )
    return result
