#!/usr/bin/env python3
"""
Synthetic Card-Portal Exports

Writers for the expense-card statement export and the fuel-card portal
export, using the portals' own column headers.
"""

import csv
from pathlib import Path
from typing import Any

from fuelrec.ingest.models import EXPENSE_HEADER_MAP, FUEL_HEADER_MAP

EXPENSE_HEADERS = list(EXPENSE_HEADER_MAP)
FUEL_HEADERS = list(FUEL_HEADER_MAP)


def expense_row(
    cardholder: str = "Test Driver",
    reference: str = "REF-00001",
    line_number: str = "1",
    transaction_date: str = "07/03/2024",
    amount: str = "52.10",
    supplier_name: str = "Shell #4521",
    supplier_state: str = "KS",
    fuel_quantity: str = "",
) -> dict[str, str]:
    """One expense export line with sensible defaults."""
    row = {header: "" for header in EXPENSE_HEADERS}
    row.update(
        {
            "Cardholder Name": cardholder,
            "Account - Last Four Digits": "1234",
            "Transaction - Transaction Reference": reference,
            "Transaction - Transaction Date": transaction_date,
            "Transaction - Posting Date": transaction_date,
            "Transaction - Billing Amount": amount,
            "Transaction - Line Amount": amount,
            "Transaction - Line Number": line_number,
            "Transaction Line Coding - GL Code": "6110",
            "Transaction Line Coding Description - GL Code": "Fuel",
            "Supplier - Name": supplier_name,
            "Supplier - City": "Manhattan",
            "Supplier - State": supplier_state,
            "Transaction - Workflow Status": "Approved",
            "Fuel - Fuel Quantity": fuel_quantity,
        }
    )
    return row


def fuel_row(
    driver: str = "Test Driver",
    vehicle: str = "MHK-101",
    start_time: str = "2024-07-03 08:15",
    invoice: str = "INV-00001",
    gallons: str = "18.500",
    cost: str = "52.10",
    seller_name: str = "Shell",
    seller_state: str = "Kansas",
) -> dict[str, str]:
    """One fuel portal export line with sensible defaults."""
    return {
        "vehicle": vehicle,
        "driver": driver,
        "startTime": start_time,
        "invoiceNumber": invoice,
        "gallons": gallons,
        "Cost": cost,
        "sellerStateFullName": seller_state,
        "sellerName": seller_name,
        "odometer": "120345",
        "receipt": "",
    }


def _write(path: Path, headers: list[str], rows: list[dict[str, Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=headers)
        writer.writeheader()
        writer.writerows(rows)
    return path


def write_expense_csv(path: Path, rows: list[dict[str, Any]]) -> Path:
    return _write(path, EXPENSE_HEADERS, rows)


def write_fuel_csv(path: Path, rows: list[dict[str, Any]]) -> Path:
    return _write(path, FUEL_HEADERS, rows)
