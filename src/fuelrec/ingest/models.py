#!/usr/bin/env python3
"""
CSV Row Models

Typed rows for the two card-portal exports:
- ExpenseCsvRow: one line of the expense-card statement export
- FuelCsvRow: one purchase from the fuel-card portal export

``from_csv_row`` takes a ``pandas`` row dict keyed by the export's own column
headers and raises ``ValueError`` for rows that cannot be imported.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.dates import parse_timestamp

# Expense export header -> field name
EXPENSE_HEADER_MAP: dict[str, str] = {
    "Cardholder Name": "cardholder_name",
    "Account - Last Four Digits": "last_four_digits",
    "Transaction - Transaction Reference": "transaction_reference",
    "Transaction - Transaction Date": "transaction_date",
    "Transaction - Posting Date": "posting_date",
    "Transaction - Billing Amount": "billing_amount",
    "Transaction - Line Amount": "line_amount",
    "Transaction - Line Number": "line_number",
    "Transaction Line Coding - GL Code": "gl_code",
    "Transaction Line Coding Description - GL Code": "gl_code_description",
    "Supplier - Name": "supplier_name",
    "Supplier - City": "supplier_city",
    "Supplier - State": "supplier_state",
    "Transaction - Workflow Status": "workflow_status",
    "Fuel - Odometer Reading": "odometer_reading",
    "Fuel - Fuel Quantity": "fuel_quantity",
    "Fuel - Fuel Unit Cost": "fuel_unit_cost",
}

# Fuel portal export header -> field name
FUEL_HEADER_MAP: dict[str, str] = {
    "vehicle": "vehicle_id",
    "driver": "driver",
    "startTime": "date",
    "invoiceNumber": "invoice_number",
    "gallons": "gallons",
    "Cost": "cost",
    "sellerStateFullName": "seller_state",
    "sellerName": "seller_name",
    "odometer": "odometer",
    "receipt": "receipt",
}

EXPENSE_REQUIRED_HEADERS = (
    "Cardholder Name",
    "Transaction - Transaction Reference",
    "Transaction - Transaction Date",
    "Transaction - Posting Date",
    "Transaction - Billing Amount",
    "Transaction - Line Amount",
    "Transaction - Line Number",
    "Transaction Line Coding - GL Code",
)

FUEL_REQUIRED_HEADERS = ("vehicle", "driver", "startTime", "invoiceNumber")


def _text(row: dict[str, Any], header: str) -> str | None:
    value = row.get(header)
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    return text


def _required(row: dict[str, Any], header: str) -> str:
    text = _text(row, header)
    if text is None:
        raise ValueError(f"Missing {header}")
    return text


def _timestamp(row: dict[str, Any], header: str) -> datetime:
    text = _required(row, header)
    try:
        parsed = parse_timestamp(text)
    except ValueError as e:
        raise ValueError(f"Invalid {header}: {text}") from e
    # Stored as naive timestamps; only the calendar day matters downstream
    return parsed.replace(tzinfo=None)


def _decimal(row: dict[str, Any], header: str) -> Decimal:
    text = _required(row, header).replace("$", "").replace(",", "")
    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Invalid {header}: {text}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid {header}: {text}")
    return value


def _optional_decimal(row: dict[str, Any], header: str) -> Decimal | None:
    """Coerce an optional numeric field; unparseable values become None."""
    if _text(row, header) is None:
        return None
    try:
        return _decimal(row, header)
    except ValueError:
        return None


def _optional_int(row: dict[str, Any], header: str) -> int | None:
    value = _optional_decimal(row, header)
    return int(value) if value is not None else None


@dataclass
class ExpenseCsvRow:
    """One expense-card statement line."""

    cardholder_name: str
    transaction_reference: str
    transaction_date: datetime
    posting_date: datetime
    billing_amount: Decimal
    line_amount: Decimal
    line_number: int
    gl_code: str
    last_four_digits: str | None = None
    gl_code_description: str | None = None
    supplier_name: str | None = None
    supplier_city: str | None = None
    supplier_state: str | None = None
    workflow_status: str | None = None
    fuel_quantity: Decimal | None = None
    fuel_unit_cost: Decimal | None = None
    odometer_reading: int | None = None

    @classmethod
    def from_csv_row(cls, row: dict[str, Any]) -> "ExpenseCsvRow":
        """
        Create ExpenseCsvRow from CSV row dict.

        Raises:
            ValueError: If a required field is missing or malformed
        """
        line_number_text = _required(row, "Transaction - Line Number")
        try:
            line_number = int(Decimal(line_number_text))
        except InvalidOperation as e:
            raise ValueError(f"Invalid Transaction - Line Number: {line_number_text}") from e

        return cls(
            cardholder_name=_required(row, "Cardholder Name"),
            transaction_reference=_required(row, "Transaction - Transaction Reference"),
            transaction_date=_timestamp(row, "Transaction - Transaction Date"),
            posting_date=_timestamp(row, "Transaction - Posting Date"),
            billing_amount=_decimal(row, "Transaction - Billing Amount"),
            line_amount=_decimal(row, "Transaction - Line Amount"),
            line_number=line_number,
            gl_code=_required(row, "Transaction Line Coding - GL Code"),
            last_four_digits=_text(row, "Account - Last Four Digits"),
            gl_code_description=_text(row, "Transaction Line Coding Description - GL Code"),
            supplier_name=_text(row, "Supplier - Name"),
            supplier_city=_text(row, "Supplier - City"),
            supplier_state=_text(row, "Supplier - State"),
            workflow_status=_text(row, "Transaction - Workflow Status"),
            fuel_quantity=_optional_decimal(row, "Fuel - Fuel Quantity"),
            fuel_unit_cost=_optional_decimal(row, "Fuel - Fuel Unit Cost"),
            odometer_reading=_optional_int(row, "Fuel - Odometer Reading"),
        )

    @property
    def dedup_key(self) -> tuple[str, int]:
        return (self.transaction_reference, self.line_number)


@dataclass
class FuelCsvRow:
    """One fuel-card portal purchase."""

    vehicle_id: str
    driver: str
    date: datetime
    invoice_number: str
    gallons: Decimal
    cost: Decimal
    seller_name: str | None = None
    seller_state: str | None = None
    odometer: int | None = None
    receipt: str | None = None

    @classmethod
    def from_csv_row(cls, row: dict[str, Any]) -> "FuelCsvRow":
        """
        Create FuelCsvRow from CSV row dict.

        Gallons and cost default to zero when blank, matching how the fuel
        portal exports voided purchases.

        Raises:
            ValueError: If vehicle, driver, date or invoice number is missing
        """
        gallons = _optional_decimal(row, "gallons")
        cost = _optional_decimal(row, "Cost")

        return cls(
            vehicle_id=_required(row, "vehicle"),
            driver=_required(row, "driver"),
            date=_timestamp(row, "startTime"),
            invoice_number=_required(row, "invoiceNumber"),
            gallons=gallons if gallons is not None else Decimal("0"),
            cost=cost if cost is not None else Decimal("0"),
            seller_name=_text(row, "sellerName"),
            seller_state=_text(row, "sellerStateFullName"),
            odometer=_optional_int(row, "odometer"),
            receipt=_text(row, "receipt"),
        )

    @property
    def branch_code(self) -> str:
        """Vehicle ids are prefixed with the branch code, e.g. ``MHK-104``."""
        return self.vehicle_id.split("-", 1)[0].strip().upper()
