#!/usr/bin/env python3
"""
Record Normalizer

Adapts stored transactions and fuel logs into ``ComparisonRecord`` values.

Field mapping:
- Transaction: billing_amount -> amount, fuel_quantity -> quantity,
  supplier_name/supplier_state pass through
- Fuel log: cost -> amount, gallons -> quantity,
  seller_name/seller_state -> supplier_name/supplier_state

Rows may be ORM instances or plain mappings with the same field names.
"""

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.dates import FinancialDate
from ..core.money import Money
from .errors import NormalizationError
from .models import ComparisonRecord, RecordKind

logger = logging.getLogger(__name__)


def _field(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _quantity(value: Any) -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        quantity = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return quantity if quantity.is_finite() else None


def _record_id(row: Any) -> str:
    record_id = _text(_field(row, "id"))
    if record_id is None:
        raise NormalizationError(None, "record has no id")
    return record_id


def _date(row: Any, record_id: str, name: str) -> FinancialDate:
    try:
        return FinancialDate.from_value(_field(row, name))
    except ValueError as e:
        raise NormalizationError(record_id, f"{name}: {e}") from e


def _amount(row: Any, record_id: str, name: str) -> tuple[Money, Decimal]:
    """Amount rounded to cents for display plus the exact value for comparison."""
    value = _field(row, name)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise NormalizationError(record_id, f"{name} is missing")
    try:
        exact = Decimal(str(value).replace("$", "").replace(",", "").strip())
    except InvalidOperation as e:
        raise NormalizationError(record_id, f"{name}: not a currency amount: {value!r}") from e
    if not exact.is_finite():
        raise NormalizationError(record_id, f"{name}: not a currency amount: {value!r}")
    return Money.from_decimal(exact), exact


def normalize_transaction(row: Any) -> ComparisonRecord:
    """Adapt an expense-card transaction row."""
    record_id = _record_id(row)
    amount, exact_amount = _amount(row, record_id, "billing_amount")
    return ComparisonRecord(
        id=record_id,
        kind=RecordKind.TRANSACTION,
        driver_id=_text(_field(row, "driver_id")),
        date=_date(row, record_id, "transaction_date"),
        amount=amount,
        quantity=_quantity(_field(row, "fuel_quantity")),
        supplier_name=_text(_field(row, "supplier_name")),
        supplier_state=_text(_field(row, "supplier_state")),
        exact_amount=exact_amount,
    )


def normalize_fuel_log(row: Any) -> ComparisonRecord:
    """Adapt a fuel-card log row."""
    record_id = _record_id(row)
    amount, exact_amount = _amount(row, record_id, "cost")
    return ComparisonRecord(
        id=record_id,
        kind=RecordKind.FUEL_LOG,
        driver_id=_text(_field(row, "driver_id")),
        date=_date(row, record_id, "date"),
        amount=amount,
        quantity=_quantity(_field(row, "gallons")),
        supplier_name=_text(_field(row, "seller_name")),
        supplier_state=_text(_field(row, "seller_state")),
        exact_amount=exact_amount,
    )


def normalize(row: Any, kind: RecordKind | None = None) -> ComparisonRecord:
    """
    Convert a raw row to a ComparisonRecord.

    Args:
        row: Transaction or fuel log row (ORM instance or mapping)
        kind: Record kind; inferred from the row's fields when omitted

    Raises:
        NormalizationError: If id, date or amount cannot be derived
    """
    if kind is None:
        if _field(row, "billing_amount") is not None or _field(row, "transaction_date") is not None:
            kind = RecordKind.TRANSACTION
        elif _field(row, "cost") is not None or _field(row, "gallons") is not None:
            kind = RecordKind.FUEL_LOG
        else:
            raise NormalizationError(_text(_field(row, "id")), "cannot tell transaction from fuel log")

    if kind == RecordKind.TRANSACTION:
        return normalize_transaction(row)
    return normalize_fuel_log(row)


def normalize_batch(rows: Iterable[Any], kind: RecordKind) -> tuple[list[ComparisonRecord], list[str]]:
    """
    Normalize a batch, skipping rows that fail.

    Returns:
        Tuple of (records, warnings); one warning per skipped row
    """
    records: list[ComparisonRecord] = []
    warnings: list[str] = []

    for row in rows:
        try:
            records.append(normalize(row, kind))
        except NormalizationError as e:
            logger.warning("Skipping %s: %s", kind.value, e)
            warnings.append(str(e))

    return records, warnings
