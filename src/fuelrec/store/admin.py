#!/usr/bin/env python3
"""
Administrative Corrections

In-place edits for drivers and fuel logs. Drivers are never deleted; they are
deactivated so their history and matches stay intact. Fuel logs are edited
field by field or entered by hand; callers re-run matching for the owning
driver afterwards.
"""

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy.orm import Session

from ..core.dates import parse_timestamp
from ..matching.errors import DriverNotFoundError
from .schema import Branch, Driver, FuelLog

logger = logging.getLogger(__name__)

_LAST_FOUR = re.compile(r"^\d{4}$")

FUEL_LOG_TEXT_FIELDS = ("vehicle_id", "invoice_number", "seller_name", "seller_state", "receipt")
FUEL_LOG_EDITABLE_FIELDS = FUEL_LOG_TEXT_FIELDS + ("date", "gallons", "cost", "odometer")


def _get_driver(session: Session, driver_id: str) -> Driver:
    driver = session.get(Driver, driver_id)
    if driver is None:
        raise DriverNotFoundError(driver_id)
    return driver


def edit_driver(
    session: Session,
    driver_id: str,
    name: str | None = None,
    alias: str | None = None,
    branch: Branch | None = None,
    card_last_four: str | None = None,
) -> Driver:
    """
    Update a driver's profile.

    ``None`` leaves a field unchanged. An empty string clears ``alias`` or
    ``card_last_four``.

    Raises:
        DriverNotFoundError: If the driver does not exist
        ValueError: If a value fails validation
    """
    driver = _get_driver(session, driver_id)

    if name is not None:
        name = name.strip()
        if not 2 <= len(name) <= 255:
            raise ValueError("Name must be between 2 and 255 characters")
        driver.name = name

    if alias is not None:
        alias = alias.strip()
        if len(alias) > 255:
            raise ValueError("Alias must not exceed 255 characters")
        driver.alias = alias or None

    if branch is not None:
        driver.branch = branch

    if card_last_four is not None:
        card_last_four = card_last_four.strip()
        if card_last_four and not _LAST_FOUR.match(card_last_four):
            raise ValueError("Last four must be exactly 4 digits or empty")
        driver.card_last_four = card_last_four or None

    logger.info("Updated driver %s", driver_id)
    return driver


def set_driver_active(session: Session, driver_id: str, active: bool) -> Driver:
    """Deactivate or reactivate a driver."""
    driver = _get_driver(session, driver_id)
    driver.is_active = active
    logger.info("%s driver %s", "Reactivated" if active else "Deactivated", driver_id)
    return driver


_FUEL_LOG_TEXT_LIMITS = {"vehicle_id": 100, "invoice_number": 255, "seller_name": 255, "seller_state": 100, "receipt": 500}


def _coerce_fuel_log_value(field_name: str, value: Any) -> Any:
    if field_name in FUEL_LOG_TEXT_FIELDS:
        text = str(value).strip()
        if len(text) > _FUEL_LOG_TEXT_LIMITS[field_name]:
            raise ValueError(f"{field_name} must not exceed {_FUEL_LOG_TEXT_LIMITS[field_name]} characters")
        return text or None
    if field_name == "date":
        if isinstance(value, datetime):
            return value.replace(tzinfo=None)
        return parse_timestamp(str(value)).replace(tzinfo=None)
    try:
        number = Decimal(str(value).replace("$", "").replace(",", "").strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid {field_name}: {value}") from e
    if not number.is_finite():
        raise ValueError(f"Invalid {field_name}: {value}")
    if field_name == "odometer":
        if number < 0:
            raise ValueError("Odometer must be a non-negative number")
        return int(number)
    if number <= 0:
        raise ValueError(f"{field_name.capitalize()} must be a positive number")
    return number


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def update_fuel_log(session: Session, fuel_log_id: str, changes: dict[str, Any]) -> FuelLog:
    """
    Apply field edits to a stored fuel log.

    Args:
        session: Open session; the caller commits
        fuel_log_id: Fuel log to edit
        changes: Field name -> new value (strings are parsed)

    Returns:
        The edited FuelLog

    Raises:
        LookupError: If the fuel log does not exist
        ValueError: If a field is not editable or a value cannot be parsed
    """
    unsupported = sorted(set(changes) - set(FUEL_LOG_EDITABLE_FIELDS))
    if unsupported:
        raise ValueError(f"Unsupported field: {', '.join(unsupported)}")

    fuel_log = session.get(FuelLog, fuel_log_id)
    if fuel_log is None:
        raise LookupError(f"Fuel log not found: {fuel_log_id}")

    for field_name, value in changes.items():
        coerced = _coerce_fuel_log_value(field_name, value)
        if field_name in ("vehicle_id", "invoice_number") and coerced is None:
            raise ValueError(f"{field_name} must not be empty")
        setattr(fuel_log, field_name, coerced)

    logger.info("Updated fuel log %s (%s)", fuel_log_id, ", ".join(sorted(changes)))
    return fuel_log


def create_fuel_log(session: Session, driver_id: str, fields: dict[str, Any]) -> FuelLog:
    """
    Record a fuel purchase entered by hand.

    ``vehicle_id``, ``date``, ``gallons`` and ``seller_state`` are required.
    A blank ``cost`` is stored as zero and a blank ``invoice_number`` as an
    empty string; other optional fields default to None.

    Raises:
        DriverNotFoundError: If the driver does not exist
        ValueError: If a field is unknown, missing or fails validation
    """
    unsupported = sorted(set(fields) - set(FUEL_LOG_EDITABLE_FIELDS))
    if unsupported:
        raise ValueError(f"Unsupported field: {', '.join(unsupported)}")

    missing = [name for name in ("vehicle_id", "date", "gallons", "seller_state") if _is_blank(fields.get(name))]
    if missing:
        raise ValueError(f"Missing required field: {', '.join(missing)}")

    _get_driver(session, driver_id)

    values = {name: _coerce_fuel_log_value(name, value) for name, value in fields.items() if not _is_blank(value)}
    fuel_log = FuelLog(
        driver_id=driver_id,
        vehicle_id=values["vehicle_id"],
        date=values["date"],
        invoice_number=values.get("invoice_number") or "",
        gallons=values["gallons"],
        cost=values.get("cost", Decimal("0")),
        seller_name=values.get("seller_name"),
        seller_state=values["seller_state"],
        odometer=values.get("odometer"),
        receipt=values.get("receipt"),
    )
    session.add(fuel_log)
    session.flush()

    logger.info("Added fuel log %s for driver %s", fuel_log.id, driver_id)
    return fuel_log
