#!/usr/bin/env python3
"""
Card Export Loader

Reads card-portal CSV exports into typed rows.

Functions:
- load_expense_rows: Expense-card statement export -> ExpenseCsvRow list
- load_fuel_rows: Fuel-card portal export -> FuelCsvRow list

Rows that fail to parse are reported back as error strings rather than
aborting the load, so one bad line never blocks the rest of an upload.
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

import pandas as pd

from .models import (
    EXPENSE_HEADER_MAP,
    EXPENSE_REQUIRED_HEADERS,
    FUEL_HEADER_MAP,
    FUEL_REQUIRED_HEADERS,
    ExpenseCsvRow,
    FuelCsvRow,
)

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


def read_export(csv_path: str | Path, header_map: dict[str, str], required_headers: Iterable[str]) -> pd.DataFrame:
    """
    Read an export as all-string columns.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is empty or lacks a required column
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    try:
        # Keep every cell as text; blank cells stay "" instead of NaN
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"CSV file is empty: {csv_path}") from e
    except pd.errors.ParserError as e:
        raise ValueError(f"Cannot parse {csv_path}: {e}") from e

    df.columns = [str(column).strip() for column in df.columns]

    missing = [header for header in required_headers if header not in df.columns]
    if missing:
        raise ValueError(f"{csv_path.name} is missing required columns: {', '.join(missing)}")

    unmapped = [column for column in df.columns if column not in header_map]
    if unmapped:
        logger.debug("Ignoring unmapped columns in %s: %s", csv_path.name, unmapped)

    return df


def _parse_rows(
    df: pd.DataFrame, parse: Callable[[dict[str, Any]], RowT], source: str
) -> tuple[list[RowT], list[str]]:
    rows: list[RowT] = []
    errors: list[str] = []

    for position, (_, row) in enumerate(df.iterrows()):
        values = row.to_dict()
        if not any(str(v).strip() for v in values.values()):
            continue
        # Line numbers as seen in a spreadsheet, after the header line
        line = position + 2
        try:
            rows.append(parse(values))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Failed to parse line %d in %s: %s", line, source, e)
            errors.append(f"Line {line}: {e}")

    return rows, errors


def load_expense_rows(csv_path: str | Path) -> tuple[list[ExpenseCsvRow], list[str]]:
    """
    Load an expense-card statement export.

    Returns:
        Tuple of (rows, errors); one error string per rejected line
    """
    df = read_export(csv_path, EXPENSE_HEADER_MAP, EXPENSE_REQUIRED_HEADERS)
    rows, errors = _parse_rows(df, ExpenseCsvRow.from_csv_row, Path(csv_path).name)
    logger.info("Loaded %d expense rows from %s (%d rejected)", len(rows), csv_path, len(errors))
    return rows, errors


def load_fuel_rows(csv_path: str | Path) -> tuple[list[FuelCsvRow], list[str]]:
    """
    Load a fuel-card portal export.

    Returns:
        Tuple of (rows, errors); one error string per rejected line
    """
    df = read_export(csv_path, FUEL_HEADER_MAP, FUEL_REQUIRED_HEADERS)
    rows, errors = _parse_rows(df, FuelCsvRow.from_csv_row, Path(csv_path).name)
    logger.info("Loaded %d fuel rows from %s (%d rejected)", len(rows), csv_path, len(errors))
    return rows, errors
