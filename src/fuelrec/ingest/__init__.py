"""
Ingest Package

Card-portal CSV exports (expense card and fuel card) into the store.
"""

from .importer import ImportResult, import_fuel_logs, import_transactions
from .loader import load_expense_rows, load_fuel_rows
from .models import ExpenseCsvRow, FuelCsvRow

__all__ = [
    "ExpenseCsvRow",
    "FuelCsvRow",
    "ImportResult",
    "import_fuel_logs",
    "import_transactions",
    "load_expense_rows",
    "load_fuel_rows",
]
