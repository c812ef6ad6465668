"""
Fuel Reconciliation - Fuel-Card and Expense-Card Matching

Pairs expense-card transactions with fuel-card purchases for each driver so
quarterly fuel reports can show which purchases are accounted for on both
cards and which are left over.

Domain Packages:
- core: Money, dates, quarter windows, configuration
- matching: Normalize, pair, score and resolve records into matches
- store: Relational persistence for drivers, records and matches
- ingest: Card-portal CSV exports into the store
- cli: Command-line interface

Example Usage:
    from fuelrec.matching.service import MatchingService
    from fuelrec.store import Database
    from fuelrec.core import QuarterWindow
"""

__version__ = "0.1.0"
__author__ = "Fleet Back Office"

from .core.config import Environment, get_config
from .core.dates import FinancialDate
from .core.money import Money
from .core.quarters import QuarterWindow

__all__ = [
    # Configuration
    "Environment",
    "get_config",
    # Primitives
    "FinancialDate",
    "Money",
    "QuarterWindow",
]
