"""
Store Package

SQLAlchemy persistence for drivers, expense-card transactions, fuel logs and
matches.
"""

from .admin import create_fuel_log, edit_driver, set_driver_active, update_fuel_log
from .database import Database, build_engine
from .match_store import MatchScope, MatchStore
from .schema import Base, Branch, Driver, FuelLog, MatchRow, Transaction

__all__ = [
    "Base",
    "Branch",
    "Database",
    "Driver",
    "FuelLog",
    "MatchRow",
    "MatchScope",
    "MatchStore",
    "Transaction",
    "build_engine",
    "create_fuel_log",
    "edit_driver",
    "set_driver_active",
    "update_fuel_log",
]
