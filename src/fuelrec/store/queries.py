#!/usr/bin/env python3
"""
Row Loaders

Read helpers for drivers, transactions and fuel logs. Window filtering is
done in SQL on whole calendar days so the matching core only ever sees rows
that can fall inside the window.
"""

from datetime import datetime, time, timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..core.quarters import QuarterWindow
from .schema import Branch, Driver, FuelLog, Transaction


def _window_bounds(window: QuarterWindow) -> tuple[datetime, datetime]:
    """Half-open datetime bounds covering every moment of the inclusive window."""
    start = datetime.combine(window.start.date, time.min)
    end = datetime.combine(window.end.date + timedelta(days=1), time.min)
    return start, end


def get_driver(session: Session, driver_id: str) -> Driver | None:
    return session.get(Driver, driver_id)


def find_driver_by_name(session: Session, name: str) -> Driver | None:
    """
    Find an active driver whose name or alias equals ``name`` (case-insensitive).

    Card exports spell cardholder names inconsistently, so the alias column
    holds the alternate spelling.
    """
    wanted = name.strip().lower()
    if not wanted:
        return None
    stmt = (
        select(Driver)
        .where(Driver.is_active.is_(True))
        .where(or_(func.lower(Driver.name) == wanted, func.lower(Driver.alias) == wanted))
        .order_by(Driver.created_at, Driver.id)
    )
    return session.scalars(stmt).first()


def find_driver_by_name_and_branch(session: Session, name: str, branch: Branch | None) -> Driver | None:
    """Exact (case-insensitive) name lookup within one branch, inactive drivers included."""
    stmt = select(Driver).where(func.lower(Driver.name) == name.strip().lower())
    if branch is None:
        stmt = stmt.where(Driver.branch.is_(None))
    else:
        stmt = stmt.where(Driver.branch == branch)
    return session.scalars(stmt.order_by(Driver.created_at, Driver.id)).first()


def list_drivers(session: Session, include_inactive: bool = False) -> list[Driver]:
    stmt = select(Driver).order_by(Driver.name)
    if not include_inactive:
        stmt = stmt.where(Driver.is_active.is_(True))
    return list(session.scalars(stmt))


def load_transactions_for_driver(
    session: Session, driver_id: str, window: QuarterWindow | None = None
) -> list[Transaction]:
    stmt = select(Transaction).where(Transaction.driver_id == driver_id)
    if window is not None and window.is_valid:
        start, end = _window_bounds(window)
        stmt = stmt.where(Transaction.transaction_date >= start, Transaction.transaction_date < end)
    return list(session.scalars(stmt.order_by(Transaction.transaction_date, Transaction.id)))


def load_fuel_logs_for_driver(
    session: Session, driver_id: str, window: QuarterWindow | None = None
) -> list[FuelLog]:
    stmt = select(FuelLog).where(FuelLog.driver_id == driver_id)
    if window is not None and window.is_valid:
        start, end = _window_bounds(window)
        stmt = stmt.where(FuelLog.date >= start, FuelLog.date < end)
    return list(session.scalars(stmt.order_by(FuelLog.date, FuelLog.id)))
