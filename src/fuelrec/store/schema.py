#!/usr/bin/env python3
"""
Relational Schema

SQLAlchemy declarative models for drivers, expense-card transactions,
fuel-card logs and their matches.

The at-most-one-active-match rule is enforced by the database itself through
partial unique indexes on ``matches.transaction_id`` and
``matches.fuel_log_id`` restricted to active rows.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


class Branch(Enum):
    """Operating regions drivers and staff belong to."""

    MHK = "MHK"
    DEN = "DEN"
    DSM = "DSM"

    @property
    def display_name(self) -> str:
        return {"MHK": "Manhattan", "DEN": "Denver", "DSM": "Des Moines"}[self.value]


class Base(DeclarativeBase):
    pass


class Driver(Base):
    __tablename__ = "drivers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), index=True)
    alias: Mapped[str | None] = mapped_column(String(255))
    branch: Mapped[Branch | None] = mapped_column(SAEnum(Branch, native_enum=False, length=8))
    card_last_four: Mapped[str | None] = mapped_column(String(4))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    transactions: Mapped[list["Transaction"]] = relationship(back_populates="driver")
    fuel_logs: Mapped[list["FuelLog"]] = relationship(back_populates="driver")

    def __repr__(self) -> str:
        return f"Driver(id={self.id!r}, name={self.name!r})"


class Transaction(Base):
    """Expense-card line. Immutable once stored except for admin correction."""

    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("transaction_reference", "line_number", name="uq_transactions_reference_line"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    driver_id: Mapped[str | None] = mapped_column(ForeignKey("drivers.id"), index=True)
    cardholder_name: Mapped[str] = mapped_column(String(255), index=True)
    last_four_digits: Mapped[str | None] = mapped_column(String(4))

    transaction_reference: Mapped[str] = mapped_column(String(255))
    line_number: Mapped[int] = mapped_column(Integer)
    transaction_date: Mapped[datetime] = mapped_column(DateTime, index=True)
    posting_date: Mapped[datetime] = mapped_column(DateTime)

    billing_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    line_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    gl_code: Mapped[str] = mapped_column(String(50), index=True)
    gl_code_description: Mapped[str | None] = mapped_column(Text)

    supplier_name: Mapped[str | None] = mapped_column(String(255))
    supplier_city: Mapped[str | None] = mapped_column(String(100))
    supplier_state: Mapped[str | None] = mapped_column(String(100))

    workflow_status: Mapped[str | None] = mapped_column(String(100))

    fuel_quantity: Mapped[Decimal | None] = mapped_column(Numeric(8, 3))
    fuel_unit_cost: Mapped[Decimal | None] = mapped_column(Numeric(8, 4))
    odometer_reading: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    driver: Mapped[Driver | None] = relationship(back_populates="transactions")


class FuelLog(Base):
    """Fuel-card purchase. Editable in place (date, cost, gallons, seller)."""

    __tablename__ = "fuel_logs"
    __table_args__ = (
        # Duplicate-upload guard only; rows are identified by ``id``
        UniqueConstraint("driver_id", "vehicle_id", "invoice_number", "date", name="uq_fuel_logs_upload"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    driver_id: Mapped[str] = mapped_column(ForeignKey("drivers.id"), index=True)
    vehicle_id: Mapped[str] = mapped_column(String(100), index=True)
    date: Mapped[datetime] = mapped_column(DateTime, index=True)
    invoice_number: Mapped[str] = mapped_column(String(255))

    gallons: Mapped[Decimal] = mapped_column(Numeric(8, 3))
    cost: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    seller_name: Mapped[str | None] = mapped_column(String(255))
    seller_state: Mapped[str | None] = mapped_column(String(100))

    odometer: Mapped[int | None] = mapped_column(Integer)
    receipt: Mapped[str | None] = mapped_column(String(500))

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    driver: Mapped[Driver] = relationship(back_populates="fuel_logs")


class MatchRow(Base):
    """Persisted transaction/fuel log match."""

    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    driver_id: Mapped[str] = mapped_column(ForeignKey("drivers.id"), index=True)
    transaction_id: Mapped[str] = mapped_column(ForeignKey("transactions.id"))
    fuel_log_id: Mapped[str] = mapped_column(ForeignKey("fuel_logs.id"))
    match_type: Mapped[str] = mapped_column(String(32))
    confidence: Mapped[Decimal] = mapped_column(Numeric(3, 2))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    superseded_at: Mapped[datetime | None] = mapped_column(DateTime)


Index(
    "uq_matches_active_transaction",
    MatchRow.transaction_id,
    unique=True,
    sqlite_where=MatchRow.is_active.is_(True),
    postgresql_where=MatchRow.is_active.is_(True),
)
Index(
    "uq_matches_active_fuel_log",
    MatchRow.fuel_log_id,
    unique=True,
    sqlite_where=MatchRow.is_active.is_(True),
    postgresql_where=MatchRow.is_active.is_(True),
)
