"""
SQLAlchemy ORM Models for the Investment Journal.

Defines the persisted entities:
- Snapshots (one dated account value per instrument class)
- Adjustments (signed capital flows: deposits/withdrawals)
- Targets (profit goals per instrument class and period)

Dates are stored as YYYY-MM-DD strings, matching how they are entered.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class InstrumentClass(str, Enum):
    """
    Partition of the journal.

    Stock and fund histories are wholly independent: profit/loss,
    adjustments and targets never mix across classes.
    """
    STOCK = "STOCK"
    FUND = "FUND"


class TargetPeriod(str, Enum):
    """Calendar period a profit target applies to."""
    WEEK = "WEEK"
    MONTH = "MONTH"
    YEAR = "YEAR"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snapshot(Base):
    """
    Daily account value snapshot.

    At most one snapshot per (date, instrument_class); saving again for the
    same key replaces the existing row (enforced by SnapshotRepository.upsert).
    """
    __tablename__ = "snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD format
    instrument_class: Mapped[InstrumentClass] = mapped_column(
        SQLEnum(InstrumentClass, native_enum=False, length=10),
        nullable=False,
    )
    total_asset: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    # Held-securities value, only meaningful for STOCK
    total_market_value: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 2))
    # Benchmark value recorded alongside (charting only, never used for P&L)
    index_reference: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 4))
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("date", "instrument_class", name="uq_snapshot_date_class"),
        CheckConstraint("total_asset >= 0", name="check_snapshot_total_asset"),
        Index("idx_snapshots_class_date", "instrument_class", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Snapshot(id={self.id}, date={self.date}, "
            f"class={self.instrument_class}, total_asset={self.total_asset})>"
        )


class Adjustment(Base):
    """
    Capital flow on a given day.

    Conventions:
    - Positive amount = capital added (deposit / add to position)
    - Negative amount = capital withdrawn (reduce position)
    - A zero amount is never stored
    """
    __tablename__ = "adjustments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD format
    instrument_class: Mapped[InstrumentClass] = mapped_column(
        SQLEnum(InstrumentClass, native_enum=False, length=10),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("date", "instrument_class", name="uq_adjustment_date_class"),
        CheckConstraint("amount != 0", name="check_adjustment_nonzero"),
    )

    def __repr__(self) -> str:
        return (
            f"<Adjustment(id={self.id}, date={self.date}, "
            f"class={self.instrument_class}, amount={self.amount})>"
        )


class Target(Base):
    """
    Profit target for an instrument class over a calendar period.

    period_start_date is kept for WEEK targets created with a custom start,
    but progress always uses the current calendar week.
    """
    __tablename__ = "targets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    instrument_class: Mapped[InstrumentClass] = mapped_column(
        SQLEnum(InstrumentClass, native_enum=False, length=10),
        nullable=False,
    )
    period: Mapped[TargetPeriod] = mapped_column(
        SQLEnum(TargetPeriod, native_enum=False, length=10),
        nullable=False,
    )
    target_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    period_start_date: Mapped[Optional[str]] = mapped_column(String(10))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utcnow, onupdate=_utcnow, nullable=False
    )

    __table_args__ = (
        UniqueConstraint("instrument_class", "period", name="uq_target_class_period"),
        CheckConstraint("target_amount > 0", name="check_target_amount_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<Target(id={self.id}, class={self.instrument_class}, "
            f"period={self.period}, amount={self.target_amount})>"
        )
