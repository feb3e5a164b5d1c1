"""
Repository pattern for data access operations.

Provides a clean abstraction layer between business logic and database operations.
Each repository enforces the keying rules of its entity:
- Snapshot: one row per (date, instrument_class), saved by upsert
- Adjustment: one row per (date, instrument_class), a new save replaces it
- Target: one row per (instrument_class, period)
"""

from decimal import Decimal
from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models import (
    Adjustment,
    InstrumentClass,
    Snapshot,
    Target,
    TargetPeriod,
)


class SnapshotRepository:
    """Repository for daily account snapshots."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, date: str, instrument_class: InstrumentClass) -> Snapshot | None:
        """Get the snapshot for a (date, class) key."""
        stmt = select(Snapshot).where(
            Snapshot.date == date,
            Snapshot.instrument_class == instrument_class,
        )
        return self.session.scalar(stmt)

    def list(
        self,
        instrument_class: InstrumentClass | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> Sequence[Snapshot]:
        """
        List snapshots ordered by date ascending.

        Args:
            instrument_class: Optional class filter.
            start_date: Optional inclusive lower bound (YYYY-MM-DD).
            end_date: Optional inclusive upper bound (YYYY-MM-DD).
        """
        stmt = select(Snapshot)
        if instrument_class is not None:
            stmt = stmt.where(Snapshot.instrument_class == instrument_class)
        if start_date:
            stmt = stmt.where(Snapshot.date >= start_date)
        if end_date:
            stmt = stmt.where(Snapshot.date <= end_date)
        stmt = stmt.order_by(Snapshot.date, Snapshot.id)
        return self.session.scalars(stmt).all()

    def upsert(
        self,
        date: str,
        instrument_class: InstrumentClass,
        total_asset: Decimal,
        total_market_value: Decimal | None = None,
        index_reference: Decimal | None = None,
        notes: str | None = None,
    ) -> tuple[Snapshot, bool]:
        """
        Create or replace the snapshot for (date, class).

        Returns:
            Tuple of (snapshot, created) where created is True if new.
        """
        snapshot = self.get(date, instrument_class)
        created = snapshot is None
        if created:
            snapshot = Snapshot(date=date, instrument_class=instrument_class)
            self.session.add(snapshot)

        snapshot.total_asset = total_asset
        snapshot.total_market_value = total_market_value
        snapshot.index_reference = index_reference
        snapshot.notes = notes or ""
        self.session.flush()  # Get the ID
        return snapshot, created

    def delete(self, date: str, instrument_class: InstrumentClass) -> bool:
        """Delete the snapshot for (date, class). Returns False if none existed."""
        snapshot = self.get(date, instrument_class)
        if snapshot is None:
            return False
        self.session.delete(snapshot)
        self.session.flush()
        return True


class AdjustmentRepository:
    """Repository for capital adjustments (deposits/withdrawals)."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, date: str, instrument_class: InstrumentClass) -> Adjustment | None:
        """Get the adjustment for a (date, class) key."""
        stmt = select(Adjustment).where(
            Adjustment.date == date,
            Adjustment.instrument_class == instrument_class,
        )
        return self.session.scalar(stmt)

    def list(
        self,
        instrument_class: InstrumentClass | None = None,
    ) -> Sequence[Adjustment]:
        """List adjustments ordered by date ascending."""
        stmt = select(Adjustment)
        if instrument_class is not None:
            stmt = stmt.where(Adjustment.instrument_class == instrument_class)
        stmt = stmt.order_by(Adjustment.date, Adjustment.id)
        return self.session.scalars(stmt).all()

    def save(
        self,
        date: str,
        instrument_class: InstrumentClass,
        amount: Decimal | None,
        notes: str | None = None,
    ) -> Adjustment | None:
        """
        Replace any adjustment for (date, class) with a new one.

        A missing or zero amount leaves no row behind, which is how an
        adjustment is cleared.

        Returns:
            The stored Adjustment, or None when nothing was stored.
        """
        self.delete(date, instrument_class)

        if not amount:
            return None

        adjustment = Adjustment(
            date=date,
            instrument_class=instrument_class,
            amount=amount,
            notes=notes or "",
        )
        self.session.add(adjustment)
        self.session.flush()
        return adjustment

    def delete(self, date: str, instrument_class: InstrumentClass) -> bool:
        """Delete adjustments for (date, class). Returns False if none existed."""
        result = self.session.execute(
            delete(Adjustment).where(
                Adjustment.date == date,
                Adjustment.instrument_class == instrument_class,
            )
        )
        self.session.flush()
        return bool(result.rowcount)


class TargetRepository:
    """Repository for profit targets."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, instrument_class: InstrumentClass, period: TargetPeriod) -> Target | None:
        """Get the target for (class, period)."""
        stmt = select(Target).where(
            Target.instrument_class == instrument_class,
            Target.period == period,
        )
        return self.session.scalar(stmt)

    def list(self, instrument_class: InstrumentClass | None = None) -> Sequence[Target]:
        """List targets ordered by class then period."""
        stmt = select(Target)
        if instrument_class is not None:
            stmt = stmt.where(Target.instrument_class == instrument_class)
        stmt = stmt.order_by(Target.instrument_class, Target.period)
        return self.session.scalars(stmt).all()

    def upsert(
        self,
        instrument_class: InstrumentClass,
        period: TargetPeriod,
        target_amount: Decimal,
        period_start_date: str | None = None,
    ) -> tuple[Target, bool]:
        """
        Create or replace the target for (class, period).

        Returns:
            Tuple of (target, created) where created is True if new.
        """
        target = self.get(instrument_class, period)
        created = target is None
        if created:
            target = Target(instrument_class=instrument_class, period=period)
            self.session.add(target)

        target.target_amount = target_amount
        target.period_start_date = period_start_date if period == TargetPeriod.WEEK else None
        self.session.flush()
        return target, created

    def delete(self, instrument_class: InstrumentClass, period: TargetPeriod) -> bool:
        """Delete the target for (class, period). Returns False if none existed."""
        target = self.get(instrument_class, period)
        if target is None:
            return False
        self.session.delete(target)
        self.session.flush()
        return True
