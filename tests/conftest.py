"""
Pytest configuration and shared fixtures for investment journal tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
"""
from datetime import date
from decimal import Decimal

import pytest

from analytics.records import AdjustmentRecord, SnapshotRecord
from db import InstrumentClass, init_db, reset_db


STOCK = InstrumentClass.STOCK
FUND = InstrumentClass.FUND


# =============================================================================
# Record factories
# =============================================================================

@pytest.fixture
def snapshot():
    """Build a SnapshotRecord from an ISO date and a total asset value."""
    counter = iter(range(1, 10_000))

    def _make(day: str, total_asset, instrument_class=STOCK, **kwargs) -> SnapshotRecord:
        kwargs.setdefault("id", next(counter))
        return SnapshotRecord(
            date=date.fromisoformat(day),
            instrument_class=instrument_class,
            total_asset=total_asset,
            **kwargs,
        )

    return _make


@pytest.fixture
def adjustment():
    """Build an AdjustmentRecord from an ISO date and a signed amount."""

    def _make(day: str, amount, instrument_class=STOCK, notes: str = "") -> AdjustmentRecord:
        return AdjustmentRecord(
            date=date.fromisoformat(day),
            instrument_class=instrument_class,
            amount=amount,
            notes=notes,
        )

    return _make


@pytest.fixture
def stock_series(snapshot):
    """Four stock snapshots: 10000, 12000, 9000, 11000 on consecutive weekdays."""
    return [
        snapshot("2025-03-03", Decimal("10000")),
        snapshot("2025-03-04", Decimal("12000")),
        snapshot("2025-03-05", Decimal("9000")),
        snapshot("2025-03-06", Decimal("11000")),
    ]


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
def temp_db(tmp_path):
    """Fresh SQLite database installed as the global manager for one test."""
    reset_db()
    db = init_db(f"sqlite:///{tmp_path / 'journal.db'}")
    yield db
    reset_db()
