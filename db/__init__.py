"""
Database package initialization.

Exports commonly used components for convenient imports:
    from db import get_db, Snapshot, InstrumentClass, etc.
"""

from db.models import (
    Adjustment,
    Base,
    InstrumentClass,
    Snapshot,
    Target,
    TargetPeriod,
)
from db.session import (
    DatabaseManager,
    get_db,
    init_db,
    reset_db,
)
from db.repositories import (
    AdjustmentRepository,
    SnapshotRepository,
    TargetRepository,
)

__all__ = [
    # Models
    "Adjustment",
    "Base",
    "InstrumentClass",
    "Snapshot",
    "Target",
    "TargetPeriod",
    # Session management
    "DatabaseManager",
    "get_db",
    "init_db",
    "reset_db",
    # Repositories
    "AdjustmentRepository",
    "SnapshotRepository",
    "TargetRepository",
]
