"""
Target Service - Manages profit targets and reports their progress.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from analytics.records import TargetSpec, parse_date, parse_instrument_class
from analytics.targets import TargetProgress, target_progress
from db import TargetPeriod, get_db
from db.repositories import TargetRepository
from services.record_service import load_journal, parse_amount

logger = logging.getLogger(__name__)


@dataclass
class TargetResult:
    """Outcome of saving a target."""
    target: TargetSpec | None
    success: bool
    created: bool = False
    errors: list[str] = field(default_factory=list)
    status_message: str = ""


def parse_period(value: Any) -> TargetPeriod:
    """Parse 'week' / 'MONTH' / TargetPeriod into TargetPeriod."""
    if isinstance(value, TargetPeriod):
        return value
    try:
        return TargetPeriod(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown target period: {value!r}") from None


def set_target(
    instrument_class: Any,
    period: Any,
    target_amount: Any,
    period_start_date: Any = None,
) -> TargetResult:
    """
    Create or replace the target for (class, period).

    Args:
        instrument_class: STOCK or FUND
        period: WEEK, MONTH or YEAR
        target_amount: Profit goal, must be positive
        period_start_date: Optional custom week start; stored for WEEK
            targets only and not used when computing progress
    """
    errors: list[str] = []

    try:
        cls = parse_instrument_class(instrument_class)
    except ValueError as exc:
        cls = None
        errors.append(str(exc))

    try:
        target_period = parse_period(period)
    except ValueError as exc:
        target_period = None
        errors.append(str(exc))

    amount = parse_amount(target_amount)
    if amount is None or amount <= 0:
        errors.append("Target amount must be a positive number")

    start_key = None
    if period_start_date not in (None, ""):
        start = parse_date(period_start_date)
        if start is None:
            errors.append(f"Invalid period start date: {period_start_date!r}")
        else:
            start_key = start.isoformat()

    if errors:
        return TargetResult(
            target=None,
            success=False,
            errors=errors,
            status_message="❌ " + "; ".join(errors),
        )

    db = get_db()
    with db.session() as session:
        row, created = TargetRepository(session).upsert(
            instrument_class=cls,
            period=target_period,
            target_amount=amount,
            period_start_date=start_key,
        )
        target = TargetSpec.from_model(row)

    logger.info(f"Set {cls.value} {target_period.value} target to {amount}")
    return TargetResult(
        target=target,
        success=True,
        created=created,
        status_message=f"🎯 {cls.value} {target_period.value.lower()} target set to {amount:,.2f}",
    )


def delete_target(instrument_class: Any, period: Any) -> bool:
    """Delete the target for (class, period). Returns False if none existed."""
    cls = parse_instrument_class(instrument_class)
    target_period = parse_period(period)

    db = get_db()
    with db.session() as session:
        deleted = TargetRepository(session).delete(cls, target_period)

    if deleted:
        logger.info(f"Deleted {cls.value} {target_period.value} target")
    return deleted


def list_targets() -> list[TargetSpec]:
    """All targets ordered by class then period."""
    db = get_db()
    with db.session() as session:
        return [TargetSpec.from_model(row) for row in TargetRepository(session).list()]


def get_all_progress(today: date | None = None) -> list[TargetProgress]:
    """Progress of every stored target in its current calendar period."""
    targets = list_targets()
    if not targets:
        return []

    journal = load_journal()
    return [
        target_progress(target, journal.records, journal.adjustments, today=today)
        for target in targets
    ]
