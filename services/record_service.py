"""
Record Service - Saves and loads daily snapshots and capital adjustments.

This is the edit layer in front of the store:
- Validates user (or OCR) input before anything is persisted
- Applies the keying rules (one snapshot / adjustment per date and class)
- Converts ORM rows into engine records for the analytics package
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from analytics.records import (
    AdjustmentRecord,
    SnapshotRecord,
    parse_date,
    parse_instrument_class,
    parse_optional_date,
)
from db import InstrumentClass, get_db
from db.repositories import AdjustmentRepository, SnapshotRepository


logger = logging.getLogger(__name__)

# Scales of the Numeric columns amounts are stored in
MONEY_PLACES = 2
INDEX_PLACES = 4


@dataclass
class RecordResult:
    """Outcome of saving a snapshot."""
    snapshot: SnapshotRecord | None
    success: bool
    created: bool = False
    errors: list[str] = field(default_factory=list)
    status_message: str = ""


@dataclass
class AdjustmentResult:
    """Outcome of saving an adjustment. ``adjustment`` is None when cleared."""
    adjustment: AdjustmentRecord | None
    success: bool
    cleared: bool = False
    errors: list[str] = field(default_factory=list)
    status_message: str = ""


@dataclass
class Journal:
    """Snapshots and adjustments fetched together for one computation pass."""
    records: list[SnapshotRecord]
    adjustments: list[AdjustmentRecord]

    @property
    def is_empty(self) -> bool:
        return not self.records


def parse_amount(value: Any, places: int = MONEY_PLACES) -> Decimal | None:
    """
    Strictly parse an amount and round it half-up to ``places`` decimals.

    Unlike the engine's coercion this rejects garbage: returns None for
    blank, non-numeric, non-finite or out-of-range input. Rounding here
    keeps what callers validate and see equal to what is stored.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        amount = Decimal(text)
        if not amount.is_finite():
            return None
        return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _date_key(value: Any) -> str | None:
    parsed = parse_date(value) if value is not None else date.today()
    return parsed.isoformat() if parsed else None


def _class_or_error(value: Any, errors: list[str]) -> InstrumentClass | None:
    try:
        return parse_instrument_class(value)
    except ValueError as exc:
        errors.append(str(exc))
        return None


def save_record(
    record_date: Any,
    instrument_class: Any,
    total_asset: Any,
    total_market_value: Any = None,
    index_reference: Any = None,
    notes: str | None = None,
) -> RecordResult:
    """
    Create or replace the snapshot for (date, class).

    Args:
        record_date: Snapshot date (date or YYYY-MM-DD, defaults to today)
        instrument_class: STOCK or FUND
        total_asset: Total account value, required and >= 0
        total_market_value: Held-securities value (STOCK only, ignored for FUND)
        index_reference: Benchmark index value recorded alongside
        notes: Free text

    Returns:
        RecordResult with the saved snapshot or validation errors
    """
    errors: list[str] = []

    date_key = _date_key(record_date)
    if date_key is None:
        errors.append(f"Invalid date: {record_date!r}")

    cls = _class_or_error(instrument_class, errors)

    asset = parse_amount(total_asset)
    if asset is None:
        errors.append("Total asset is required and must be a number")
    elif asset < 0:
        errors.append("Total asset cannot be negative")

    market_value = None
    if cls == InstrumentClass.STOCK and total_market_value not in (None, ""):
        market_value = parse_amount(total_market_value)
        if market_value is None:
            errors.append("Market value must be a number")
        elif market_value < 0:
            errors.append("Market value cannot be negative")

    index_value = None
    if index_reference not in (None, ""):
        index_value = parse_amount(index_reference, places=INDEX_PLACES)
        if index_value is None:
            errors.append("Index reference must be a number")

    if errors:
        return RecordResult(
            snapshot=None,
            success=False,
            errors=errors,
            status_message="❌ " + "; ".join(errors),
        )

    db = get_db()
    with db.session() as session:
        repo = SnapshotRepository(session)
        row, created = repo.upsert(
            date=date_key,
            instrument_class=cls,
            total_asset=asset,
            total_market_value=market_value,
            index_reference=index_value,
            notes=notes,
        )
        snapshot = SnapshotRecord.from_model(row)

    verb = "Saved" if created else "Updated"
    logger.info(f"{verb} {cls.value} snapshot for {date_key}: {asset}")
    return RecordResult(
        snapshot=snapshot,
        success=True,
        created=created,
        status_message=f"✅ {verb} {cls.value} snapshot for {date_key}",
    )


def delete_record(record_date: Any, instrument_class: Any) -> bool:
    """Delete the snapshot for (date, class). Returns False if none existed."""
    date_key = _date_key(record_date)
    if date_key is None:
        return False
    cls = parse_instrument_class(instrument_class)

    db = get_db()
    with db.session() as session:
        deleted = SnapshotRepository(session).delete(date_key, cls)

    if deleted:
        logger.info(f"Deleted {cls.value} snapshot for {date_key}")
    return deleted


def list_records(
    instrument_class: Any = None,
    start_date: Any = None,
    end_date: Any = None,
) -> list[SnapshotRecord]:
    """
    List snapshots as engine records, date ascending.

    Raises:
        ValueError: For an unknown class or an invalid date bound.
    """
    cls = parse_instrument_class(instrument_class) if instrument_class else None
    start = parse_optional_date(start_date)
    end = parse_optional_date(end_date)

    db = get_db()
    with db.session() as session:
        rows = SnapshotRepository(session).list(
            instrument_class=cls,
            start_date=start.isoformat() if start else None,
            end_date=end.isoformat() if end else None,
        )
        return [SnapshotRecord.from_model(row) for row in rows]


def save_adjustment(
    adjustment_date: Any,
    instrument_class: Any,
    amount: Any,
    notes: str | None = None,
) -> AdjustmentResult:
    """
    Replace the adjustment for (date, class).

    A blank or zero amount clears the day's adjustment instead of storing one.

    Args:
        adjustment_date: Date (date or YYYY-MM-DD, defaults to today)
        instrument_class: STOCK or FUND
        amount: Signed amount, positive = capital added, negative = withdrawn
        notes: Free text
    """
    errors: list[str] = []

    date_key = _date_key(adjustment_date)
    if date_key is None:
        errors.append(f"Invalid date: {adjustment_date!r}")

    cls = _class_or_error(instrument_class, errors)

    value = None
    if amount not in (None, ""):
        value = parse_amount(amount)
        if value is None:
            errors.append("Adjustment amount must be a number")

    if errors:
        return AdjustmentResult(
            adjustment=None,
            success=False,
            errors=errors,
            status_message="❌ " + "; ".join(errors),
        )

    db = get_db()
    with db.session() as session:
        row = AdjustmentRepository(session).save(
            date=date_key,
            instrument_class=cls,
            amount=value,
            notes=notes,
        )
        adjustment = AdjustmentRecord.from_model(row) if row else None

    if adjustment is None:
        logger.info(f"Cleared {cls.value} adjustment for {date_key}")
        return AdjustmentResult(
            adjustment=None,
            success=True,
            cleared=True,
            status_message=f"🧹 Cleared {cls.value} adjustment for {date_key}",
        )

    logger.info(f"Saved {cls.value} adjustment for {date_key}: {value:+}")
    return AdjustmentResult(
        adjustment=adjustment,
        success=True,
        status_message=f"✅ Saved {cls.value} adjustment {value:+,.2f} for {date_key}",
    )


def delete_adjustment(adjustment_date: Any, instrument_class: Any) -> bool:
    """Delete the adjustment for (date, class). Returns False if none existed."""
    date_key = _date_key(adjustment_date)
    if date_key is None:
        return False
    cls = parse_instrument_class(instrument_class)

    db = get_db()
    with db.session() as session:
        return AdjustmentRepository(session).delete(date_key, cls)


def list_adjustments(instrument_class: Any = None) -> list[AdjustmentRecord]:
    """List adjustments as engine records, date ascending."""
    cls = parse_instrument_class(instrument_class) if instrument_class else None

    db = get_db()
    with db.session() as session:
        rows = AdjustmentRepository(session).list(instrument_class=cls)
        return [AdjustmentRecord.from_model(row) for row in rows]


def load_journal() -> Journal:
    """Fetch all snapshots and adjustments in one session (consistent view)."""
    db = get_db()
    with db.session() as session:
        records = [SnapshotRecord.from_model(r) for r in SnapshotRepository(session).list()]
        adjustments = [AdjustmentRecord.from_model(a) for a in AdjustmentRepository(session).list()]
    return Journal(records=records, adjustments=adjustments)


def print_record_result(result: RecordResult | AdjustmentResult) -> None:
    """
    Print a formatted save result to console.

    Helper function for CLI usage.
    """
    print(result.status_message)

    if isinstance(result, RecordResult) and result.snapshot:
        snapshot = result.snapshot
        print(f"   Total Asset:   {snapshot.total_asset:>14,.2f}")
        if snapshot.total_market_value is not None:
            print(f"   Market Value:  {snapshot.total_market_value:>14,.2f}")
        if snapshot.index_reference is not None:
            print(f"   Index:         {snapshot.index_reference:>14,.2f}")
        if snapshot.notes:
            print(f"   Notes: {snapshot.notes}")
