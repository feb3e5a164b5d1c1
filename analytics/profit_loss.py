"""
Profit/loss attribution engine.

Daily P&L separates market-driven change from capital flows:

    daily P&L = total_asset(today) - adjustments(today) - total_asset(previous)

- The first snapshot of a series has no baseline, so its P&L is 0
- Adjustments only count on the exact (date, class) of the snapshot
- "Previous" is the preceding snapshot of the same class. It is found by
  position in the sorted series when the record is part of it, else by the
  nearest strictly earlier date (so filtered views keep the true baseline)

Everything here is pure: no I/O, no shared state, no rounding.
"""

from bisect import bisect_left, bisect_right
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Iterator, Sequence

import pandas as pd

from analytics.records import (
    ZERO,
    AdjustmentRecord,
    SnapshotRecord,
    to_decimal,
)
from db.models import InstrumentClass


DAILY_COLUMNS = [
    "date",
    "instrument_class",
    "total_asset",
    "total_market_value",
    "index_reference",
    "adjustment",
    "profit_loss",
    "cumulative_profit_loss",
    "notes",
]


class AdjustmentLedger:
    """
    Adjustment totals keyed by (date, instrument_class).

    Built once per computation pass so aggregators do not rescan the full
    adjustment list for every snapshot.
    """

    def __init__(self, adjustments: Iterable[AdjustmentRecord] = ()):
        self._totals: dict[tuple[date, InstrumentClass], Decimal] = defaultdict(lambda: ZERO)
        for adjustment in adjustments:
            key = (adjustment.date, adjustment.instrument_class)
            self._totals[key] += to_decimal(adjustment.amount)

    def total_for(self, day: date, instrument_class: InstrumentClass) -> Decimal:
        return self._totals.get((day, instrument_class), ZERO)

    def __len__(self) -> int:
        return len(self._totals)


def adjustment_total(
    adjustments: Iterable[AdjustmentRecord] | AdjustmentLedger,
    day: date,
    instrument_class: InstrumentClass,
) -> Decimal:
    """Sum of adjustment amounts on exactly (day, instrument_class)."""
    if isinstance(adjustments, AdjustmentLedger):
        return adjustments.total_for(day, instrument_class)
    return sum(
        (
            to_decimal(a.amount)
            for a in adjustments
            if a.date == day and a.instrument_class == instrument_class
        ),
        ZERO,
    )


def daily_profit_loss(
    record: SnapshotRecord,
    previous_record: SnapshotRecord | None,
    adjustments: Iterable[AdjustmentRecord] | AdjustmentLedger,
) -> Decimal:
    """
    Market-driven profit/loss of a snapshot against its predecessor.

    Args:
        record: Snapshot being evaluated.
        previous_record: Preceding snapshot of the same class, or None.
        adjustments: All adjustments (filtered here by date and class),
            or a prebuilt AdjustmentLedger.

    Returns:
        Decimal(0) without a previous record, otherwise
        record.total_asset - same-day adjustments - previous.total_asset.
    """
    if previous_record is None:
        return ZERO

    flow = adjustment_total(adjustments, record.date, record.instrument_class)
    return to_decimal(record.total_asset) - flow - to_decimal(previous_record.total_asset)


class SnapshotSeries:
    """
    Date-ordered snapshots of one instrument class.

    Sorted once on construction; lookups are by identity or bisection.
    """

    def __init__(self, instrument_class: InstrumentClass, records: Iterable[SnapshotRecord]):
        self.instrument_class = instrument_class
        self.records: list[SnapshotRecord] = sorted(
            (r for r in records if r.instrument_class == instrument_class),
            key=lambda r: r.date,
        )
        self._dates = [r.date for r in self.records]
        # First occurrence wins when records share a (date, id) key
        self._positions: dict[tuple[date, object], int] = {}
        for i, record in enumerate(self.records):
            self._positions.setdefault(record.key, i)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[SnapshotRecord]:
        return iter(self.records)

    def __bool__(self) -> bool:
        return bool(self.records)

    def previous_of(self, record: SnapshotRecord) -> SnapshotRecord | None:
        """
        Baseline snapshot for a record.

        If the record is part of this series (same date and id), its
        predecessor by position; otherwise the latest snapshot dated
        strictly before it.
        """
        if record.instrument_class != self.instrument_class:
            return None

        position = self._positions.get(record.key)
        if position is not None:
            return self.records[position - 1] if position > 0 else None
        return self.last_before(record.date)

    def last_before(self, day: date) -> SnapshotRecord | None:
        """Latest snapshot dated strictly before ``day``."""
        index = bisect_left(self._dates, day)
        return self.records[index - 1] if index > 0 else None

    def between(self, start: date | None = None, end: date | None = None) -> list[SnapshotRecord]:
        """Snapshots with start <= date <= end (open ends allowed)."""
        lo = bisect_left(self._dates, start) if start else 0
        hi = bisect_right(self._dates, end) if end else len(self._dates)
        return self.records[lo:hi]

    def profit_loss_of(
        self,
        record: SnapshotRecord,
        adjustments: Iterable[AdjustmentRecord] | AdjustmentLedger,
    ) -> Decimal:
        """daily_profit_loss of ``record`` against its baseline in this series."""
        return daily_profit_loss(record, self.previous_of(record), adjustments)


def build_series(records: Iterable[SnapshotRecord]) -> dict[InstrumentClass, SnapshotSeries]:
    """Split records into one sorted series per instrument class."""
    records = list(records)
    return {cls: SnapshotSeries(cls, records) for cls in InstrumentClass}


def previous_record(
    record: SnapshotRecord,
    records: Sequence[SnapshotRecord],
) -> SnapshotRecord | None:
    """Locate the baseline snapshot of ``record`` within ``records``."""
    return SnapshotSeries(record.instrument_class, records).previous_of(record)


def _as_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def daily_profit_series(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    start: date | None = None,
    end: date | None = None,
) -> pd.DataFrame:
    """
    Per-snapshot profit/loss table for charts and exports.

    Baselines always come from the full series, so the first row of a
    filtered window still compares against its true predecessor.
    Cumulative P&L restarts at the window start for each class.

    Returns:
        DataFrame with DAILY_COLUMNS, ordered by date then class.
    """
    ledger = AdjustmentLedger(adjustments)
    rows = []

    for instrument_class, series in build_series(records).items():
        running = ZERO
        for record in series.between(start, end):
            profit = series.profit_loss_of(record, ledger)
            running += profit
            rows.append({
                "date": record.date,
                "instrument_class": instrument_class.value,
                "total_asset": float(record.total_asset),
                "total_market_value": _as_float(record.total_market_value),
                "index_reference": _as_float(record.index_reference),
                "adjustment": float(ledger.total_for(record.date, instrument_class)),
                "profit_loss": float(profit),
                "cumulative_profit_loss": float(running),
                "notes": record.notes,
            })

    if not rows:
        return pd.DataFrame(columns=DAILY_COLUMNS)

    df = pd.DataFrame(rows, columns=DAILY_COLUMNS)
    return df.sort_values(["date", "instrument_class"], kind="stable").reset_index(drop=True)
