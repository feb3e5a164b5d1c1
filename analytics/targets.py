"""
Target progress tracking.

Compares the profit made in the current calendar period against a
user-defined target:
- WEEK: Monday through Sunday of the current week
- MONTH: first through last day of the current month
- YEAR: January 1 through December 31 of the current year

A stored week start date does not move the week window; the current
calendar week is always used.
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from analytics.periods import DateRange, month_range, week_range, year_range
from analytics.profit_loss import AdjustmentLedger, SnapshotSeries
from analytics.records import ZERO, AdjustmentRecord, SnapshotRecord, TargetSpec, to_decimal
from config import config
from db.models import InstrumentClass, TargetPeriod

HUNDRED = Decimal(100)


@dataclass
class TargetProgress:
    """Completion state of a target in its current period."""
    target: TargetSpec
    actual_profit: Decimal
    percentage: float
    is_achieved: bool
    remaining: Decimal
    start_date: date
    end_date: date

    @property
    def instrument_class(self) -> InstrumentClass:
        return self.target.instrument_class

    @property
    def period(self) -> TargetPeriod:
        return self.target.period

    @property
    def target_amount(self) -> Decimal:
        return self.target.target_amount


def resolve_period_range(period: TargetPeriod, today: date | None = None) -> DateRange:
    """Current calendar week, month or year relative to ``today``."""
    today = today or date.today()
    if period == TargetPeriod.WEEK:
        return week_range(today)
    if period == TargetPeriod.MONTH:
        return month_range(today.year, today.month)
    if period == TargetPeriod.YEAR:
        return year_range(today.year)
    return DateRange(today, today)


def period_profit(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    instrument_class: InstrumentClass,
    bounds: DateRange,
) -> Decimal:
    """
    Sum of daily P&L for the class's snapshots within ``bounds``.

    The first in-range snapshot is measured against the latest snapshot
    before ``bounds.start``, so a period that just started is not zeroed.
    """
    series = SnapshotSeries(instrument_class, records)
    ledger = AdjustmentLedger(adjustments)
    return sum(
        (series.profit_loss_of(record, ledger) for record in series.between(bounds.start, bounds.end)),
        ZERO,
    )


def calculate_progress(actual_profit, target_amount) -> tuple[float, bool, Decimal]:
    """
    Completion of a target.

    Returns:
        (percentage, is_achieved, remaining). Percentage is capped at 100
        but not floored, and rounded to configured places. A zero or
        missing target gives (0.0, False, 0).
    """
    actual = to_decimal(actual_profit)
    target = to_decimal(target_amount)
    if target == 0:
        return 0.0, False, ZERO

    percentage = min(actual / target * HUNDRED, HUNDRED)
    places = Decimal(1).scaleb(-config.analytics.percentage_places)
    percentage = percentage.quantize(places, rounding=ROUND_HALF_UP)

    return float(percentage), actual >= target, max(target - actual, ZERO)


def target_progress(
    target: TargetSpec,
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    today: date | None = None,
) -> TargetProgress:
    """
    Progress of ``target`` within its current calendar period.

    Args:
        target: The target to evaluate.
        records: All snapshots.
        adjustments: All adjustments.
        today: Reference day (defaults to the current date).
    """
    bounds = resolve_period_range(target.period, today)
    actual = period_profit(records, adjustments, target.instrument_class, bounds)
    percentage, is_achieved, remaining = calculate_progress(actual, target.target_amount)

    return TargetProgress(
        target=target,
        actual_profit=actual,
        percentage=percentage,
        is_achieved=is_achieved,
        remaining=remaining,
        start_date=bounds.start,
        end_date=bounds.end,
    )
