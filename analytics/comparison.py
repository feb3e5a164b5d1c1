"""
Date range comparison.

Computes stock/fund/total statistics for two arbitrary date ranges
independently. Each range is anchored on the latest snapshot before its
start, so the first day's profit is never dropped and the return rate is
measured from the value the range actually started with.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from analytics.periods import (
    ClassPeriodStats,
    DateRange,
    TotalStats,
    aggregate_series,
    combine_totals,
    return_rate,
)
from analytics.profit_loss import AdjustmentLedger, SnapshotSeries, build_series
from analytics.records import ZERO, AdjustmentRecord, SnapshotRecord
from db.models import InstrumentClass

COMPARED_FIELDS = ("profit_loss", "win_rate", "return_rate")


@dataclass
class RangeStats:
    """Statistics of one compared range."""
    bounds: DateRange
    stock: ClassPeriodStats
    fund: ClassPeriodStats
    total: TotalStats

    def by_class(self, instrument_class: InstrumentClass) -> ClassPeriodStats:
        return self.stock if instrument_class == InstrumentClass.STOCK else self.fund


@dataclass
class ComparisonResult:
    """Side-by-side statistics of range A and range B."""
    stats_a: RangeStats
    stats_b: RangeStats

    def differences(self) -> dict[str, dict[str, Decimal | float]]:
        """
        B minus A for profit, win rate and return rate.

        Returns:
            {"stock": {...}, "fund": {...}, "total": {...}}; the total has
            no win rate.
        """
        result = {}
        for section in ("stock", "fund", "total"):
            a, b = getattr(self.stats_a, section), getattr(self.stats_b, section)
            result[section] = {
                name: getattr(b, name) - getattr(a, name)
                for name in COMPARED_FIELDS
                if hasattr(a, name)
            }
        return result


def _anchored_stats(
    series: SnapshotSeries,
    ledger: AdjustmentLedger,
    bounds: DateRange,
) -> ClassPeriodStats:
    stats = aggregate_series(series, ledger, bounds, annualize=False)

    baseline = series.last_before(bounds.start)
    in_range = series.between(bounds.start, bounds.end)

    if baseline is not None:
        start_asset = baseline.total_asset
    elif in_range:
        start_asset = in_range[0].total_asset
    else:
        start_asset = ZERO
    end_asset = in_range[-1].total_asset if in_range else start_asset

    stats.start_asset = start_asset
    stats.end_asset = end_asset
    stats.return_rate = return_rate(start_asset, end_asset)
    return stats


def range_stats(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    bounds: DateRange,
) -> RangeStats | None:
    """
    Statistics of one date range.

    Returns:
        RangeStats, or None when no snapshot of either class falls in the range.
    """
    series = build_series(records)
    ledger = AdjustmentLedger(adjustments)

    stock = _anchored_stats(series[InstrumentClass.STOCK], ledger, bounds)
    fund = _anchored_stats(series[InstrumentClass.FUND], ledger, bounds)
    if stock.days == 0 and fund.days == 0:
        return None

    return RangeStats(bounds=bounds, stock=stock, fund=fund, total=combine_totals(stock, fund))


def compare_ranges(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    range_a: DateRange,
    range_b: DateRange,
) -> ComparisonResult | None:
    """
    Compute statistics for two ranges independently.

    Returns:
        ComparisonResult, or None ("no data") if either range is empty.
    """
    records = list(records)
    adjustments = list(adjustments)

    stats_a = range_stats(records, adjustments, range_a)
    stats_b = range_stats(records, adjustments, range_b)
    if stats_a is None or stats_b is None:
        return None
    return ComparisonResult(stats_a=stats_a, stats_b=stats_b)
