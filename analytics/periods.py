"""
Period aggregation module.

Reduces daily profit/loss into calendar periods (week/month/year or any
inclusive date range) per instrument class:
- Total profit/loss and number of recorded days
- Win rate (share of days with positive P&L)
- Maximum drawdown of total assets within the period
- Return rate from first to last snapshot, annualized for years

Stock and fund are always aggregated independently; the total only sums
profit and combines start/end assets for its return rate.
"""

import calendar
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

import pandas as pd

from analytics.profit_loss import AdjustmentLedger, SnapshotSeries, build_series
from analytics.records import ZERO, AdjustmentRecord, SnapshotRecord, parse_date
from config import config
from db.models import InstrumentClass


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar range [start, end]."""
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @property
    def days(self) -> int:
        """Calendar days covered (0 for an inverted range)."""
        return max((self.end - self.start).days + 1, 0)

    @classmethod
    def parse(cls, start, end) -> "DateRange":
        """
        Build from dates or YYYY-MM-DD strings.

        Raises:
            ValueError: If either bound cannot be parsed.
        """
        start_date, end_date = parse_date(start), parse_date(end)
        if start_date is None or end_date is None:
            raise ValueError(f"Invalid date range: {start!r} - {end!r}")
        return cls(start_date, end_date)

    def __str__(self) -> str:
        return f"{self.start.isoformat()} ~ {self.end.isoformat()}"


def month_range(year: int, month: int) -> DateRange:
    """First through last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def year_range(year: int) -> DateRange:
    """January 1 through December 31."""
    return DateRange(date(year, 1, 1), date(year, 12, 31))


def week_range(day: date) -> DateRange:
    """Monday through Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return DateRange(monday, monday + timedelta(days=6))


@dataclass
class ClassPeriodStats:
    """Aggregated metrics of one instrument class over a period."""
    instrument_class: InstrumentClass
    profit_loss: Decimal = ZERO
    days: int = 0
    win_rate: float = 0.0  # Percent
    max_drawdown: float = 0.0  # Percent, positive number
    start_asset: Decimal = ZERO
    end_asset: Decimal = ZERO
    return_rate: float = 0.0  # Percent
    annualized_return: float | None = None  # Fraction, year periods only
    daily_profit_loss: list[Decimal] = field(default_factory=list, repr=False)


@dataclass
class TotalStats:
    """Stock + fund combined."""
    profit_loss: Decimal = ZERO
    days: int = 0
    start_asset: Decimal = ZERO
    end_asset: Decimal = ZERO
    return_rate: float = 0.0  # Percent


@dataclass
class PeriodStats:
    """Stock, fund and total metrics over one date range."""
    bounds: DateRange
    stock: ClassPeriodStats
    fund: ClassPeriodStats
    total: TotalStats

    def by_class(self, instrument_class: InstrumentClass) -> ClassPeriodStats:
        return self.stock if instrument_class == InstrumentClass.STOCK else self.fund

    @property
    def has_data(self) -> bool:
        return self.stock.days > 0 or self.fund.days > 0


@dataclass
class AvailablePeriods:
    """Months (YYYY-MM, ascending) and years (descending) that have snapshots."""
    months: list[str]
    years: list[int]


def win_rate(profits: Sequence[Decimal]) -> float:
    """Percent of entries strictly above zero; 0 when empty."""
    if not profits:
        return 0.0
    winners = sum(1 for p in profits if p > 0)
    return winners / len(profits) * 100


def max_drawdown(assets: Sequence[Decimal]) -> float:
    """
    Largest peak-to-trough decline in percent.

    Points while the running peak is still 0 contribute no drawdown.
    """
    if not assets:
        return 0.0
    values = pd.Series([float(a) for a in assets], dtype=float)
    peak = values.cummax()
    drawdown = (peak - values) / peak.where(peak > 0) * 100
    worst = drawdown.max()
    return 0.0 if pd.isna(worst) else float(worst)


def return_rate(start_asset: Decimal, end_asset: Decimal) -> float:
    """Percent change from start to end; 0 when start is not positive."""
    if start_asset <= 0:
        return 0.0
    return float((end_asset - start_asset) / start_asset * 100)


def annualized_return(start_asset: Decimal, end_asset: Decimal, days: int) -> float:
    """
    (end / start) ** (days_per_year / days) - 1, as a fraction.

    0 when start is not positive or there are no days; inf if the
    compounding overflows a float.
    """
    if start_asset <= 0 or days <= 0:
        return 0.0
    ratio = float(end_asset) / float(start_asset)
    try:
        return math.pow(ratio, config.analytics.days_per_year / days) - 1
    except OverflowError:
        return math.inf


def aggregate_series(
    series: SnapshotSeries,
    ledger: AdjustmentLedger,
    bounds: DateRange,
    annualize: bool,
) -> ClassPeriodStats:
    """Aggregate an already-sorted series; shared by every period helper."""
    in_range = series.between(bounds.start, bounds.end)
    stats = ClassPeriodStats(instrument_class=series.instrument_class)
    if not in_range:
        if annualize:
            stats.annualized_return = 0.0
        return stats

    # Baselines come from the whole series, not the filtered window
    profits = [series.profit_loss_of(record, ledger) for record in in_range]

    stats.daily_profit_loss = profits
    stats.profit_loss = sum(profits, ZERO)
    stats.days = len(in_range)
    stats.win_rate = win_rate(profits)
    stats.max_drawdown = max_drawdown([r.total_asset for r in in_range])
    stats.start_asset = in_range[0].total_asset
    stats.end_asset = in_range[-1].total_asset
    stats.return_rate = return_rate(stats.start_asset, stats.end_asset)
    if annualize:
        stats.annualized_return = annualized_return(stats.start_asset, stats.end_asset, stats.days)
    return stats


def period_stats(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    instrument_class: InstrumentClass,
    bounds: DateRange,
    annualize: bool = False,
) -> ClassPeriodStats:
    """
    Aggregate one instrument class over an inclusive date range.

    Args:
        records: All snapshots (any class, any order).
        adjustments: All adjustments.
        instrument_class: Class to aggregate.
        bounds: Inclusive range, already resolved to calendar boundaries.
        annualize: Also compute annualized_return (year periods).

    Returns:
        ClassPeriodStats; all zeros when the range has no snapshots.
    """
    series = SnapshotSeries(instrument_class, records)
    return aggregate_series(series, AdjustmentLedger(adjustments), bounds, annualize)


def combine_totals(stock: ClassPeriodStats, fund: ClassPeriodStats) -> TotalStats:
    """Sum profit; derive the combined return rate from combined assets."""
    start_asset = stock.start_asset + fund.start_asset
    end_asset = stock.end_asset + fund.end_asset
    return TotalStats(
        profit_loss=stock.profit_loss + fund.profit_loss,
        days=max(stock.days, fund.days),
        start_asset=start_asset,
        end_asset=end_asset,
        return_rate=return_rate(start_asset, end_asset),
    )


def summarize_period(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    bounds: DateRange,
    annualize: bool = False,
) -> PeriodStats:
    """Stock, fund and total stats over ``bounds`` (series sorted once)."""
    series = build_series(records)
    ledger = AdjustmentLedger(adjustments)

    stock = aggregate_series(series[InstrumentClass.STOCK], ledger, bounds, annualize)
    fund = aggregate_series(series[InstrumentClass.FUND], ledger, bounds, annualize)
    return PeriodStats(bounds=bounds, stock=stock, fund=fund, total=combine_totals(stock, fund))


def monthly_stats(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    year: int,
    month: int,
) -> PeriodStats | None:
    """Calendar-month summary, or None if the month has no snapshots."""
    stats = summarize_period(records, adjustments, month_range(year, month))
    return stats if stats.has_data else None


def yearly_stats(
    records: Iterable[SnapshotRecord],
    adjustments: Iterable[AdjustmentRecord],
    year: int,
) -> PeriodStats | None:
    """Calendar-year summary with annualized returns, or None without snapshots."""
    stats = summarize_period(records, adjustments, year_range(year), annualize=True)
    return stats if stats.has_data else None


def available_periods(records: Iterable[SnapshotRecord]) -> AvailablePeriods:
    """Months and years that contain at least one snapshot."""
    months = set()
    years = set()
    for record in records:
        months.add(f"{record.date.year}-{record.date.month:02d}")
        years.add(record.date.year)
    return AvailablePeriods(months=sorted(months), years=sorted(years, reverse=True))
