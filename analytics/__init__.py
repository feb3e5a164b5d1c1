"""
Analytics package initialization.

Exports commonly used analytics functions for convenient imports:
    from analytics import daily_profit_loss, summarize_period, target_progress, etc.
"""

from analytics.records import (
    AdjustmentRecord,
    SnapshotRecord,
    TargetSpec,
    parse_date,
    to_decimal,
)
from analytics.profit_loss import (
    AdjustmentLedger,
    SnapshotSeries,
    adjustment_total,
    build_series,
    daily_profit_loss,
    daily_profit_series,
    previous_record,
)
from analytics.periods import (
    AvailablePeriods,
    ClassPeriodStats,
    DateRange,
    PeriodStats,
    TotalStats,
    available_periods,
    month_range,
    monthly_stats,
    period_stats,
    summarize_period,
    week_range,
    year_range,
    yearly_stats,
)
from analytics.targets import (
    TargetProgress,
    calculate_progress,
    period_profit,
    resolve_period_range,
    target_progress,
)
from analytics.comparison import (
    ComparisonResult,
    RangeStats,
    compare_ranges,
    range_stats,
)
from analytics.trend import (
    aggregate_by_period,
    moving_average,
    predict_trend,
)

__all__ = [
    # Records
    "AdjustmentRecord",
    "SnapshotRecord",
    "TargetSpec",
    "parse_date",
    "to_decimal",
    # Profit/loss engine
    "AdjustmentLedger",
    "SnapshotSeries",
    "adjustment_total",
    "build_series",
    "daily_profit_loss",
    "daily_profit_series",
    "previous_record",
    # Periods
    "AvailablePeriods",
    "ClassPeriodStats",
    "DateRange",
    "PeriodStats",
    "TotalStats",
    "available_periods",
    "month_range",
    "monthly_stats",
    "period_stats",
    "summarize_period",
    "week_range",
    "year_range",
    "yearly_stats",
    # Targets
    "TargetProgress",
    "calculate_progress",
    "period_profit",
    "resolve_period_range",
    "target_progress",
    # Comparison
    "ComparisonResult",
    "RangeStats",
    "compare_ranges",
    "range_stats",
    # Trend
    "aggregate_by_period",
    "moving_average",
    "predict_trend",
]
