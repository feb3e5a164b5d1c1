"""
Trend helpers for charting.

Prepares series for the presentation layer; no plotting happens here.
"""

from datetime import timedelta
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from analytics.records import SnapshotRecord
from config import config

CHART_PERIODS = ("day", "week", "month", "year")


def moving_average(
    values: Sequence[float | None],
    window: int | None = None,
) -> list[float | None]:
    """
    Trailing moving average.

    The first ``window - 1`` points are None. After that each point is the
    mean of the non-missing values in its window, or None if all are missing.
    """
    window = window or config.analytics.moving_average_window
    if not values:
        return []

    series = pd.Series([np.nan if v is None else float(v) for v in values], dtype=float)
    averaged = series.rolling(window=window, min_periods=1).mean()
    averaged.iloc[: window - 1] = np.nan

    return [None if pd.isna(v) else float(v) for v in averaged]


def _bucket_key(record: SnapshotRecord, period: str) -> str:
    day = record.date
    if period == "week":
        return (day - timedelta(days=day.weekday())).isoformat()
    if period == "month":
        return f"{day.year}-{day.month:02d}"
    return str(day.year)


def aggregate_by_period(
    records: Iterable[SnapshotRecord],
    period: str,
) -> list[SnapshotRecord]:
    """
    Reduce snapshots to the last one of each week/month/year.

    Weeks are keyed by their Monday. Buckets are kept per instrument class
    and returned in bucket order. ``day`` returns the records unchanged.

    Raises:
        ValueError: For an unknown period name.
    """
    if period not in CHART_PERIODS:
        raise ValueError(f"Unknown chart period: {period!r}")

    records = list(records)
    if period == "day":
        return records

    last_in_bucket: dict[tuple[str, str], SnapshotRecord] = {}
    for record in sorted(records, key=lambda r: r.date):
        key = (_bucket_key(record, period), record.instrument_class.value)
        last_in_bucket[key] = record

    return [last_in_bucket[key] for key in sorted(last_in_bucket)]


def predict_trend(
    values: Sequence[float | None],
    periods: int | None = None,
) -> list[float]:
    """
    Extend a least-squares line fitted over the non-missing values.

    x runs 1..n over the valid points; the next ``periods`` x values are
    projected. Fewer than two points give an empty list.
    """
    periods = periods if periods is not None else config.analytics.forecast_periods
    valid = [float(v) for v in values if v is not None and not pd.isna(v)]
    if len(valid) < 2:
        return []

    n = len(valid)
    x = np.arange(1, n + 1, dtype=float)
    slope, intercept = np.polyfit(x, np.asarray(valid), 1)

    return [float(slope * (n + i) + intercept) for i in range(1, periods + 1)]
