from datetime import date

import pytest

from analytics.trend import aggregate_by_period, moving_average, predict_trend
from db import InstrumentClass

FUND = InstrumentClass.FUND


def test_moving_average_leading_points_are_empty():
    assert moving_average([1, 2, 3, 4, 5], window=3) == [None, None, 2.0, 3.0, 4.0]


def test_moving_average_skips_missing_values():
    assert moving_average([1, None, 3, None, None], window=2) == [None, 1.0, 3.0, 3.0, None]


def test_moving_average_empty():
    assert moving_average([], window=3) == []


def test_moving_average_window_longer_than_series():
    assert moving_average([1, 2], window=5) == [None, None]


def test_predict_trend_extends_line():
    assert predict_trend([1, 2, 3], periods=2) == pytest.approx([4.0, 5.0])


def test_predict_trend_ignores_missing_points():
    assert predict_trend([2, None, 4, 6], periods=1) == pytest.approx([8.0])


def test_predict_trend_needs_two_points():
    assert predict_trend([5], periods=3) == []
    assert predict_trend([None, 5], periods=3) == []


def test_aggregate_by_month_keeps_last_snapshot(snapshot):
    records = [
        snapshot("2025-01-10", 100),
        snapshot("2025-01-31", 130),
        snapshot("2025-01-20", 120),
        snapshot("2025-02-03", 140),
    ]
    result = aggregate_by_period(records, "month")

    assert [(r.date, r.total_asset) for r in result] == [
        (date(2025, 1, 31), 130),
        (date(2025, 2, 3), 140),
    ]


def test_aggregate_by_week_is_keyed_by_monday(snapshot):
    records = [
        snapshot("2025-03-09", 1),  # Sunday, previous week
        snapshot("2025-03-10", 2),
        snapshot("2025-03-14", 3),
        snapshot("2025-03-14", 30, instrument_class=FUND),
    ]
    result = aggregate_by_period(records, "week")

    assert [(r.date.isoformat(), r.instrument_class.value) for r in result] == [
        ("2025-03-09", "STOCK"),
        ("2025-03-14", "FUND"),
        ("2025-03-14", "STOCK"),
    ]


def test_aggregate_by_year_and_day(snapshot):
    records = [snapshot("2024-06-01", 1), snapshot("2024-12-31", 2), snapshot("2025-01-02", 3)]

    assert [r.total_asset for r in aggregate_by_period(records, "year")] == [2, 3]
    assert aggregate_by_period(records, "day") == records


def test_aggregate_by_unknown_period():
    with pytest.raises(ValueError):
        aggregate_by_period([], "quarter")
