from decimal import Decimal

import pytest

from analytics.comparison import compare_ranges, range_stats
from analytics.periods import DateRange
from db import InstrumentClass

STOCK = InstrumentClass.STOCK
FUND = InstrumentClass.FUND

JANUARY = DateRange.parse("2025-01-01", "2025-01-31")
FEBRUARY = DateRange.parse("2025-02-01", "2025-02-28")
MARCH = DateRange.parse("2025-03-01", "2025-03-31")


@pytest.fixture
def two_months(snapshot):
    return [
        snapshot("2025-01-02", 9000),
        snapshot("2025-01-31", 10000),
        snapshot("2025-02-03", 10500),
        snapshot("2025-02-28", 10400),
    ]


def test_first_range_starts_from_its_first_snapshot(two_months):
    stats = range_stats(two_months, [], JANUARY)

    assert stats.stock.profit_loss == Decimal(1000)
    assert stats.stock.start_asset == Decimal(9000)
    assert stats.stock.end_asset == Decimal(10000)
    assert stats.stock.return_rate == pytest.approx(11.111, abs=1e-3)


def test_later_range_is_anchored_on_prior_snapshot(two_months):
    stats = range_stats(two_months, [], FEBRUARY)

    # 2025-02-03 is measured against 2025-01-31
    assert stats.stock.daily_profit_loss == [Decimal(500), Decimal(-100)]
    assert stats.stock.profit_loss == Decimal(400)
    assert stats.stock.start_asset == Decimal(10000)
    assert stats.stock.return_rate == pytest.approx(4.0)
    assert stats.fund.days == 0
    assert stats.total.profit_loss == Decimal(400)


def test_compare_ranges_differences(two_months):
    result = compare_ranges(two_months, [], JANUARY, FEBRUARY)
    diff = result.differences()

    assert diff["stock"]["profit_loss"] == Decimal(-600)
    assert diff["stock"]["win_rate"] == pytest.approx(0.0)
    assert diff["stock"]["return_rate"] == pytest.approx(4.0 - 100 / 9)
    assert diff["fund"]["profit_loss"] == 0
    assert "win_rate" not in diff["total"]
    assert diff["total"]["profit_loss"] == Decimal(-600)


def test_compare_ranges_without_data_in_one_range(two_months):
    assert range_stats(two_months, [], MARCH) is None
    assert compare_ranges(two_months, [], JANUARY, MARCH) is None
    assert compare_ranges([], [], JANUARY, FEBRUARY) is None


def test_comparison_ignores_capital_flows(snapshot, adjustment):
    records = [snapshot("2025-01-31", 10000), snapshot("2025-02-10", 13000)]
    adjustments = [adjustment("2025-02-10", 2500)]

    stats = range_stats(records, adjustments, FEBRUARY)

    assert stats.stock.profit_loss == Decimal(500)


def test_classes_are_compared_independently(two_months, snapshot):
    records = two_months + [
        snapshot("2025-01-31", 5000, instrument_class=FUND),
        snapshot("2025-02-14", 5200, instrument_class=FUND),
    ]
    result = compare_ranges(records, [], JANUARY, FEBRUARY)

    assert result.stats_a.fund.profit_loss == 0
    assert result.stats_b.fund.profit_loss == Decimal(200)
    assert result.stats_b.by_class(FUND).return_rate == pytest.approx(4.0)
    assert result.stats_b.total.profit_loss == Decimal(600)
