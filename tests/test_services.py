"""
Service layer tests against a throwaway SQLite database.
"""
from datetime import date
from decimal import Decimal

import pandas as pd
import pytest

from db import InstrumentClass, TargetPeriod
from services.record_service import (
    delete_adjustment,
    delete_record,
    list_adjustments,
    list_records,
    load_journal,
    parse_amount,
    save_adjustment,
    save_record,
)
from services.report_service import build_report, default_export_name, export_csv, export_excel
from services.target_service import delete_target, get_all_progress, list_targets, set_target

STOCK = InstrumentClass.STOCK
FUND = InstrumentClass.FUND


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1,234.50", Decimal("1234.50")),
        (" 12 ", Decimal(12)),
        (0, Decimal(0)),
        ("", None),
        ("abc", None),
        ("nan", None),
        (None, None),
        (True, None),
        ("0.004", Decimal("0.00")),
        ("0.005", Decimal("0.01")),
        ("-2.345", Decimal("-2.35")),
        ("1e40", None),
    ],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


# =============================================================================
# Snapshots
# =============================================================================

class TestRecords:
    def test_save_creates_then_replaces(self, temp_db):
        first = save_record("2025-03-03", "stock", "10000", total_market_value="8000")
        second = save_record("2025-03-03", "STOCK", "10500", notes="after close")

        assert first.success and first.created
        assert second.success and not second.created

        records = list_records()
        assert len(records) == 1
        assert records[0].total_asset == Decimal(10500)
        assert records[0].total_market_value is None
        assert records[0].notes == "after close"

    def test_same_date_different_class_coexist(self, temp_db):
        save_record("2025-03-03", STOCK, 10000)
        save_record("2025-03-03", FUND, 5000)

        assert len(list_records()) == 2
        assert [r.total_asset for r in list_records(FUND)] == [Decimal(5000)]

    def test_fund_market_value_is_dropped(self, temp_db):
        result = save_record("2025-03-03", FUND, 5000, total_market_value=4000, index_reference="3300.5")

        assert result.success
        assert result.snapshot.total_market_value is None
        assert result.snapshot.index_reference == Decimal("3300.5")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"total_asset": "-1"},
            {"total_asset": ""},
            {"total_asset": "lots"},
            {"total_asset": "100", "total_market_value": "-5"},
            {"total_asset": "100", "index_reference": "n/a"},
        ],
    )
    def test_invalid_input_is_rejected(self, temp_db, kwargs):
        result = save_record("2025-03-03", STOCK, **kwargs)

        assert not result.success
        assert result.snapshot is None
        assert result.errors
        assert list_records() == []

    def test_amounts_are_rounded_to_stored_precision(self, temp_db):
        result = save_record(
            "2025-03-03", STOCK, "10000.125", total_market_value="0.004", index_reference="3300.12345"
        )

        assert result.snapshot.total_asset == Decimal("10000.13")
        assert result.snapshot.total_market_value == Decimal("0.00")
        assert result.snapshot.index_reference == Decimal("3300.1235")
        assert list_records()[0] == result.snapshot

    def test_unknown_class_and_bad_date(self, temp_db):
        result = save_record("someday", "bond", 100)

        assert not result.success
        assert len(result.errors) == 2

    def test_delete_record(self, temp_db):
        save_record("2025-03-03", STOCK, 10000)

        assert delete_record("2025-03-03", STOCK)
        assert not delete_record("2025-03-03", STOCK)
        assert list_records() == []

    def test_list_records_by_range(self, temp_db):
        for day, asset in [("2025-03-03", 1), ("2025-03-04", 2), ("2025-03-05", 3)]:
            save_record(day, STOCK, asset)

        records = list_records(start_date="2025-03-04", end_date=date(2025, 3, 5))
        assert [r.date for r in records] == [date(2025, 3, 4), date(2025, 3, 5)]


# =============================================================================
# Adjustments
# =============================================================================

class TestAdjustments:
    def test_new_adjustment_replaces_old(self, temp_db):
        save_adjustment("2025-03-04", STOCK, "1000")
        result = save_adjustment("2025-03-04", STOCK, "-250", notes="withdrawal")

        assert result.success
        adjustments = list_adjustments()
        assert len(adjustments) == 1
        assert adjustments[0].amount == Decimal(-250)
        assert adjustments[0].notes == "withdrawal"

    @pytest.mark.parametrize("amount", [0, "0", "", None])
    def test_zero_or_blank_clears(self, temp_db, amount):
        save_adjustment("2025-03-04", STOCK, 1000)
        result = save_adjustment("2025-03-04", STOCK, amount)

        assert result.success and result.cleared
        assert result.adjustment is None
        assert list_adjustments() == []

    def test_sub_cent_amount_clears(self, temp_db):
        save_adjustment("2025-03-04", STOCK, 1000)
        result = save_adjustment("2025-03-04", STOCK, "0.004")

        assert result.success and result.cleared
        assert result.adjustment is None
        assert list_adjustments() == []

    def test_returned_adjustment_matches_stored_amount(self, temp_db):
        result = save_adjustment("2025-03-04", STOCK, "100.005")

        assert result.adjustment.amount == Decimal("100.01")
        assert list_adjustments()[0].amount == result.adjustment.amount

    def test_invalid_amount(self, temp_db):
        result = save_adjustment("2025-03-04", STOCK, "a lot")
        assert not result.success

    def test_delete_adjustment(self, temp_db):
        save_adjustment("2025-03-04", FUND, 500)

        assert delete_adjustment("2025-03-04", FUND)
        assert not delete_adjustment("2025-03-04", FUND)

    def test_journal_feeds_profit_engine(self, temp_db):
        save_record("2025-03-03", STOCK, 10000)
        save_record("2025-03-04", STOCK, 11500)
        save_adjustment("2025-03-04", STOCK, 1000)

        journal = load_journal()
        assert not journal.is_empty
        assert len(journal.records) == 2
        assert journal.adjustments[0].amount == Decimal(1000)


# =============================================================================
# Targets
# =============================================================================

class TestTargets:
    def test_set_and_replace_target(self, temp_db):
        first = set_target("stock", "week", "1000", period_start_date="2025-03-05")
        second = set_target(STOCK, TargetPeriod.WEEK, 2000)

        assert first.success and first.created
        assert first.target.period_start_date == date(2025, 3, 5)
        assert second.success and not second.created

        targets = list_targets()
        assert len(targets) == 1
        assert targets[0].target_amount == Decimal(2000)
        assert targets[0].period_start_date is None

    def test_start_date_only_kept_for_weeks(self, temp_db):
        result = set_target(FUND, "month", 500, period_start_date="2025-03-05")
        assert result.target.period_start_date is None

    @pytest.mark.parametrize(
        "args",
        [
            ("stock", "week", 0),
            ("stock", "week", "-10"),
            ("stock", "week", "abc"),
            ("stock", "week", "0.004"),
            ("stock", "quarter", 100),
            ("bond", "week", 100),
        ],
    )
    def test_invalid_targets(self, temp_db, args):
        result = set_target(*args)

        assert not result.success
        assert result.target is None
        assert list_targets() == []

    def test_invalid_start_date(self, temp_db):
        result = set_target("stock", "week", 100, period_start_date="next monday")
        assert not result.success

    def test_delete_target(self, temp_db):
        set_target(STOCK, "year", 10000)

        assert delete_target("stock", "YEAR")
        assert not delete_target("stock", "YEAR")

    def test_get_all_progress(self, temp_db):
        save_record("2025-03-07", STOCK, 10000)
        save_record("2025-03-10", STOCK, 10300)
        save_record("2025-03-11", STOCK, 11500)
        save_adjustment("2025-03-11", STOCK, 1000)
        set_target(STOCK, "week", 1000)
        set_target(FUND, "month", 200)

        progress = {p.instrument_class: p for p in get_all_progress(today=date(2025, 3, 12))}

        assert progress[STOCK].actual_profit == Decimal(500)
        assert progress[STOCK].percentage == 50.0
        assert progress[FUND].actual_profit == 0
        assert progress[FUND].remaining == Decimal(200)

    def test_get_all_progress_without_targets(self, temp_db):
        assert get_all_progress() == []


# =============================================================================
# Reports and export
# =============================================================================

@pytest.fixture
def populated_db(temp_db):
    save_record("2025-03-03", STOCK, 10000, total_market_value=9000, index_reference=3300)
    save_record("2025-03-03", FUND, 5000, total_market_value=4000)
    save_record("2025-03-04", STOCK, 11500, total_market_value=10000, notes="topped up")
    save_record("2025-03-04", FUND, 5050)
    save_adjustment("2025-03-04", STOCK, 1000)
    return temp_db


class TestReport:
    def test_build_report(self, populated_db):
        report = build_report()

        assert list(report.columns) == [
            "Date", "Type", "Total Asset", "Market Value", "Index", "Daily P/L", "Notes",
        ]
        assert list(report["Type"]) == ["Fund", "Stock", "Fund", "Stock"]
        assert list(report["Daily P/L"]) == [0.0, 0.0, 50.0, 500.0]
        assert report.loc[1, "Market Value"] == 9000.0
        assert pd.isna(report.loc[0, "Market Value"])
        assert report.loc[3, "Notes"] == "topped up"

    def test_filtered_report_keeps_baseline(self, populated_db):
        report = build_report(start_date="2025-03-04")

        assert list(report["Date"]) == ["2025-03-04", "2025-03-04"]
        assert list(report["Daily P/L"]) == [50.0, 500.0]

    @pytest.mark.parametrize("bounds", [{"start_date": "someday"}, {"end_date": "2025-02-30"}])
    def test_invalid_bounds_are_rejected(self, populated_db, bounds):
        with pytest.raises(ValueError, match="Invalid date"):
            build_report(**bounds)

    def test_blank_bounds_mean_unfiltered(self, populated_db):
        assert len(build_report(start_date="", end_date=None)) == 4

    def test_empty_store_cannot_export(self, temp_db):
        with pytest.raises(ValueError, match="No data to export"):
            build_report()

    def test_default_export_name(self):
        today = date(2025, 3, 12)
        assert default_export_name("csv", today=today) == "investment_records_all_all_20250312.csv"
        assert (
            default_export_name("xlsx", "2025-03-01", "2025-03-31", today=today)
            == "investment_records_2025-03-01_2025-03-31_20250312.xlsx"
        )

    def test_export_csv(self, populated_db, tmp_path):
        path = export_csv(tmp_path / "out" / "records.csv")

        assert path.read_bytes().startswith(b"\xef\xbb\xbf")
        exported = pd.read_csv(path, encoding="utf-8-sig")
        assert list(exported["Type"]) == ["Fund", "Stock", "Fund", "Stock"]
        assert list(exported["Daily P/L"]) == [0.0, 0.0, 50.0, 500.0]

    def test_export_excel(self, populated_db, tmp_path):
        path = export_excel(tmp_path / "records.xlsx")

        exported = pd.read_excel(path, sheet_name="Records")
        assert len(exported) == 4
        assert list(exported["Date"]) == ["2025-03-03", "2025-03-03", "2025-03-04", "2025-03-04"]
        assert exported["Total Asset"].sum() == pytest.approx(31550.0)
