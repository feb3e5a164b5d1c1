"""
Investment Journal - Main Entry Point.

A local-first journal of daily stock and fund account values that derives
true investment profit/loss by separating deposits and withdrawals from
market-driven gains.

Usage:
    # Initialize database
    python main.py init

    # Record daily snapshots (saving the same date and type again replaces it)
    python main.py record 2025-03-03 --type stock --asset 10000 --market-value 8200 --index 3350.2
    python main.py record 2025-03-04 --type stock --asset 11500
    python main.py record 2025-03-04 --type fund --asset 52000

    # Capital adjustments (positive = added, negative = withdrawn, 0 clears)
    python main.py adjust 2025-03-04 --type stock --amount 1000 --notes "Monthly top-up"
    python main.py adjust 2025-03-10 --type fund --amount -500

    # Review
    python main.py records --since 2025-03-01
    python main.py stats --month 2025-03
    python main.py stats --year 2025
    python main.py compare 2025-01-01 2025-01-31 2025-02-01 2025-02-28

    # Targets
    python main.py target-set --type stock --period month --amount 5000
    python main.py targets

    # Export
    python main.py export --format excel --since 2025-01-01
"""

import argparse
import logging
import sys

from analytics.comparison import compare_ranges
from analytics.periods import (
    ClassPeriodStats,
    DateRange,
    PeriodStats,
    monthly_stats,
    yearly_stats,
)
from analytics.profit_loss import daily_profit_series
from analytics.records import parse_optional_date
from db import init_db
from services.record_service import (
    delete_record,
    load_journal,
    print_record_result,
    save_adjustment,
    save_record,
)
from services.report_service import export_csv, export_excel
from services.target_service import delete_target, get_all_progress, set_target


logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _print_class_stats(label: str, stats: ClassPeriodStats) -> None:
    print(f"\n{label}")
    print(f"   Profit/Loss:     {stats.profit_loss:>+14,.2f}")
    print(f"   Days:            {stats.days:>14}")
    print(f"   Win Rate:        {stats.win_rate:>13.2f}%")
    print(f"   Max Drawdown:    {stats.max_drawdown:>13.2f}%")
    print(f"   Start Asset:     {stats.start_asset:>14,.2f}")
    print(f"   End Asset:       {stats.end_asset:>14,.2f}")
    print(f"   Return Rate:     {stats.return_rate:>+13.2f}%")
    if stats.annualized_return is not None:
        print(f"   Annualized:      {stats.annualized_return:>+13.2%}")


def _print_period_stats(title: str, stats: PeriodStats) -> None:
    print("\n" + "=" * 50)
    print(f"📊 {title} ({stats.bounds})")
    print("=" * 50)
    _print_class_stats("📈 Stock", stats.stock)
    _print_class_stats("💼 Fund", stats.fund)
    print("\n💰 Total")
    print(f"   Profit/Loss:     {stats.total.profit_loss:>+14,.2f}")
    print(f"   Return Rate:     {stats.total.return_rate:>+13.2f}%")
    print("\n" + "=" * 50)


def cmd_init(args):
    """Initialize the database."""
    db = init_db(args.db_url, if_drop=args.if_drop)
    if args.if_drop:
        print("⚠️ Existing tables dropped.")
    print("✅ Database initialized successfully")
    print(f"   Location: {db.db_url}")


def cmd_record(args):
    """Create or replace a daily snapshot."""
    init_db()
    result = save_record(
        record_date=args.date,
        instrument_class=args.type,
        total_asset=args.asset,
        total_market_value=args.market_value,
        index_reference=args.index,
        notes=args.notes,
    )
    print_record_result(result)
    return 0 if result.success else 1


def cmd_delete_record(args):
    """Delete a daily snapshot."""
    init_db()
    if delete_record(args.date, args.type):
        print(f"🗑️ Deleted {args.type.upper()} snapshot for {args.date}")
    else:
        print(f"No {args.type.upper()} snapshot found for {args.date}")


def cmd_adjust(args):
    """Set (or clear) a capital adjustment."""
    init_db()
    result = save_adjustment(
        adjustment_date=args.date,
        instrument_class=args.type,
        amount=args.amount,
        notes=args.notes,
    )
    print_record_result(result)
    return 0 if result.success else 1


def cmd_records(args):
    """List snapshots with daily profit/loss."""
    try:
        start = parse_optional_date(args.since)
        end = parse_optional_date(args.until)
    except ValueError as e:
        print(f"⚠️ {e}")
        return 1

    init_db()
    journal = load_journal()

    daily = daily_profit_series(journal.records, journal.adjustments, start, end)
    if args.type:
        daily = daily[daily["instrument_class"] == args.type.upper()]

    if daily.empty:
        print("No records found.")
        return

    print(f"\n📒 Records ({len(daily)})")
    print("-" * 80)
    print(f"{'Date':<12} {'Type':<6} {'Total Asset':>14} {'Adjustment':>12} {'Daily P/L':>12} {'Cum. P/L':>12}")
    print("-" * 80)
    for _, row in daily.iterrows():
        adjustment = f"{row['adjustment']:+,.2f}" if row["adjustment"] else "-"
        print(
            f"{row['date'].isoformat():<12} {row['instrument_class']:<6} "
            f"{row['total_asset']:>14,.2f} {adjustment:>12} "
            f"{row['profit_loss']:>+12,.2f} {row['cumulative_profit_loss']:>+12,.2f}"
        )


def cmd_stats(args):
    """Show monthly or yearly statistics."""
    init_db()
    journal = load_journal()

    if args.year:
        stats = yearly_stats(journal.records, journal.adjustments, args.year)
        title = f"YEAR {args.year}"
    else:
        try:
            year, month = (int(part) for part in args.month.split("-"))
            stats = monthly_stats(journal.records, journal.adjustments, year, month)
        except ValueError:
            print(f"⚠️ Invalid month: {args.month} (expected YYYY-MM)")
            return 1
        title = f"MONTH {args.month}"

    if stats is None:
        print("No records in this period.")
        return
    _print_period_stats(title, stats)


def cmd_compare(args):
    """Compare two date ranges."""
    init_db()
    journal = load_journal()

    try:
        range_a = DateRange.parse(args.a_start, args.a_end)
        range_b = DateRange.parse(args.b_start, args.b_end)
    except ValueError as e:
        print(f"⚠️ {e}")
        return 1

    result = compare_ranges(journal.records, journal.adjustments, range_a, range_b)
    if result is None:
        print("⚠️ One of the ranges has no records to compare.")
        return

    diffs = result.differences()
    print("\n" + "=" * 64)
    print(f"🔍 COMPARISON  A: {range_a}   B: {range_b}")
    print("=" * 64)
    print(f"{'':<8} {'':<12} {'A':>12} {'B':>12} {'B - A':>12}")
    for section in ("stock", "fund", "total"):
        a, b = getattr(result.stats_a, section), getattr(result.stats_b, section)
        print(f"{section.title():<8} {'P/L':<12} {a.profit_loss:>+12,.2f} {b.profit_loss:>+12,.2f} "
              f"{diffs[section]['profit_loss']:>+12,.2f}")
        if section != "total":
            print(f"{'':<8} {'Win Rate %':<12} {a.win_rate:>12.2f} {b.win_rate:>12.2f} "
                  f"{diffs[section]['win_rate']:>+12.2f}")
        print(f"{'':<8} {'Return %':<12} {a.return_rate:>+12.2f} {b.return_rate:>+12.2f} "
              f"{diffs[section]['return_rate']:>+12.2f}")


def cmd_target_set(args):
    """Create or replace a profit target."""
    init_db()
    result = set_target(
        instrument_class=args.type,
        period=args.period,
        target_amount=args.amount,
        period_start_date=args.start_date,
    )
    print(result.status_message)
    return 0 if result.success else 1


def cmd_target_delete(args):
    """Delete a profit target."""
    init_db()
    if delete_target(args.type, args.period):
        print(f"🗑️ Deleted {args.type.upper()} {args.period} target")
    else:
        print("No such target.")


def cmd_targets(args):
    """Show progress of all targets."""
    init_db()
    progress_list = get_all_progress()
    if not progress_list:
        print("No targets set yet.")
        return

    print("\n🎯 Target Progress")
    print("-" * 78)
    for progress in progress_list:
        status = "🏆 Achieved" if progress.is_achieved else f"{progress.remaining:,.2f} to go"
        print(
            f"{progress.instrument_class.value:<6} {progress.period.value:<6} "
            f"{progress.start_date} ~ {progress.end_date}  "
            f"{progress.actual_profit:>+12,.2f} / {progress.target_amount:>12,.2f} "
            f"({progress.percentage:>6.2f}%)  {status}"
        )


def cmd_export(args):
    """Export records to CSV or Excel."""
    init_db()
    exporter = export_excel if args.format == "excel" else export_csv
    try:
        path = exporter(args.out, start_date=args.since, end_date=args.until)
    except ValueError as e:
        print(f"⚠️ {e}")
        return 1
    print(f"✅ Exported to {path}")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Investment Journal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    init = subparsers.add_parser("init", help="Initialize database")
    init.add_argument("--db-url", help="Custom database URL", default=None)
    init.add_argument("--if-drop", action="store_true", help="Drop existing tables before creating")

    # record command
    record = subparsers.add_parser("record", help="Save a daily snapshot")
    record.add_argument("date", help="Snapshot date (YYYY-MM-DD)")
    record.add_argument("--type", choices=["stock", "fund"], required=True, help="Instrument class")
    record.add_argument("--asset", required=True, help="Total asset value")
    record.add_argument("--market-value", help="Total market value (stock only)")
    record.add_argument("--index", help="Benchmark index value")
    record.add_argument("--notes", help="Notes")

    # delete-record command
    delete = subparsers.add_parser("delete-record", help="Delete a daily snapshot")
    delete.add_argument("date", help="Snapshot date (YYYY-MM-DD)")
    delete.add_argument("--type", choices=["stock", "fund"], required=True)

    # adjust command
    adjust = subparsers.add_parser("adjust", help="Set a capital adjustment (0 clears)")
    adjust.add_argument("date", help="Adjustment date (YYYY-MM-DD)")
    adjust.add_argument("--type", choices=["stock", "fund"], required=True)
    adjust.add_argument("--amount", required=True, help="Signed amount (+ added, - withdrawn)")
    adjust.add_argument("--notes", help="Notes")

    # records command
    records = subparsers.add_parser("records", help="List snapshots with daily P/L")
    records.add_argument("--type", choices=["stock", "fund"], help="Filter by instrument class")
    records.add_argument("--since", help="Start date (YYYY-MM-DD)")
    records.add_argument("--until", help="End date (YYYY-MM-DD)")

    # stats command
    stats = subparsers.add_parser("stats", help="Monthly or yearly statistics")
    period = stats.add_mutually_exclusive_group(required=True)
    period.add_argument("--month", help="Month (YYYY-MM)")
    period.add_argument("--year", type=int, help="Year (YYYY)")

    # compare command
    compare = subparsers.add_parser("compare", help="Compare two date ranges")
    compare.add_argument("a_start", help="Range A start (YYYY-MM-DD)")
    compare.add_argument("a_end", help="Range A end (YYYY-MM-DD)")
    compare.add_argument("b_start", help="Range B start (YYYY-MM-DD)")
    compare.add_argument("b_end", help="Range B end (YYYY-MM-DD)")

    # target-set command
    target_set = subparsers.add_parser("target-set", help="Set a profit target")
    target_set.add_argument("--type", choices=["stock", "fund"], required=True)
    target_set.add_argument("--period", choices=["week", "month", "year"], required=True)
    target_set.add_argument("--amount", required=True, help="Target profit amount")
    target_set.add_argument("--start-date", help="Custom week start (stored only)")

    # target-delete command
    target_delete = subparsers.add_parser("target-delete", help="Delete a profit target")
    target_delete.add_argument("--type", choices=["stock", "fund"], required=True)
    target_delete.add_argument("--period", choices=["week", "month", "year"], required=True)

    # targets command
    subparsers.add_parser("targets", help="Show target progress")

    # export command
    export = subparsers.add_parser("export", help="Export records to CSV or Excel")
    export.add_argument("--format", choices=["csv", "excel"], default="csv")
    export.add_argument("--since", help="Start date (YYYY-MM-DD)")
    export.add_argument("--until", help="End date (YYYY-MM-DD)")
    export.add_argument("--out", help="Output file (default: exports/<generated name>)")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "record": cmd_record,
        "delete-record": cmd_delete_record,
        "adjust": cmd_adjust,
        "records": cmd_records,
        "stats": cmd_stats,
        "compare": cmd_compare,
        "target-set": cmd_target_set,
        "target-delete": cmd_target_delete,
        "targets": cmd_targets,
        "export": cmd_export,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main() or 0)
