"""
Seed Fake Data Script for the Investment Journal.

Creates a database with a few months of stock and fund snapshots, some
capital adjustments and targets for testing and development purposes.

Usage:
    python scripts/seed_fake_data.py --if-drop
    python scripts/seed_fake_data.py --db-url sqlite:///./test.db --if-drop --days 120
"""

import argparse
import logging
import os
import random
import sys
from datetime import date, timedelta

# Add project root to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db import init_db
from services.record_service import save_adjustment, save_record
from services.target_service import set_target

logging.basicConfig(level=logging.WARNING, format="%(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# (class, starting asset, daily volatility)
ACCOUNTS = [
    ("STOCK", 100000.0, 0.015),
    ("FUND", 50000.0, 0.006),
]


def _trading_days(start: date, days: int):
    day = start
    while days > 0:
        if day.weekday() < 5:
            yield day
            days -= 1
        day += timedelta(days=1)


def seed_fake_data(db_url=None, if_drop=False, days=90, seed=42):
    """Seed the database with fake snapshots, adjustments and targets."""
    print("🌱 Seeding fake data...")
    rng = random.Random(seed)

    db = init_db(db_url, if_drop)
    print(f"✅ Database initialized at {db.db_url}")

    start = date.today() - timedelta(days=int(days * 1.5))
    print(f"\n📈 Seeding {days} trading days of snapshots from {start}...")

    snapshot_count = 0
    adjustment_count = 0
    for instrument_class, asset, volatility in ACCOUNTS:
        for index, day in enumerate(_trading_days(start, days)):
            flow = 0.0
            # Roughly one top-up or withdrawal every four weeks
            if index and rng.random() < 0.05:
                flow = rng.choice([1, 1, -1]) * round(asset * rng.uniform(0.02, 0.08), -2)
                result = save_adjustment(day, instrument_class, flow, notes="seeded")
                if result.success and result.adjustment:
                    adjustment_count += 1

            asset = max(asset * (1 + rng.gauss(0.0004, volatility)) + flow, 0.0)
            market_value = round(asset * rng.uniform(0.6, 0.95), 2) if instrument_class == "STOCK" else None
            result = save_record(
                day,
                instrument_class,
                round(asset, 2),
                total_market_value=market_value,
                index_reference=round(3000 * (1 + rng.gauss(0, 0.01)), 2),
            )
            if result.success:
                snapshot_count += 1
            else:
                logger.warning(f"Skipped {instrument_class} {day}: {', '.join(result.errors)}")

    print(f"✅ {snapshot_count} snapshots, {adjustment_count} adjustments seeded")

    print("\n🎯 Seeding targets...")
    for instrument_class, period, amount in [
        ("STOCK", "WEEK", 1000),
        ("STOCK", "MONTH", 5000),
        ("FUND", "YEAR", 20000),
    ]:
        print(f"   {set_target(instrument_class, period, amount).status_message}")

    print("\n🎉 Fake data seeding complete!")
    print("Run 'python main.py targets' or 'python main.py records' to explore.")


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Seed fake data for the Investment Journal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--db-url",
        help="Custom database URL (default: from config)",
        default=None,
    )
    parser.add_argument(
        "--if-drop",
        action="store_true",
        help="Drop existing tables before creating",
    )
    parser.add_argument("--days", type=int, default=90, help="Trading days to generate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")

    args = parser.parse_args()

    try:
        seed_fake_data(db_url=args.db_url, if_drop=args.if_drop, days=args.days, seed=args.seed)
        return 0
    except Exception as e:
        print(f"❌ Error seeding data: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
