"""
Report Service - Builds and exports the daily records report.

Each row is one snapshot with its daily profit/loss. Profit for the first
row of a filtered range is still measured against the true previous
snapshot, even when that snapshot lies outside the range.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.utils import get_column_letter

from analytics.profit_loss import daily_profit_series
from analytics.records import parse_optional_date
from config import config
from db import InstrumentClass
from services.record_service import Journal, load_journal

logger = logging.getLogger(__name__)

# Display header -> source column, with Excel column widths
REPORT_COLUMNS = {
    "Date": ("date", 12),
    "Type": ("instrument_class", 8),
    "Total Asset": ("total_asset", 15),
    "Market Value": ("total_market_value", 15),
    "Index": ("index_reference", 12),
    "Daily P/L": ("profit_loss", 15),
    "Notes": ("notes", 30),
}

CLASS_LABELS = {
    InstrumentClass.STOCK.value: "Stock",
    InstrumentClass.FUND.value: "Fund",
}


def build_report(
    start_date: Any = None,
    end_date: Any = None,
    journal: Journal | None = None,
) -> pd.DataFrame:
    """
    Build the records report.

    Args:
        start_date: Optional inclusive start (date or YYYY-MM-DD)
        end_date: Optional inclusive end (date or YYYY-MM-DD)
        journal: Pre-fetched data; loaded from the store when omitted

    Returns:
        DataFrame with the REPORT_COLUMNS headers

    Raises:
        ValueError: If a bound is not a valid date, or there are no
            snapshots at all
    """
    start = parse_optional_date(start_date)
    end = parse_optional_date(end_date)

    journal = journal or load_journal()
    if journal.is_empty:
        raise ValueError("No data to export")

    daily = daily_profit_series(journal.records, journal.adjustments, start=start, end=end)

    report = pd.DataFrame({
        header: daily[source] for header, (source, _) in REPORT_COLUMNS.items()
    })
    if report.empty:
        return report

    report["Date"] = report["Date"].map(lambda d: d.isoformat())
    # Market value is only tracked for stock accounts
    is_fund = (daily["instrument_class"] == InstrumentClass.FUND.value).to_numpy()
    report["Market Value"] = report["Market Value"].astype(object)
    report.loc[is_fund, "Market Value"] = None
    report["Type"] = report["Type"].map(CLASS_LABELS)
    return report


def default_export_name(
    extension: str,
    start_date: Any = None,
    end_date: Any = None,
    today: date | None = None,
) -> str:
    """<prefix>_<start|all>_<end|all>_<YYYYMMDD>.<extension>"""
    today = today or date.today()
    start = parse_optional_date(start_date)
    end = parse_optional_date(end_date)
    return (
        f"{config.export.filename_prefix}_"
        f"{start.isoformat() if start else 'all'}_"
        f"{end.isoformat() if end else 'all'}_"
        f"{today:%Y%m%d}.{extension}"
    )


def _resolve_path(path: Path | str | None, extension: str, start_date, end_date) -> Path:
    if path is None:
        path = config.export.output_dir / default_export_name(extension, start_date, end_date)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def export_csv(
    path: Path | str | None = None,
    start_date: Any = None,
    end_date: Any = None,
    journal: Journal | None = None,
) -> Path:
    """
    Export the report as CSV (UTF-8 with BOM so spreadsheet apps detect the encoding).

    Returns:
        Path of the written file
    """
    report = build_report(start_date, end_date, journal)
    path = _resolve_path(path, "csv", start_date, end_date)

    report.to_csv(path, index=False, encoding=config.export.csv_encoding)
    logger.info(f"Exported {len(report)} rows to {path}")
    return path


def export_excel(
    path: Path | str | None = None,
    start_date: Any = None,
    end_date: Any = None,
    journal: Journal | None = None,
) -> Path:
    """
    Export the report as an Excel workbook with one sheet.

    Returns:
        Path of the written file
    """
    report = build_report(start_date, end_date, journal)
    path = _resolve_path(path, "xlsx", start_date, end_date)
    sheet_name = config.export.sheet_name

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        report.to_excel(writer, index=False, sheet_name=sheet_name)
        worksheet = writer.sheets[sheet_name]
        for position, (_, width) in enumerate(REPORT_COLUMNS.values(), start=1):
            worksheet.column_dimensions[get_column_letter(position)].width = width

    logger.info(f"Exported {len(report)} rows to {path}")
    return path
