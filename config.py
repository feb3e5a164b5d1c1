"""
Investment journal settings.

Defaults live in frozen dataclass sections; a few environment variables
override them (see Config.from_env).
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class DatabaseConfig:
    """Where the journal is stored."""
    path: Path = field(default_factory=lambda: Path("db/journal.db"))
    echo: bool = False  # Set True for SQL debugging

    @property
    def url(self) -> str:
        """SQLAlchemy URL; JOURNAL_DB_URL, then DATABASE_URL, win over the file path."""
        env_url = os.environ.get("JOURNAL_DB_URL") or os.environ.get("DATABASE_URL")
        if env_url:
            return env_url

        return f"sqlite:///{self.path}"


@dataclass(frozen=True)
class AnalyticsConfig:
    """Profit/loss analytics configuration."""
    # Calendar days used to annualize yearly returns
    days_per_year: int = 365

    # Rounding applied to target completion percentages
    percentage_places: int = 2

    # Chart helpers
    moving_average_window: int = 5
    forecast_periods: int = 5


@dataclass(frozen=True)
class ExportConfig:
    """Report export configuration."""
    output_dir: Path = field(default_factory=lambda: Path("exports"))
    filename_prefix: str = "investment_records"
    sheet_name: str = "Records"

    # Written at the start of CSV exports so spreadsheet apps detect UTF-8
    csv_encoding: str = "utf-8-sig"


@dataclass
class Config:
    """
    All settings sections.

    Usage:
        from config import config
        sheet = config.export.sheet_name
    """
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Build settings, applying environment overrides:
        - JOURNAL_DB_PATH: Custom database path
        - JOURNAL_EXPORT_DIR: Directory for CSV/Excel exports
        """
        db_path_env = os.getenv("JOURNAL_DB_PATH")
        db_config = DatabaseConfig(
            path=Path(db_path_env) if db_path_env else DatabaseConfig().path
        )

        export_dir_env = os.getenv("JOURNAL_EXPORT_DIR")
        export_config = ExportConfig(
            output_dir=Path(export_dir_env) if export_dir_env else ExportConfig().output_dir
        )

        return cls(database=db_config, export=export_config)


# Loaded once at import
config = Config.from_env()
