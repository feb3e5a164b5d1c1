from pathlib import Path

from config import Config, DatabaseConfig


def test_defaults(monkeypatch):
    monkeypatch.delenv("JOURNAL_DB_PATH", raising=False)
    monkeypatch.delenv("JOURNAL_EXPORT_DIR", raising=False)
    cfg = Config.from_env()

    assert cfg.database.path == Path("db/journal.db")
    assert cfg.analytics.days_per_year == 365
    assert cfg.export.sheet_name == "Records"


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("JOURNAL_DB_PATH", str(tmp_path / "other.db"))
    monkeypatch.setenv("JOURNAL_EXPORT_DIR", str(tmp_path / "reports"))
    cfg = Config.from_env()

    assert cfg.database.path == tmp_path / "other.db"
    assert cfg.export.output_dir == tmp_path / "reports"


def test_database_url(monkeypatch):
    monkeypatch.delenv("JOURNAL_DB_URL", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert DatabaseConfig(path=Path("x.db")).url == "sqlite:///x.db"

    monkeypatch.setenv("DATABASE_URL", "sqlite:///fallback.db")
    assert DatabaseConfig().url == "sqlite:///fallback.db"

    monkeypatch.setenv("JOURNAL_DB_URL", "sqlite:///journal.db")
    assert DatabaseConfig().url == "sqlite:///journal.db"
