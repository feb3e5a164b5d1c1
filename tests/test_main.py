"""
CLI tests - commands run against a temporary database and report bad input.
"""
import sys

import pytest

import main
from services.record_service import save_record


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["main.py", *argv])
    return main.main()


@pytest.fixture
def journal_db(temp_db):
    save_record("2025-03-03", "stock", 10000)
    save_record("2025-03-04", "stock", 10250)
    return temp_db


class TestStats:
    def test_month_stats(self, monkeypatch, capsys, journal_db):
        assert not run_cli(monkeypatch, "stats", "--month", "2025-03")
        assert "MONTH 2025-03" in capsys.readouterr().out

    @pytest.mark.parametrize("month", ["2025-13", "2025-00", "March", "2025-03-01"])
    def test_invalid_month_is_reported(self, monkeypatch, capsys, journal_db, month):
        assert run_cli(monkeypatch, "stats", "--month", month) == 1
        assert "Invalid month" in capsys.readouterr().out


class TestDateFilters:
    def test_records_with_valid_range(self, monkeypatch, capsys, journal_db):
        assert not run_cli(monkeypatch, "records", "--since", "2025-03-04")
        output = capsys.readouterr().out
        assert "Records (1)" in output
        assert "+250.00" in output

    @pytest.mark.parametrize("flag", ["--since", "--until"])
    def test_records_rejects_bad_dates(self, monkeypatch, capsys, journal_db, flag):
        assert run_cli(monkeypatch, "records", flag, "last week") == 1
        assert "Invalid date" in capsys.readouterr().out

    def test_export_rejects_bad_dates(self, monkeypatch, capsys, journal_db, tmp_path):
        out = tmp_path / "records.csv"

        assert run_cli(monkeypatch, "export", "--since", "2025-13-45", "--out", str(out)) == 1
        assert "Invalid date" in capsys.readouterr().out
        assert not out.exists()
