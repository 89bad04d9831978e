"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest

from gs1_scanlog.__main__ import EXIT_DUPLICATE, EXIT_EMPTY, EXIT_OK, main


SCAN = "010761303438397917231231101B12345"


@pytest.fixture
def run(store_path, capsys):
    def _run(*args):
        code = main(["--store", str(store_path), *args])
        return code, capsys.readouterr()
    return _run


class TestScanCommand:

    def test_scan_logs_item(self, run, store_path):
        code, out = run("scan", SCAN, "--now", "2024-06-15")
        assert code == EXIT_OK
        assert "01 (GTIN): 07613034383979" in out.out
        assert "31/12/2023 (EXPIRED)" in out.out
        assert "Logged." in out.out
        assert len(json.loads(store_path.read_text(encoding="utf-8"))) == 1

    def test_duplicate_exit_code(self, run):
        run("scan", SCAN)
        code, out = run("scan", SCAN)
        assert code == EXIT_DUPLICATE
        assert "Duplicate" in out.out

    def test_empty_scan(self, run, store_path):
        code, _ = run("scan", "  ")
        assert code == EXIT_EMPTY
        assert not store_path.exists()

    def test_json_output(self, run):
        code, out = run("scan", SCAN, "--json", "--now", "2024-01-01")
        data = json.loads(out.out)
        assert code == EXIT_OK
        assert data["Batch/Lot Number"] == "1B12345"
        assert data["Provider"] == "Unidentified"
        assert data["_warnings"] == []

    def test_dry_run_does_not_log(self, run, store_path):
        code, out = run("scan", SCAN, "--dry-run")
        assert code == EXIT_OK
        assert not store_path.exists()
        assert "Logged." not in out.out

    def test_provider_override(self, run):
        code, out = run("scan", SCAN, "--provider", "SAI")
        assert "Provider: SAI (manual)" in out.out

    def test_bad_now_value(self, run):
        with pytest.raises(SystemExit):
            run("scan", SCAN, "--now", "yesterday")


class TestLogCommands:

    def test_list(self, run):
        run("scan", SCAN)
        code, out = run("list")
        assert code == EXIT_OK
        assert "(10)1B12345" in out.out

    def test_list_empty(self, run):
        code, out = run("list")
        assert code == EXIT_OK
        assert "No scans logged." in out.out

    def test_list_json(self, run):
        run("scan", SCAN)
        _, out = run("list", "--json")
        records = json.loads(out.out)
        assert records[0]["fields"]["01"] == "07613034383979"

    def test_remove(self, run):
        run("scan", SCAN)
        code, _ = run("remove", "0")
        assert code == EXIT_OK
        _, out = run("list")
        assert "No scans logged." in out.out

    def test_remove_bad_index(self, run):
        code, out = run("remove", "3")
        assert code == EXIT_EMPTY
        assert "Error" in out.err

    @pytest.mark.parametrize("fmt", ["csv", "xlsx", "pdf"])
    def test_export(self, run, tmp_path, fmt):
        run("scan", SCAN)
        code, out = run("export", fmt, "--columns", "01,10", "--output-dir", str(tmp_path / "exports"))
        assert code == EXIT_OK
        written = Path(out.out.strip())
        assert written.parent == tmp_path / "exports"
        assert written.exists()
        assert written.suffix == f".{fmt}"
