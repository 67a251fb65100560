from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from ledger_analyzer.cli.__main__ import main as cli_main

"""Exit code contract: 0 all success, 2 partial failure or empty sheets, 1 fatal."""


def test_exit_code_fatal_startup(temp_workdir: Path, fresh_logging, monkeypatch, capsys):
    monkeypatch.delenv("LEDGER_ANALYZER_CONFIG", raising=False)
    code = cli_main([])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_all_success(write_config, fresh_logging, make_workbook, sales_grid, capsys):
    make_workbook("a.xlsx", {"제품매출 (41110)": sales_grid})
    make_workbook("b.xlsx", {"상품매출(40100)": sales_grid})
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=2/2 success=2 failed=0" in out


def test_exit_code_partial_failure(write_config, fresh_logging, make_workbook, sales_grid, temp_workdir: Path, capsys):
    make_workbook("success.xlsx", {"제품매출 (41110)": sales_grid})
    (temp_workdir / "data" / "failure.xlsx").write_bytes(b"")
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=2/2 success=1 failed=1" in out


def test_exit_code_empty_sheet(write_config, fresh_logging, make_workbook, sales_grid, capsys):
    make_workbook("ledger.xlsx", {"제품매출 (41110)": sales_grid, "메모": [["memo"]]})
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 2
    assert "WARN sheet=메모 no analyzable data" in out
    assert "failed=0" in out
    assert "empty_sheets=1" in out


def test_exit_code_fatal_directory_error(write_config, fresh_logging, capsys):
    from ledger_analyzer.services.orchestrator import ProcessingError

    with patch(
        "ledger_analyzer.cli.__main__.process_all",
        side_effect=ProcessingError("Error reading directory data: permission denied"),
    ):
        code = cli_main([])
    assert code == 1
    assert "ERROR processing:" in capsys.readouterr().out
