from __future__ import annotations

import re

from ledger_analyzer.cli.__main__ import main as cli_main

"""SUMMARY line format contract."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+files=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"sheets=([0-9]+)\s+classified=([0-9]+)\s+empty_sheets=([0-9]+)\s+"
    r"records=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)\s+"
    r"throughput_rps=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY files=1/1 success=1 failed=0 sheets=8 classified=7 empty_sheets=0 "
        "records=4000 elapsed_sec=0.84 throughput_rps=4761.9"
    )
    assert SUMMARY_PATTERN.match(line), "SUMMARY line should match contract regex"


def test_cli_summary_line_matches_contract(write_config, fresh_logging, make_workbook, sales_grid, capsys):
    make_workbook("ledger.xlsx", {"제품매출 (41110)": sales_grid, "잡손실": [["memo"]]})
    cli_main([])
    lines = [ln for ln in capsys.readouterr().out.splitlines() if ln.startswith("SUMMARY")]
    assert len(lines) == 1
    m = SUMMARY_PATTERN.match(lines[0])
    assert m, lines[0]
    assert m.group(5) == "2"  # sheets
    assert m.group(6) == "1"  # classified
    assert m.group(7) == "1"  # empty_sheets
    assert m.group(8) == "1"  # records
