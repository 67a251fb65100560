from __future__ import annotations

from datetime import UTC, datetime

from ledger_analyzer.models.processing_result import ProcessingResult
from ledger_analyzer.services.summary import format_number, render_summary_line


def _result(**overrides) -> ProcessingResult:
    values = dict(
        success_files=2,
        failed_files=1,
        total_sheets=10,
        classified_sheets=7,
        empty_sheets=1,
        total_records=1500,
        start_time=datetime(2024, 1, 1, tzinfo=UTC),
        end_time=datetime(2024, 1, 1, 0, 0, 3, tzinfo=UTC),
        elapsed_seconds=3.0,
        throughput_rows_per_sec=500.0,
    )
    values.update(overrides)
    return ProcessingResult(**values)


def test_render_summary_line():
    assert render_summary_line(3, _result()) == (
        "SUMMARY files=3/3 success=2 failed=1 sheets=10 classified=7 empty_sheets=1 "
        "records=1500 elapsed_sec=3 throughput_rps=500"
    )


def test_render_fractional_metrics():
    line = render_summary_line(1, _result(elapsed_seconds=1.25, throughput_rows_per_sec=1200.5))
    assert "elapsed_sec=1.25 " in line
    assert line.endswith("throughput_rps=1200.5")


def test_format_number():
    assert format_number(0) == "0"
    assert format_number(2.0) == "2"
    assert format_number(0.000123) == "0.000123"
    assert "e" not in format_number(0.0000004)
