from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for a batch analysis run."""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Render a metric without scientific notation; whole numbers lose the ``.0``."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(total_files: int, result: ProcessingResult) -> str:
    """Render the SUMMARY line from a ProcessingResult.

    Format::

        SUMMARY files={total}/{total} success={success} failed={failed}
        sheets={sheets} classified={classified} empty_sheets={empty}
        records={records} elapsed_sec={elapsed} throughput_rps={throughput}

    (one line, single spaces).

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_sheets=3, classified_sheets=2,
        ...     empty_sheets=1, total_records=1000, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=500.0,
        ... )
        >>> render_summary_line(1, result)
        'SUMMARY files=1/1 success=1 failed=0 sheets=3 classified=2 empty_sheets=1 records=1000 elapsed_sec=2 throughput_rps=500'
    """
    return (
        f"SUMMARY files={total_files}/{total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"sheets={result.total_sheets} "
        f"classified={result.classified_sheets} "
        f"empty_sheets={result.empty_sheets} "
        f"records={result.total_records} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
