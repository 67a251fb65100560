from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import WorkbookReadError, read_workbook
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import AnalyzerConfig
from ..models.ledger import AccountCategory, CellGrid, ColumnRoleSet, SheetExtraction, Side
from ..models.processing_result import FileStat, ProcessingResult, SheetAnalysis, WorkbookAnalysis
from .aggregator import (
    aggregate,
    aggregate_by_category,
    estimate_profit_loss,
    sales_vs_sga_monthly,
    vendor_key,
)
from .classifier import AccountClassifier
from .counterparty import find_counterparty_overlap
from .header_locator import locate_header
from .progress import ProgressTracker, SheetProgressIndicator
from .role_resolver import resolve_roles
from .row_extractor import extract_records

logger = logging.getLogger(__name__)

"""Analysis orchestration.

- ``analyze_sheet``: header -> records (masked) -> roles -> monthly and vendor
  buckets
- ``analyze_workbook``: every sheet of one workbook plus cross-sheet summaries
  (category totals, sales vs SG&A, P&L estimate, counterparty overlaps)
- ``process_all``: every ``.xlsx`` in the configured directory, with per-file
  and per-sheet failures recorded in the JSON Lines error log instead of
  aborting the batch
"""

__all__ = [
    "FILE_LEVEL",
    "ProcessingError",
    "analyze_sheet",
    "analyze_workbook",
    "process_all",
    "scan_excel_files",
    "summarize_sheets",
]

FILE_LEVEL = "<FILE_LEVEL>"
NO_ANALYZABLE_DATA = "NO_ANALYZABLE_DATA"
READ_ERROR = "READ_ERROR"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ProcessingError(Exception):
    """Fatal batch error (source directory missing or unreadable)."""


def scan_excel_files(directory: Path) -> list[Path]:
    """Scan directory for .xlsx files (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def analyze_sheet(
    sheet_name: str,
    grid: CellGrid,
    config: AnalyzerConfig,
    classifier: AccountClassifier,
) -> SheetAnalysis:
    """Analyze one sheet. A sheet without a recognizable header yields an empty result."""
    category = classifier.classify(sheet_name)
    header_index = locate_header(
        grid,
        config.keywords,
        scan_rows=config.header_scan_rows,
        lookahead_rows=config.lookahead_rows,
    )
    if header_index is None:
        logger.warning("sheet=%s no analyzable data (header row not found)", sheet_name)
        return SheetAnalysis(
            sheet_name=sheet_name,
            category=category,
            extraction=SheetExtraction(),
            roles=ColumnRoleSet(),
        )

    extraction = extract_records(
        grid,
        header_index,
        config.keywords,
        sheet_name=sheet_name,
        mask_keywords=config.keywords.deposit_loan_accounts if config.mask_account_numbers else None,
    )
    if extraction.masked_cells:
        logger.debug("sheet=%s masked_cells=%d", sheet_name, extraction.masked_cells)
    roles = resolve_roles(
        extraction.columns,
        extraction.records,
        config.keywords,
        sample_rows=config.role_sample_rows,
    )
    if extraction.is_empty:
        logger.warning("sheet=%s no analyzable data (no rows under header row %d)", sheet_name, header_index)

    logger.debug("sheet=%s category=%s roles=%s", sheet_name, category.value, roles.as_dict())
    return SheetAnalysis(
        sheet_name=sheet_name,
        category=category,
        extraction=extraction,
        roles=roles,
        monthly=aggregate(extraction.records, roles),
        vendors=aggregate(extraction.records, roles, vendor_key(roles)),
    )


def _record_error(
    error_log: ErrorLogBuffer | None,
    file_name: str,
    sheet: str,
    error_type: str,
    message: str,
    row: int = -1,
) -> None:
    if error_log is None:
        return
    error_log.append(
        ErrorRecord.create(file=file_name, sheet=sheet, row=row, error_type=error_type, message=message)
    )


def summarize_sheets(sheets: list[SheetAnalysis], classifier: AccountClassifier) -> WorkbookAnalysis:
    """Cross-sheet summaries over already analyzed sheets."""
    analyzed = [s for s in sheets if s.has_data]
    sales = [s for s in analyzed if s.category is AccountCategory.SALES]
    purchases = [
        s for s in analyzed
        if s.category is not AccountCategory.SALES and classifier.is_purchase(s.sheet_name)
    ]
    receivables = [s for s in analyzed if s.category is AccountCategory.RECEIVABLE]
    payables = [s for s in analyzed if s.category is AccountCategory.PAYABLE]

    return WorkbookAnalysis(
        sheets=sheets,
        category_monthly=aggregate_by_category(analyzed),
        sales_vs_sga=sales_vs_sga_monthly(analyzed, classifier),
        profit_loss=estimate_profit_loss(analyzed),
        duplicate_vendors=find_counterparty_overlap(sales, purchases, Side.CREDIT, Side.DEBIT),
        offset_vendors=find_counterparty_overlap(receivables, payables, Side.DEBIT, Side.CREDIT),
    )


def analyze_workbook(
    workbook: Mapping[str, CellGrid],
    config: AnalyzerConfig,
    *,
    file_name: str = "<workbook>",
    error_log: ErrorLogBuffer | None = None,
) -> WorkbookAnalysis:
    """Analyze every sheet of a workbook (sheet order preserved).

    A sheet that raises is recorded as ``UNEXPECTED_ERROR`` and the remaining
    sheets continue; sheets without data are recorded as ``NO_ANALYZABLE_DATA``.
    """
    classifier = AccountClassifier(config.classifier)
    sheet_progress = SheetProgressIndicator(file_name=file_name, total_sheets=len(workbook))
    sheets: list[SheetAnalysis] = []

    for sheet_name, grid in workbook.items():
        sheet_progress.start_sheet(sheet_name)
        try:
            sheet = analyze_sheet(sheet_name, grid, config, classifier)
        except Exception as e:
            logger.error("file=%s sheet=%s unexpected error: %s", file_name, sheet_name, e)
            _record_error(error_log, file_name, sheet_name, UNEXPECTED_ERROR, str(e))
            sheet = SheetAnalysis(
                sheet_name=sheet_name,
                category=classifier.classify(sheet_name),
                extraction=SheetExtraction(),
                roles=ColumnRoleSet(),
                error=str(e),
            )
        else:
            if not sheet.has_data:
                row = sheet.extraction.header_row_index
                _record_error(
                    error_log,
                    file_name,
                    sheet_name,
                    NO_ANALYZABLE_DATA,
                    "no analyzable data",
                    row=row if row is not None else -1,
                )
        sheet_progress.finish_sheet(
            success=sheet.has_data,
            records=len(sheet.extraction.records),
            category=sheet.category.value,
        )
        sheets.append(sheet)

    return summarize_sheets(sheets, classifier)


def _failed_stat(file_path: Path, started: datetime) -> FileStat:
    return FileStat(
        file_name=file_path.name,
        status="failed",
        sheets=0,
        classified_sheets=0,
        empty_sheets=0,
        records=0,
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
    )


def _analyze_file(
    file_path: Path,
    config: AnalyzerConfig,
    error_log: ErrorLogBuffer,
) -> tuple[FileStat, WorkbookAnalysis | None]:
    started = datetime.now(UTC)
    try:
        workbook = read_workbook(file_path, keep_na_strings=config.keep_na_strings or None)
    except WorkbookReadError as e:
        logger.error("file=%s read failed: %s", file_path.name, e)
        _record_error(error_log, file_path.name, FILE_LEVEL, READ_ERROR, str(e))
        return _failed_stat(file_path, started), None

    try:
        analysis = analyze_workbook(workbook, config, file_name=file_path.name, error_log=error_log)
    except Exception as e:
        logger.error("file=%s analysis failed: %s", file_path.name, e)
        _record_error(error_log, file_path.name, FILE_LEVEL, UNEXPECTED_ERROR, str(e))
        return _failed_stat(file_path, started), None

    classified = sum(
        1 for s in analysis.sheets if s.category is not AccountCategory.UNCLASSIFIED
    )
    stat = FileStat(
        file_name=file_path.name,
        status="success",
        sheets=len(analysis.sheets),
        classified_sheets=classified,
        empty_sheets=len(analysis.empty_sheets),
        records=analysis.total_records,
        elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
    )
    logger.info(
        "file=%s sheets=%d classified=%d empty_sheets=%d records=%d",
        stat.file_name,
        stat.sheets,
        stat.classified_sheets,
        stat.empty_sheets,
        stat.records,
    )
    return stat, analysis


def process_all(config: AnalyzerConfig, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Analyze every Excel file in ``config.source_directory``.

    Raises:
        ProcessingError: directory missing or unreadable (fatal)
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    file_paths = scan_excel_files(Path(config.source_directory))

    file_stats: list[FileStat] = []
    analyses: dict[str, WorkbookAnalysis] = {}
    success_count = 0
    failed_count = 0

    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            stat, analysis = _analyze_file(file_path, config, error_log)
            file_stats.append(stat)
            if analysis is not None:
                analyses[file_path.name] = analysis
                success_count += 1
            else:
                failed_count += 1
            progress.set_postfix(
                success=success_count,
                failed=failed_count,
                records=sum(s.records for s in file_stats),
            )
            progress.finish_file(success=analysis is not None)

    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning("error log flush failed: %s", e)
    else:
        if path is not None:
            logger.info("error log written: %s", path)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    total_records = sum(s.records for s in file_stats)
    throughput_rps = total_records / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_sheets=sum(s.sheets for s in file_stats),
        classified_sheets=sum(s.classified_sheets for s in file_stats),
        empty_sheets=sum(s.empty_sheets for s in file_stats),
        total_records=total_records,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
        analyses=analyses,
    )
