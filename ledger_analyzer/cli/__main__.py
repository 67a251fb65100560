from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..excel.reader import WorkbookReadError, read_workbook
from ..logging.init import enable_debug, log_summary, setup_logging
from ..models.config_models import AnalyzerConfig
from ..models.processing_result import CounterpartyOverlap, ProcessingResult, WorkbookAnalysis
from ..services.classifier import AccountClassifier
from ..services.orchestrator import (
    ProcessingError,
    analyze_sheet,
    analyze_workbook,
    process_all,
    scan_excel_files,
)
from ..services.period_comparison import AMOUNT_FILTERS, compare_periods
from ..services.summary import format_number, render_summary_line

"""CLI entrypoint.

Flow: load ``.env`` -> resolve and load the YAML config -> analyze every
``.xlsx`` in ``source_directory`` -> print the SUMMARY line -> exit code.

``--compare CURRENT PREVIOUS --account NAME`` compares one account between two
workbooks vendor by vendor instead of running the batch.

Config path resolution order: ``--config``, then the ``LEDGER_ANALYZER_CONFIG``
environment variable (``.env`` included), then ``config/ledger.yml``.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "LEDGER_ANALYZER_CONFIG"
INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv; variables already set in the process win by default."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ledger-analyzer",
        description="General-ledger workbook analyzer (header detection, account classification, monthly totals)",
    )
    p.add_argument("--config", type=Path, default=None, help="YAML config path (default: config/ledger.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print detected header, roles and first rows per sheet then exit",
    )
    p.add_argument("--report", type=Path, default=None, help="Write a JSON analysis report to PATH")
    p.add_argument(
        "--compare",
        nargs=2,
        type=Path,
        metavar=("CURRENT", "PREVIOUS"),
        default=None,
        help="Compare one account (--account) between two workbooks, vendor by vendor",
    )
    p.add_argument("--account", default=None, help="Sheet name of the account for --compare")
    p.add_argument(
        "--amount-filter",
        choices=AMOUNT_FILTERS,
        default="all",
        help="Amounts compared by --compare (default: all = debit + credit)",
    )
    return p.parse_args(argv)


def _resolve_config_path(arg: Path | None) -> Path:
    if arg is not None:
        return arg
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def _jsonable(value: Any) -> Any:
    return value.isoformat() if hasattr(value, "isoformat") else value


def _inspect_data(cfg: AnalyzerConfig) -> int:
    try:
        excel_files = scan_excel_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not excel_files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL

    classifier = AccountClassifier(cfg.classifier)
    for f in excel_files:
        print(f"FILE: {f.name}")
        try:
            workbook = read_workbook(f, keep_na_strings=cfg.keep_na_strings or None)
        except WorkbookReadError as e:
            print(f"  read_error: {e}")
            continue
        for sname, grid in workbook.items():
            sheet = analyze_sheet(sname, grid, cfg, classifier)
            ext = sheet.extraction
            print(
                f"  SHEET: {sname} category={sheet.category.value} "
                f"header_row={ext.header_row_index} cols={ext.columns}"
            )
            print(f"    roles={sheet.roles.as_dict()} records={len(ext.records)} dropped={ext.dropped_rows}")
            safe_rows = [
                {k: _jsonable(v) for k, v in r.items()} for r in ext.records[:INSPECT_SAMPLE_ROWS]
            ]
            print("    sample_rows=", safe_rows)
    return EXIT_SUCCESS_ALL


def _compare_workbooks(
    cfg: AnalyzerConfig,
    current: Path,
    previous: Path,
    account: str,
    amount_filter: str,
) -> int:
    logger = setup_logging()
    analyses = []
    for path in (current, previous):
        try:
            workbook = read_workbook(path, keep_na_strings=cfg.keep_na_strings or None)
        except WorkbookReadError as e:
            logger.error(f"compare: {e}")
            return EXIT_FATAL
        analyses.append(analyze_workbook(workbook, cfg, file_name=path.name))

    try:
        comparison = compare_periods(analyses[0], analyses[1], account, amount_filter)
    except KeyError as e:
        logger.error(f"compare: {e.args[0]}")
        return EXIT_FATAL

    print(f"ACCOUNT: {comparison.account} previous_sheet={comparison.previous_sheet} filter={amount_filter}")
    for v in comparison.vendors:
        print(
            f"  VENDOR: {v.vendor} current={format_number(v.current_amount)} "
            f"previous={format_number(v.previous_amount)} change={format_number(v.change)} "
            f"change_pct={v.change_percent:.1f}"
        )
    return EXIT_SUCCESS_ALL


def _overlap_payload(overlap: CounterpartyOverlap) -> dict[str, Any]:
    return {
        "vendor": overlap.vendor,
        "left_amount": overlap.left_amount,
        "right_amount": overlap.right_amount,
        "net_amount": overlap.net_amount,
        "left_transactions": overlap.left_transactions,
        "right_transactions": overlap.right_transactions,
        "left_accounts": sorted(overlap.left_accounts),
        "right_accounts": sorted(overlap.right_accounts),
    }


def _analysis_payload(analysis: WorkbookAnalysis) -> dict[str, Any]:
    pl = analysis.profit_loss
    return {
        "sheets": [
            {
                "name": s.sheet_name,
                "category": s.category.value,
                "header_row": s.extraction.header_row_index,
                "records": len(s.extraction.records),
                "dropped_rows": s.extraction.dropped_rows,
                "roles": s.roles.as_dict(),
                "monthly": {
                    month: {"debit": b.debit_sum, "credit": b.credit_sum, "count": b.count}
                    for month, b in s.monthly.items()
                },
                "vendors": {
                    vendor: {"debit": b.debit_sum, "credit": b.credit_sum, "count": b.count}
                    for vendor, b in s.vendors.items()
                },
                "error": s.error,
            }
            for s in analysis.sheets
        ],
        "category_monthly": {
            month: {cat.value: amount for cat, amount in per_cat.items()}
            for month, per_cat in analysis.category_monthly.items()
        },
        "sales_vs_sga": analysis.sales_vs_sga,
        "profit_loss": {
            "revenue": pl.revenue,
            "cost_of_goods": pl.cost_of_goods,
            "expenses": pl.expenses,
            "gross_profit": pl.gross_profit,
            "operating_profit": pl.operating_profit,
        },
        "duplicate_vendors": [_overlap_payload(o) for o in analysis.duplicate_vendors],
        "offset_vendors": [_overlap_payload(o) for o in analysis.offset_vendors],
    }


def _write_report(path: Path, result: ProcessingResult) -> None:
    payload = {
        "files": {name: _analysis_payload(a) for name, a in (result.analyses or {}).items()},
        "file_stats": [asdict(stat) for stat in (result.file_stats or [])],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2, default=str), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when argv is None; an empty list means "no arguments".
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        enable_debug(logger)
        logger.debug("debug mode enabled")

    config_path = _resolve_config_path(args.config)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    if args.compare is not None:
        if not args.account:
            logger.error("compare: --account is required")
            return EXIT_FATAL
        current, previous = args.compare
        return _compare_workbooks(cfg, current, previous, args.account, args.amount_filter)

    logger.info(f"Analyzing workbooks from: {directory}")
    try:
        result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    if args.report is not None:
        try:
            _write_report(args.report, result)
        except OSError as e:
            logger.error(f"report: {e}")
            return EXIT_FATAL
        logger.info(f"report written: {args.report}")

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0 or result.empty_sheets > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
