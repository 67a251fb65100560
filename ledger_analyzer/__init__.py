"""General-ledger workbook analyzer.

Locates header rows in messy ledger exports, extracts transaction records,
resolves column roles, classifies accounts from sheet names and aggregates
monthly / per-vendor totals.
"""

from .config import ConfigError, default_config, load_config
from .excel.reader import WorkbookReadError, read_workbook
from .services.orchestrator import ProcessingError, analyze_sheet, analyze_workbook, process_all

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "ProcessingError",
    "WorkbookReadError",
    "analyze_sheet",
    "analyze_workbook",
    "default_config",
    "load_config",
    "process_all",
    "read_workbook",
]
