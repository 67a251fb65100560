"""Domain models for the ledger analyzer.

This package contains the configuration, ledger and result dataclasses used
throughout the application.
"""

from .config_models import AnalyzerConfig, ClassifierVocabulary, KeywordVocabulary
from .error_record import ErrorRecord
from .ledger import AccountCategory, ColumnRoleSet, MonthlyBucket, SheetExtraction, Side
from .processing_result import (
    CounterpartyOverlap,
    FileStat,
    PeriodComparison,
    ProcessingResult,
    ProfitLossEstimate,
    SheetAnalysis,
    VendorPeriodChange,
    WorkbookAnalysis,
)

__all__ = [
    # Configuration models
    "AnalyzerConfig",
    "ClassifierVocabulary",
    "KeywordVocabulary",
    # Ledger models
    "AccountCategory",
    "ColumnRoleSet",
    "MonthlyBucket",
    "SheetExtraction",
    "Side",
    # Result models
    "CounterpartyOverlap",
    "ErrorRecord",
    "FileStat",
    "PeriodComparison",
    "ProcessingResult",
    "ProfitLossEstimate",
    "SheetAnalysis",
    "VendorPeriodChange",
    "WorkbookAnalysis",
]
