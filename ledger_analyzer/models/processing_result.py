from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .ledger import AccountCategory, ColumnRoleSet, MonthlyBucket, SheetExtraction

"""Analysis result models.

SheetAnalysis / WorkbookAnalysis hold what one workbook produced; FileStat and
ProcessingResult aggregate a batch run over a directory for the SUMMARY line.
"""


@dataclass
class SheetAnalysis:
    """Everything derived from one ledger sheet."""
    sheet_name: str
    category: AccountCategory
    extraction: SheetExtraction
    roles: ColumnRoleSet
    monthly: dict[str, MonthlyBucket] = field(default_factory=dict)
    vendors: dict[str, MonthlyBucket] = field(default_factory=dict)
    error: str | None = None

    @property
    def has_data(self) -> bool:
        return self.error is None and not self.extraction.is_empty


@dataclass
class ProfitLossEstimate:
    """Rough P&L derived from classified ledger sheets."""
    revenue: dict[str, float] = field(default_factory=dict)  # account -> amount
    cost_of_goods: dict[str, float] = field(default_factory=dict)
    expenses: dict[str, float] = field(default_factory=dict)

    @property
    def total_revenue(self) -> float:
        return sum(self.revenue.values())

    @property
    def total_cost_of_goods(self) -> float:
        return sum(self.cost_of_goods.values())

    @property
    def total_expenses(self) -> float:
        return sum(self.expenses.values())

    @property
    def gross_profit(self) -> float:
        return self.total_revenue - self.total_cost_of_goods

    @property
    def operating_profit(self) -> float:
        return self.gross_profit - self.total_expenses


@dataclass
class CounterpartyOverlap:
    """A vendor seen on both sides of a counterparty comparison."""
    vendor: str
    left_accounts: dict[str, MonthlyBucket] = field(default_factory=dict)
    right_accounts: dict[str, MonthlyBucket] = field(default_factory=dict)
    left_amount: float = 0.0
    right_amount: float = 0.0
    left_transactions: int = 0
    right_transactions: int = 0

    @property
    def net_amount(self) -> float:
        return self.left_amount - self.right_amount


@dataclass
class VendorPeriodChange:
    """One vendor's totals on an account in the current and previous period."""
    vendor: str
    current: MonthlyBucket = field(default_factory=MonthlyBucket)
    previous: MonthlyBucket = field(default_factory=MonthlyBucket)
    current_amount: float = 0.0  # after the debit / credit / all filter
    previous_amount: float = 0.0

    @property
    def change(self) -> float:
        return self.current_amount - self.previous_amount

    @property
    def change_percent(self) -> float:
        """Change relative to the previous period; 100 for new vendors, 0 when both are flat."""
        if self.previous_amount:
            return self.change / self.previous_amount * 100
        return 100.0 if self.current_amount > 0 else 0.0


@dataclass
class PeriodComparison:
    """Vendor-level comparison of one account across two workbooks."""
    account: str
    previous_sheet: str | None  # None when the previous workbook has no matching sheet
    amount_filter: str
    vendors: list[VendorPeriodChange] = field(default_factory=list)


@dataclass
class WorkbookAnalysis:
    """Per-workbook result: sheet analyses plus cross-sheet summaries."""
    sheets: list[SheetAnalysis] = field(default_factory=list)
    category_monthly: dict[str, dict[AccountCategory, float]] = field(default_factory=dict)
    sales_vs_sga: list[dict[str, Any]] = field(default_factory=list)
    profit_loss: ProfitLossEstimate = field(default_factory=ProfitLossEstimate)
    duplicate_vendors: list[CounterpartyOverlap] = field(default_factory=list)
    offset_vendors: list[CounterpartyOverlap] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        return sum(len(s.extraction.records) for s in self.sheets)

    @property
    def empty_sheets(self) -> list[str]:
        return [s.sheet_name for s in self.sheets if not s.has_data]


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics for a batch run."""
    file_name: str
    status: str  # success/failed
    sheets: int
    classified_sheets: int
    empty_sheets: int
    records: int
    elapsed_seconds: float


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results and SUMMARY metrics for a directory run."""
    success_files: int
    failed_files: int
    total_sheets: int
    classified_sheets: int
    empty_sheets: int
    total_records: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float  # records / elapsed
    file_stats: list[FileStat] | None = None
    analyses: dict[str, WorkbookAnalysis] | None = None  # file name -> analysis
