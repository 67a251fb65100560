from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Ledger domain models: extraction results, column roles, categories, buckets.

A LedgerRecord is a plain ``dict[str, Any]`` keyed by column key in column
order, since each sheet carries its own header set.
"""

__all__ = [
    "CellGrid",
    "LedgerRecord",
    "AccountCategory",
    "Side",
    "ColumnRoleSet",
    "SheetExtraction",
    "MonthlyBucket",
]

CellGrid = Sequence[Sequence[Any]]
LedgerRecord = dict[str, Any]


class AccountCategory(Enum):
    """Semantic category of a ledger sheet, derived from its display name."""
    SALES = "sales"
    COST_OF_GOODS = "cost_of_goods"
    EXPENSE = "expense"  # SG&A (판매비와관리비)
    MANUFACTURING = "manufacturing"
    RECEIVABLE = "receivable"
    PAYABLE = "payable"
    UNCLASSIFIED = "unclassified"


class Side(Enum):
    """Which amount column a classified account contributes to aggregates."""
    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class ColumnRoleSet:
    """Resolved semantic role -> column key. ``None`` means unresolved."""
    date: str | None = None
    debit: str | None = None
    credit: str | None = None
    vendor: str | None = None
    description: str | None = None
    account: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {
            "date": self.date,
            "debit": self.debit,
            "credit": self.credit,
            "vendor": self.vendor,
            "description": self.description,
            "account": self.account,
        }


@dataclass
class SheetExtraction:
    """Rows recovered from one sheet.

    ``header_labels`` are the trimmed header cell texts in column order (blank
    and duplicate labels kept as-is). ``columns`` are the unique keys used in
    ``records``; they equal the labels except for blank (``__EMPTY``,
    ``__EMPTY_1``...) and repeated (``label_1``...) columns.
    """
    header_labels: list[str] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    records: list[LedgerRecord] = field(default_factory=list)
    header_row_index: int | None = None
    date_column: str | None = None
    dropped_rows: int = 0
    masked_cells: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.records


@dataclass
class MonthlyBucket:
    """Running debit/credit totals for one bucket key (month or vendor)."""
    debit_sum: float = 0.0
    credit_sum: float = 0.0
    count: int = 0

    def add(self, debit: float, credit: float) -> None:
        self.debit_sum += debit
        self.credit_sum += credit
        self.count += 1

