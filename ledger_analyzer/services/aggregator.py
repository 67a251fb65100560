from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from ..models.ledger import AccountCategory, ColumnRoleSet, LedgerRecord, MonthlyBucket, Side
from ..models.processing_result import ProfitLossEstimate, SheetAnalysis
from .amounts import parse_amount
from .classifier import AccountClassifier
from .dates import normalize_date

"""Monthly / vendor aggregation of extracted ledger records.

``aggregate`` folds records into buckets using the resolved column roles.
Records without a resolvable date are skipped. The classification-aware
helpers take one amount side per account category: summing both sides would
double count entries that are naturally one-sided for the account type.
"""

__all__ = [
    "DEFAULT_SIDE_MAP",
    "KeyFn",
    "aggregate",
    "aggregate_by_category",
    "estimate_profit_loss",
    "month_key",
    "record_amount",
    "sales_vs_sga_monthly",
    "vendor_key",
]

KeyFn = Callable[[LedgerRecord, date], str | None]

DEFAULT_SIDE_MAP: dict[AccountCategory, Side] = {
    AccountCategory.SALES: Side.CREDIT,
    AccountCategory.COST_OF_GOODS: Side.DEBIT,
    AccountCategory.EXPENSE: Side.DEBIT,
    AccountCategory.MANUFACTURING: Side.DEBIT,
    AccountCategory.RECEIVABLE: Side.DEBIT,
    AccountCategory.PAYABLE: Side.CREDIT,
}


def month_key(record: LedgerRecord, d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def vendor_key(roles: ColumnRoleSet) -> KeyFn:
    """Key function grouping by trimmed vendor text; blank vendors are skipped."""
    def _key(record: LedgerRecord, d: date) -> str | None:
        if roles.vendor is None:
            return None
        name = str(record.get(roles.vendor, "") or "").strip()
        return name or None
    return _key


def record_amount(record: LedgerRecord, roles: ColumnRoleSet, side: Side) -> float:
    column = roles.debit if side is Side.DEBIT else roles.credit
    if column is None:
        return 0.0
    return parse_amount(record.get(column))


def _record_date(record: LedgerRecord, roles: ColumnRoleSet) -> date | None:
    if roles.date is None:
        return None
    return normalize_date(record.get(roles.date))


def aggregate(
    records: Iterable[LedgerRecord],
    roles: ColumnRoleSet,
    key_fn: KeyFn = month_key,
) -> dict[str, MonthlyBucket]:
    """Fold records into ``{key: MonthlyBucket}``; keys are returned sorted."""
    buckets: dict[str, MonthlyBucket] = {}
    if roles.date is None:
        return buckets
    for record in records:
        d = _record_date(record, roles)
        if d is None:
            continue
        key = key_fn(record, d)
        if key is None:
            continue
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = MonthlyBucket()
        bucket.add(
            record_amount(record, roles, Side.DEBIT),
            record_amount(record, roles, Side.CREDIT),
        )
    return dict(sorted(buckets.items()))


def _side_total(bucket: MonthlyBucket, side: Side) -> float:
    return bucket.debit_sum if side is Side.DEBIT else bucket.credit_sum


def aggregate_by_category(
    sheets: Iterable[SheetAnalysis],
    side_map: Mapping[AccountCategory, Side] = DEFAULT_SIDE_MAP,
) -> dict[str, dict[AccountCategory, float]]:
    """Per month, per category totals using only the side mapped to each category."""
    result: dict[str, dict[AccountCategory, float]] = {}
    for sheet in sheets:
        side = side_map.get(sheet.category)
        if side is None:
            continue
        for month, bucket in sheet.monthly.items():
            per_cat = result.setdefault(month, {})
            per_cat[sheet.category] = per_cat.get(sheet.category, 0.0) + _side_total(bucket, side)
    return dict(sorted(result.items()))


def sales_vs_sga_monthly(
    sheets: Sequence[SheetAnalysis],
    classifier: AccountClassifier,
) -> list[dict[str, Any]]:
    """Monthly sales (credit) vs SG&A (debit), with logistics costs broken out.

    ``ratio`` is SG&A as a percentage of sales (0 when there are no sales).
    """
    months: dict[str, dict[str, float]] = {}
    for sheet in sheets:
        if sheet.category is AccountCategory.SALES:
            metric, side = "sales", Side.CREDIT
        elif sheet.category is AccountCategory.EXPENSE:
            metric, side = "sga", Side.DEBIT
        else:
            continue
        logistics = metric == "sga" and classifier.is_logistics(sheet.sheet_name)
        for month, bucket in sheet.monthly.items():
            row = months.setdefault(month, {"sales": 0.0, "sga": 0.0, "logistics": 0.0})
            amount = _side_total(bucket, side)
            row[metric] += amount
            if logistics:
                row["logistics"] += amount

    out: list[dict[str, Any]] = []
    for month in sorted(months):
        row = months[month]
        ratio = row["sga"] / row["sales"] * 100 if row["sales"] else 0.0
        out.append({"month": month, **row, "ratio": ratio})
    return out


def estimate_profit_loss(
    sheets: Iterable[SheetAnalysis],
    side_map: Mapping[AccountCategory, Side] = DEFAULT_SIDE_MAP,
) -> ProfitLossEstimate:
    """Revenue / cost of goods / SG&A totals per account over every record (dated or not)."""
    estimate = ProfitLossEstimate()
    targets = {
        AccountCategory.SALES: estimate.revenue,
        AccountCategory.COST_OF_GOODS: estimate.cost_of_goods,
        AccountCategory.EXPENSE: estimate.expenses,
    }
    for sheet in sheets:
        target = targets.get(sheet.category)
        side = side_map.get(sheet.category)
        if target is None or side is None:
            continue
        total = sum(record_amount(r, sheet.roles, side) for r in sheet.extraction.records)
        if total:
            target[sheet.sheet_name] = target.get(sheet.sheet_name, 0.0) + total
    return estimate
