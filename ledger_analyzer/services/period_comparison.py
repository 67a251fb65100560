from __future__ import annotations

import logging
import re

from ..models.ledger import MonthlyBucket, Side
from ..models.processing_result import PeriodComparison, SheetAnalysis, VendorPeriodChange, WorkbookAnalysis
from .aggregator import record_amount

"""Previous-period comparison of one account, vendor by vendor.

The account sheet is looked up in the previous workbook by exact name first,
then by name with a leading list number removed (``1. 제품매출`` matches
``제품매출``). Vendor totals cover every extracted record, dated or not.
"""

__all__ = [
    "AMOUNT_FILTERS",
    "compare_periods",
    "find_matching_sheet",
    "normalize_account_name",
]

logger = logging.getLogger(__name__)

AMOUNT_FILTERS = ("all", "debit", "credit")

_LIST_NUMBER = re.compile(r"^\d+[.\s]*")


def normalize_account_name(name: str) -> str:
    return _LIST_NUMBER.sub("", name).strip()


def find_matching_sheet(name: str, workbook: WorkbookAnalysis) -> SheetAnalysis | None:
    by_name = {s.sheet_name: s for s in workbook.sheets}
    if name in by_name:
        return by_name[name]
    target = normalize_account_name(name)
    for sheet in workbook.sheets:
        if normalize_account_name(sheet.sheet_name) == target:
            return sheet
    return None


def _vendor_totals(sheet: SheetAnalysis | None) -> dict[str, MonthlyBucket]:
    totals: dict[str, MonthlyBucket] = {}
    if sheet is None or sheet.roles.vendor is None:
        return totals
    for record in sheet.extraction.records:
        vendor = str(record.get(sheet.roles.vendor, "") or "").strip()
        if not vendor:
            continue
        bucket = totals.setdefault(vendor, MonthlyBucket())
        bucket.add(
            record_amount(record, sheet.roles, Side.DEBIT),
            record_amount(record, sheet.roles, Side.CREDIT),
        )
    return totals


def _filtered(bucket: MonthlyBucket, amount_filter: str) -> float:
    if amount_filter == "debit":
        return bucket.debit_sum
    if amount_filter == "credit":
        return bucket.credit_sum
    return bucket.debit_sum + bucket.credit_sum


def compare_periods(
    current: WorkbookAnalysis,
    previous: WorkbookAnalysis,
    sheet_name: str,
    amount_filter: str = "all",
) -> PeriodComparison:
    """Compare ``sheet_name`` between two analyzed workbooks.

    Vendors whose filtered amount is zero in both periods are left out. The
    result is ordered by absolute change percentage, largest first.

    Raises:
        ValueError: unknown ``amount_filter``
        KeyError: ``sheet_name`` is not a sheet of the current workbook
    """
    if amount_filter not in AMOUNT_FILTERS:
        raise ValueError(f"amount_filter must be one of {AMOUNT_FILTERS}, got {amount_filter!r}")
    current_sheet = next((s for s in current.sheets if s.sheet_name == sheet_name), None)
    if current_sheet is None:
        raise KeyError(f"sheet not found in current workbook: {sheet_name}")

    previous_sheet = find_matching_sheet(sheet_name, previous)
    if previous_sheet is None:
        logger.warning("account=%s has no matching sheet in the previous workbook", sheet_name)
    elif previous_sheet.sheet_name != sheet_name:
        logger.debug("account=%s matched previous sheet %r", sheet_name, previous_sheet.sheet_name)

    current_totals = _vendor_totals(current_sheet)
    previous_totals = _vendor_totals(previous_sheet)

    changes: list[VendorPeriodChange] = []
    for vendor in current_totals.keys() | previous_totals.keys():
        now = current_totals.get(vendor, MonthlyBucket())
        before = previous_totals.get(vendor, MonthlyBucket())
        change = VendorPeriodChange(
            vendor=vendor,
            current=now,
            previous=before,
            current_amount=_filtered(now, amount_filter),
            previous_amount=_filtered(before, amount_filter),
        )
        if change.current_amount == 0 and change.previous_amount == 0:
            continue
        changes.append(change)
    changes.sort(key=lambda c: (-abs(c.change_percent), c.vendor))

    return PeriodComparison(
        account=sheet_name,
        previous_sheet=previous_sheet.sheet_name if previous_sheet is not None else None,
        amount_filter=amount_filter,
        vendors=changes,
    )
