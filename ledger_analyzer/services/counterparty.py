from __future__ import annotations

from collections.abc import Iterable

from ..models.ledger import MonthlyBucket, Side
from ..models.processing_result import CounterpartyOverlap, SheetAnalysis
from .aggregator import record_amount

"""Counterparty overlap between two groups of ledger sheets.

Typical pairs:

- duplicate vendors: sales accounts (credit side) vs purchase accounts with
  4xxxx / 5xxxx / 8xxxx codes (debit side), i.e. a party that is both
  customer and supplier
- offset review: receivables (debit side) vs payables (credit side)
"""

__all__ = [
    "find_counterparty_overlap",
]

_Totals = dict[str, dict[str, MonthlyBucket]]  # vendor -> account -> bucket


def _collect(sheets: Iterable[SheetAnalysis], side: Side) -> _Totals:
    totals: _Totals = {}
    for sheet in sheets:
        vendor_column = sheet.roles.vendor
        if vendor_column is None:
            continue
        for record in sheet.extraction.records:
            vendor = str(record.get(vendor_column, "") or "").strip()
            if not vendor:
                continue
            amount = record_amount(record, sheet.roles, side)
            if not amount:
                continue
            bucket = totals.setdefault(vendor, {}).setdefault(sheet.sheet_name, MonthlyBucket())
            if side is Side.DEBIT:
                bucket.add(amount, 0.0)
            else:
                bucket.add(0.0, amount)
    return totals


def _side_amount(buckets: dict[str, MonthlyBucket], side: Side) -> float:
    if side is Side.DEBIT:
        return sum(b.debit_sum for b in buckets.values())
    return sum(b.credit_sum for b in buckets.values())


def find_counterparty_overlap(
    left_sheets: Iterable[SheetAnalysis],
    right_sheets: Iterable[SheetAnalysis],
    left_side: Side,
    right_side: Side,
) -> list[CounterpartyOverlap]:
    """Vendors present on both sides, largest combined amount first.

    Rows with a blank vendor or a zero amount on the compared side are ignored.
    """
    left = _collect(left_sheets, left_side)
    right = _collect(right_sheets, right_side)

    overlaps: list[CounterpartyOverlap] = []
    for vendor in left.keys() & right.keys():
        left_accounts = left[vendor]
        right_accounts = right[vendor]
        overlaps.append(
            CounterpartyOverlap(
                vendor=vendor,
                left_accounts=left_accounts,
                right_accounts=right_accounts,
                left_amount=_side_amount(left_accounts, left_side),
                right_amount=_side_amount(right_accounts, right_side),
                left_transactions=sum(b.count for b in left_accounts.values()),
                right_transactions=sum(b.count for b in right_accounts.values()),
            )
        )
    overlaps.sort(key=lambda o: (-(o.left_amount + o.right_amount), o.vendor))
    return overlaps
