from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ..models.ledger import ColumnRoleSet, LedgerRecord
from .role_resolver import normalize_keyword

"""Bank account number masking for deposit / loan ledgers.

Counterparty and memo cells of 보통예금 / 차입금 style ledgers often carry
full account numbers. Digit runs shaped like one (10 to 16 digits, optionally
split by ``-``, ``.`` or spaces) keep their first and last four digits; the
rest become ``*`` and separators stay where they were.
"""

__all__ = [
    "is_deposit_or_loan_account",
    "mask_account_number",
    "mask_records",
]

_ACCOUNT_NUMBER = re.compile(r"\d{3,4}[-.\s]?\d{2,4}[-.\s]?\d{4,8}")
MIN_DIGITS = 10
MAX_DIGITS = 16
KEEP_DIGITS = 4


def _mask_match(match: re.Match[str]) -> str:
    text = match.group(0)
    total = sum(ch.isdigit() for ch in text)
    if not MIN_DIGITS <= total <= MAX_DIGITS:
        return text
    out: list[str] = []
    seen = 0
    for ch in text:
        if ch.isdigit():
            seen += 1
            out.append(ch if seen <= KEEP_DIGITS or seen > total - KEEP_DIGITS else "*")
        else:
            out.append(ch)
    return "".join(out)


def mask_account_number(text: str) -> str:
    """``"국민 123-456-789012"`` -> ``"국민 123-4**-**9012"``; other text unchanged."""
    if not text:
        return text
    return _ACCOUNT_NUMBER.sub(_mask_match, text)


def is_deposit_or_loan_account(name: str, keywords: Iterable[str]) -> bool:
    compact = normalize_keyword(name or "")
    return bool(compact) and any(normalize_keyword(kw) in compact for kw in keywords if kw)


def mask_records(
    records: Sequence[LedgerRecord],
    roles: ColumnRoleSet,
    sheet_name: str,
    keywords: Sequence[str],
) -> int:
    """Mask account numbers in the vendor / description / account cells, in place.

    The deposit/loan test uses the row's account cell when the sheet has an
    account column, otherwise the sheet name. Returns the number of cells changed.
    """
    columns = [c for c in (roles.vendor, roles.description, roles.account) if c is not None]
    if not columns:
        return 0
    sheet_matches = is_deposit_or_loan_account(sheet_name, keywords)
    changed = 0
    for record in records:
        if roles.account is not None and str(record.get(roles.account, "") or "").strip():
            applies = is_deposit_or_loan_account(str(record[roles.account]), keywords)
        else:
            applies = sheet_matches
        if not applies:
            continue
        for column in columns:
            value = record.get(column)
            if not isinstance(value, str):
                continue
            masked = mask_account_number(value)
            if masked != value:
                record[column] = masked
                changed += 1
    return changed
