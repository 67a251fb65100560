from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from itertools import islice

from ..models.config_models import KeywordVocabulary
from ..models.ledger import ColumnRoleSet, LedgerRecord
from .amounts import parse_amount

"""Header role resolution.

Maps physical column keys to the semantic roles date / debit / credit /
vendor / description (plus account). Keyword matching comes first; when an
amount column has no recognizable header (blank or whitespace-only labels
from some export tools) the column carrying the largest absolute numeric mass
is taken instead. That fallback is a best-effort heuristic, not a guarantee.
"""

__all__ = [
    "normalize_label",
    "normalize_keyword",
    "find_label",
    "resolve_roles",
]

logger = logging.getLogger(__name__)

_WS = re.compile(r"\s+")
_CODE_PREFIX = re.compile(r"^\d+[_.-]?")


def normalize_keyword(text: str) -> str:
    return _WS.sub("", text).lower()


def normalize_label(label: str) -> str:
    """Lower-case, drop all whitespace and any leading numeric code (``01_일자`` -> ``일자``)."""
    return _CODE_PREFIX.sub("", normalize_keyword(label or ""))


def _matches(label: str, keywords: Iterable[str]) -> bool:
    cleaned = normalize_label(label)
    return any(normalize_keyword(kw) in cleaned for kw in keywords if kw)


def _matches_exact(label: str, keywords: Iterable[str]) -> bool:
    cleaned = normalize_label(label)
    return any(normalize_keyword(kw) == cleaned for kw in keywords if kw)


def find_label(labels: Sequence[str], keywords: Iterable[str]) -> str | None:
    """First label (in column order) containing any keyword."""
    keywords = tuple(keywords)
    for label in labels:
        if _matches(label, keywords):
            return label
    return None


def _find_amount_label(
    labels: Sequence[str],
    keywords: Sequence[str],
    balance: Sequence[str],
    taken: set[str],
) -> str | None:
    candidates = [
        label for label in labels if label not in taken and not _matches(label, balance)
    ]
    for label in candidates:
        if _matches_exact(label, keywords):
            return label
    for label in candidates:
        if _matches(label, keywords):
            return label
    return None


def _largest_numeric_column(
    labels: Sequence[str],
    records: Sequence[LedgerRecord],
    excluded_keywords: Sequence[str],
    taken: set[str],
    sample_rows: int | None,
) -> str | None:
    """Column with the largest accumulated absolute amount; header order breaks ties."""
    eligible = [
        label for label in labels if label not in taken and not _matches(label, excluded_keywords)
    ]
    if not eligible:
        return None
    sums = dict.fromkeys(eligible, 0.0)
    sample = records if sample_rows is None else islice(records, sample_rows)
    for record in sample:
        for label in eligible:
            sums[label] += abs(parse_amount(record.get(label)))

    best: str | None = None
    best_sum = 0.0
    for label in eligible:
        if sums[label] > best_sum:
            best, best_sum = label, sums[label]
    return best


def resolve_roles(
    labels: Sequence[str],
    records: Sequence[LedgerRecord],
    vocabulary: KeywordVocabulary,
    *,
    sample_rows: int | None = None,
) -> ColumnRoleSet:
    """Resolve column roles from header labels, falling back to the data itself.

    Args:
        labels: column keys in column order
        records: extracted records (only read)
        vocabulary: keyword sets
        sample_rows: cap on records scanned by the magnitude fallback

    Balance columns are excluded from both the keyword pass and the magnitude
    fallback, so neither amount role can land on one.
    """
    date_label = find_label(labels, vocabulary.date)
    vendor = find_label(labels, vocabulary.vendor)
    description = find_label(labels, vocabulary.description)
    account = find_label(labels, vocabulary.account)

    fixed = {x for x in (date_label, vendor, description) if x is not None}

    debit = _find_amount_label(labels, vocabulary.debit, vocabulary.balance, fixed)
    credit = _find_amount_label(
        labels, vocabulary.credit, vocabulary.balance, fixed | ({debit} if debit else set())
    )

    common_excluded = (
        *vocabulary.balance,
        *vocabulary.description,
        *vocabulary.vendor,
        *vocabulary.code,
        *vocabulary.date,
    )
    if debit is None and records:
        taken = fixed | ({credit} if credit else set())
        debit = _largest_numeric_column(
            labels, records, (*common_excluded, *vocabulary.credit), taken, sample_rows
        )
        if debit is not None:
            logger.debug("debit column inferred from numeric magnitude: %r", debit)
    if credit is None and records:
        taken = fixed | ({debit} if debit else set())
        credit = _largest_numeric_column(
            labels, records, (*common_excluded, *vocabulary.debit), taken, sample_rows
        )
        if credit is not None:
            logger.debug("credit column inferred from numeric magnitude: %r", credit)

    return ColumnRoleSet(
        date=date_label,
        debit=debit,
        credit=credit,
        vendor=vendor,
        description=description,
        account=account,
    )
