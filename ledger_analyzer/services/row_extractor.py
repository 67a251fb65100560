from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..models.config_models import KeywordVocabulary
from ..models.ledger import CellGrid, ColumnRoleSet, LedgerRecord, SheetExtraction
from .dates import normalize_date
from .masking import mask_records
from .role_resolver import find_label, normalize_keyword

"""Row extraction and noise filtering.

Rows below the header become records keyed by column. Then, in order:

a. subtotal / carry-forward rows are dropped: the first non-empty cell is
   wrapped in brackets (``[ 월계 ]``) or contains a marker such as 월계 / 누계 /
   전기이월 once whitespace is removed. Later cells only count when their whole
   text is a marker (``월 계``, ``[누계]``), so descriptions like
   ``감가상각누계액 대체`` or vendors like ``월계상사`` are kept.
b. header rows repeated by multi-page exports are dropped.
c. rows whose cells are all empty, ``0`` or ``-`` are dropped.

Finally the date column is normalized in place (unparseable dates stay
as-is) and, when masking keywords are given, account numbers in the vendor /
description / account cells of deposit and loan ledgers are masked before the
records are handed out.
"""

__all__ = [
    "EMPTY_PLACEHOLDER",
    "build_column_keys",
    "extract_records",
    "is_subtotal_row",
    "is_blank_row",
]

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = "__EMPTY"
_BLANK_VALUES = frozenset({"", "0", "-"})


def _cell_text(cell: Any) -> str:
    if cell is None:
        return ""
    return str(cell).strip()


def build_column_keys(labels: Sequence[str]) -> list[str]:
    """Unique record keys for header labels.

    Blank labels become ``__EMPTY``, ``__EMPTY_1``...; a repeated label gets
    ``_1``, ``_2``... suffixes on later occurrences.
    """
    keys: list[str] = []
    used: set[str] = set()
    counters: dict[str, int] = {}
    for label in labels:
        base = label if label else EMPTY_PLACEHOLDER
        key = base
        while key in used:
            counters[base] = counters.get(base, 0) + 1
            key = f"{base}_{counters[base]}"
        used.add(key)
        keys.append(key)
    return keys


def is_subtotal_row(row: Sequence[Any], markers: Sequence[str]) -> bool:
    texts = [_cell_text(c) for c in row]
    first_index = next((i for i, t in enumerate(texts) if t), None)
    if first_index is None:
        return False
    first = texts[first_index]
    if "[" in first and "]" in first:
        return True
    compact_first = normalize_keyword(first)
    if any(marker in compact_first for marker in markers):
        return True
    for cell in row[first_index + 1:]:
        if not isinstance(cell, str):
            continue
        compact = normalize_keyword(cell).strip("[]")
        if compact and compact in markers:
            return True
    return False


def _is_blank_value(value: Any) -> bool:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value  # 0, 0.0 or NaN
    return _cell_text(value) in _BLANK_VALUES


def is_blank_row(values: Sequence[Any]) -> bool:
    return all(_is_blank_value(v) for v in values)


def _is_repeated_header(value: Any, date_label: str, artifacts: frozenset[str]) -> bool:
    if not isinstance(value, str):
        return False
    if value == date_label or value.strip() == date_label:
        return True
    return normalize_keyword(value) in artifacts


def extract_records(
    grid: CellGrid,
    header_index: int,
    vocabulary: KeywordVocabulary,
    *,
    sheet_name: str = "",
    mask_keywords: Sequence[str] | None = None,
) -> SheetExtraction:
    """Turn the rows under ``header_index`` into filtered, date-normalized records.

    ``mask_keywords`` (deposit / loan account words) enables account-number
    masking; the sheet name stands in for rows without an account cell.
    """
    header_row = grid[header_index]
    body = grid[header_index + 1:]
    labels = [_cell_text(c) for c in header_row]
    # Trailing columns with neither a label nor any data are padding from the used range.
    width = len(labels)
    while width and not labels[width - 1] and all(
        len(row) < width or row[width - 1] is None for row in body
    ):
        width -= 1
    labels = labels[:width]
    columns = build_column_keys(labels)

    date_column = find_label(columns, vocabulary.date)
    date_pos = columns.index(date_column) if date_column is not None else None
    date_label = labels[date_pos] if date_pos is not None else ""

    markers = tuple(normalize_keyword(m) for m in vocabulary.subtotal_markers if m)
    artifacts = frozenset(normalize_keyword(a) for a in vocabulary.repeated_header_artifacts)
    if date_label:
        artifacts = artifacts | {normalize_keyword(date_label)}

    records: list[LedgerRecord] = []
    dropped = 0
    for row in body:
        cells = [row[i] if i < len(row) else None for i in range(width)]
        if all(c is None for c in cells):
            continue
        if is_subtotal_row(cells, markers):
            dropped += 1
            continue
        if date_pos is not None and _is_repeated_header(cells[date_pos], date_label, artifacts):
            dropped += 1
            continue
        if is_blank_row(cells):
            dropped += 1
            continue
        records.append({key: ("" if cell is None else cell) for key, cell in zip(columns, cells)})

    if date_column is not None:
        for record in records:
            parsed = normalize_date(record[date_column])
            if parsed is not None:
                record[date_column] = parsed

    masked = 0
    if mask_keywords:
        text_roles = ColumnRoleSet(
            vendor=find_label(columns, vocabulary.vendor),
            description=find_label(columns, vocabulary.description),
            account=find_label(columns, vocabulary.account),
        )
        masked = mask_records(records, text_roles, sheet_name, mask_keywords)

    logger.debug(
        "extracted records=%d dropped=%d masked=%d header_row=%d date_column=%r",
        len(records),
        dropped,
        masked,
        header_index,
        date_column,
    )
    return SheetExtraction(
        header_labels=labels,
        columns=columns,
        records=records,
        header_row_index=header_index,
        date_column=date_column,
        dropped_rows=dropped,
        masked_cells=masked,
    )
