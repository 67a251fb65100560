from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..models.config_models import KeywordVocabulary
from ..models.ledger import CellGrid
from .dates import normalize_date
from .role_resolver import normalize_keyword

"""Header row detection.

Three strategies, first hit wins:

1. keyword scoring + lookahead: the row names a date column and at least two
   other ledger columns, and a date-valued row follows within a few rows
2. keyword scoring alone: same test, accepted when the next row has content
3. structure: the row with the most non-empty cells (at least 3), skipping
   single-cell document titles such as ``계정별원장``
"""

__all__ = [
    "locate_header",
    "is_empty_cell",
]

logger = logging.getLogger(__name__)

MIN_HEADER_CELLS = 3
MIN_RELAXED_CELLS = 2
MIN_OTHER_KEYWORDS = 2


def is_empty_cell(cell: Any) -> bool:
    return cell is None or (isinstance(cell, str) and cell.strip() == "")


def _non_null_count(row: Sequence[Any]) -> int:
    return sum(1 for cell in row if cell is not None)


def _row_text(row: Sequence[Any]) -> str:
    return "|".join(normalize_keyword(str(cell)) for cell in row if cell is not None)


class _KeywordScorer:
    def __init__(self, vocabulary: KeywordVocabulary) -> None:
        self.date_keywords = tuple(normalize_keyword(kw) for kw in vocabulary.date if kw)
        self.other_keywords = tuple(
            dict.fromkeys(normalize_keyword(kw) for kw in vocabulary.ledger_column_keywords if kw)
        )

    def qualifies(self, row: Sequence[Any]) -> bool:
        text = _row_text(row)
        if not any(kw in text for kw in self.date_keywords):
            return False
        hits = sum(1 for kw in self.other_keywords if kw in text)
        return hits >= MIN_OTHER_KEYWORDS


def _first_cell(row: Sequence[Any]) -> Any:
    return row[0] if row else None


def locate_header(
    grid: CellGrid,
    vocabulary: KeywordVocabulary,
    *,
    scan_rows: int = 20,
    lookahead_rows: int = 5,
) -> int | None:
    """Return the 0-based header row index, or None when no row qualifies."""
    limit = min(scan_rows, len(grid))
    scorer = _KeywordScorer(vocabulary)

    # 1. keyword match validated by a date-valued row shortly after
    for i in range(limit):
        row = grid[i]
        if _non_null_count(row) < MIN_HEADER_CELLS or not scorer.qualifies(row):
            continue
        for j in range(i + 1, min(i + 1 + lookahead_rows, len(grid))):
            if normalize_date(_first_cell(grid[j])) is not None:
                logger.debug("header row=%d (keyword+lookahead, data row=%d)", i, j)
                return i

    # 2. keyword match without lookahead
    for i in range(limit):
        row = grid[i]
        if _non_null_count(row) < MIN_RELAXED_CELLS or not scorer.qualifies(row):
            continue
        if i + 1 < len(grid) and any(cell is not None for cell in grid[i + 1]):
            logger.debug("header row=%d (keyword)", i)
            return i

    # 3. densest row
    titles = {normalize_keyword(t) for t in vocabulary.document_titles}
    best_index: int | None = None
    best_count = MIN_HEADER_CELLS - 1
    for i in range(limit):
        non_empty = [cell for cell in grid[i] if not is_empty_cell(cell)]
        if len(non_empty) == 1 and normalize_keyword(str(non_empty[0])) in titles:
            continue
        if len(non_empty) > best_count:
            best_index, best_count = i, len(non_empty)
    if best_index is not None:
        logger.debug("header row=%d (structural, cells=%d)", best_index, best_count)
    return best_index
