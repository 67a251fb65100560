from __future__ import annotations

import re

from ..models.config_models import ClassifierVocabulary
from ..models.ledger import AccountCategory
from .role_resolver import normalize_keyword

"""Account classification from sheet display names.

Sheet names carry the account name followed by bracketed tags and codes, e.g.
``제품매출 (41110)``, ``여비교통비(판)(82100)``, ``원재료비 (제) (50100)``, ``여비교통비[82100]``. Round, full-width and square
brackets are all accepted.
Checks run in a fixed order and the first hit wins:

sales -> expense (SG&A) -> manufacturing -> cost of goods -> receivable ->
payable -> unclassified
"""

__all__ = [
    "AccountClassifier",
    "split_account_name",
]

_BRACKET_CONTENT = re.compile(r"[(（\[]\s*([^)）\]]+?)\s*[)）\]]")
_OPEN_BRACKET = re.compile(r"[(（\[]")
_NUMERIC = re.compile(r"^\d+$")


def split_account_name(name: str) -> tuple[str, list[str]]:
    """Return (normalized text before the first bracket, bracket contents)."""
    head = _OPEN_BRACKET.split(name, maxsplit=1)[0]
    tokens = [m.group(1).strip() for m in _BRACKET_CONTENT.finditer(name)]
    return normalize_keyword(head), [t for t in tokens if t]


def _contains_any(text: str, words: tuple[str, ...]) -> bool:
    return any(normalize_keyword(w) in text for w in words if w)


class AccountClassifier:
    """Sheet-name -> AccountCategory. Pure; results are cached per instance."""

    def __init__(self, vocabulary: ClassifierVocabulary) -> None:
        self.vocabulary = vocabulary
        self._sales_suffixes = tuple(normalize_keyword(s) for s in vocabulary.sales_suffixes if s)
        self._cache: dict[str, AccountCategory] = {}

    def classify(self, sheet_name: str) -> AccountCategory:
        cached = self._cache.get(sheet_name)
        if cached is None:
            cached = self._classify(sheet_name)
            self._cache[sheet_name] = cached
        return cached

    def _classify(self, sheet_name: str) -> AccountCategory:
        v = self.vocabulary
        name = sheet_name.strip()
        _, tokens = split_account_name(name)
        compact = normalize_keyword(name)

        if self.is_sales(name):
            return AccountCategory.SALES
        codes = [t for t in tokens if _NUMERIC.match(t)]
        if v.sga_marker in tokens or any(c.startswith(v.sga_code_prefix) for c in codes):
            return AccountCategory.EXPENSE
        if v.manufacturing_marker in tokens or any(
            c.startswith(v.manufacturing_code_prefix) for c in codes
        ):
            return AccountCategory.MANUFACTURING
        if _contains_any(compact, v.cost_of_goods) and not _contains_any(compact, v.cost_of_goods_exclude):
            return AccountCategory.COST_OF_GOODS
        if _contains_any(compact, v.receivable) and not _contains_any(compact, v.receivable_exclude):
            return AccountCategory.RECEIVABLE
        if _contains_any(compact, v.payable) and not _contains_any(compact, v.payable_exclude):
            return AccountCategory.PAYABLE
        return AccountCategory.UNCLASSIFIED

    def is_sales(self, sheet_name: str) -> bool:
        head, _ = split_account_name(sheet_name.strip())
        if head and head.endswith(self._sales_suffixes):
            return True
        return _contains_any(normalize_keyword(sheet_name), self.vocabulary.special_revenue_names)

    def is_logistics(self, sheet_name: str) -> bool:
        """Freight / shipping / storage accounts (운반비, 운임, 보관료...)."""
        head, _ = split_account_name(sheet_name.strip())
        return _contains_any(head, self.vocabulary.logistics)

    def account_code(self, sheet_name: str) -> str | None:
        """First purely numeric bracket token, e.g. ``41110``."""
        _, tokens = split_account_name(sheet_name)
        return next((t for t in tokens if _NUMERIC.match(t)), None)

    def is_purchase(self, sheet_name: str) -> bool:
        """Purchase-side accounts for duplicate-vendor review: codes 4xxxx / 5xxxx / 8xxxx."""
        code = self.account_code(sheet_name)
        return code is not None and code.startswith(self.vocabulary.purchase_code_prefixes)
