from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the ledger analyzer.

Vocabularies are plain immutable tuples so a single instance can be shared by
the header locator, row extractor, role resolver and classifier without any
module-level mutable state.
"""


@dataclass(frozen=True)
class KeywordVocabulary:
    """Column-header keyword sets used to recognize ledger columns.

    Matching is case-insensitive and whitespace-insensitive; see
    ``services.role_resolver.normalize_label``.
    """
    date: tuple[str, ...]
    debit: tuple[str, ...]
    credit: tuple[str, ...]
    balance: tuple[str, ...]
    vendor: tuple[str, ...]
    description: tuple[str, ...]
    account: tuple[str, ...]
    code: tuple[str, ...]
    header_extra: tuple[str, ...]  # 금액 / 코드 / 내용 / 비고 etc. (header scoring only)
    subtotal_markers: tuple[str, ...]  # 월계 / 누계 / 전기이월
    repeated_header_artifacts: tuple[str, ...]  # duplicate header rows from multi-page exports
    document_titles: tuple[str, ...]  # single-cell title rows never chosen as header
    deposit_loan_accounts: tuple[str, ...]  # accounts whose text cells get account-number masking

    @property
    def ledger_column_keywords(self) -> tuple[str, ...]:
        """Non-date keywords counted when scoring a header candidate row (deduplicated, ordered)."""
        seen: dict[str, None] = {}
        for group in (
            self.description,
            self.vendor,
            self.debit,
            self.credit,
            self.balance,
            self.header_extra,
        ):
            for kw in group:
                seen.setdefault(kw, None)
        return tuple(seen)


@dataclass(frozen=True)
class ClassifierVocabulary:
    """Account-name vocabularies for sheet classification."""
    sales_suffixes: tuple[str, ...]
    special_revenue_names: tuple[str, ...]
    sga_marker: str  # bracket tag, e.g. "판" in "여비교통비(판)"
    sga_code_prefix: str
    manufacturing_marker: str  # bracket tag, e.g. "제"
    manufacturing_code_prefix: str
    cost_of_goods: tuple[str, ...]
    cost_of_goods_exclude: tuple[str, ...]
    receivable: tuple[str, ...]
    receivable_exclude: tuple[str, ...]
    payable: tuple[str, ...]
    payable_exclude: tuple[str, ...]
    logistics: tuple[str, ...]
    purchase_code_prefixes: tuple[str, ...]  # codes counted as purchase-side accounts


@dataclass(frozen=True)
class AnalyzerConfig:
    """Root configuration object for a batch analysis run."""
    source_directory: str  # Directory to scan for .xlsx workbooks
    keywords: KeywordVocabulary
    classifier: ClassifierVocabulary
    header_scan_rows: int = 20
    lookahead_rows: int = 5
    role_sample_rows: int | None = None  # None = every record
    mask_account_numbers: bool = True
    keep_na_strings: tuple[str, ...] = field(default_factory=tuple)
