from __future__ import annotations

from typing import Any

from ..models.config_models import ClassifierVocabulary, KeywordVocabulary

"""Default keyword vocabularies for ledger header and account recognition.

Korean ledger exports (계정별원장) and English exports are both covered. Every
list here can be overridden from the YAML config (``keywords`` / ``classifier``
sections); the builders below merge overrides on top of these defaults and
freeze the result.
"""

__all__ = [
    "DEFAULT_KEYWORDS",
    "DEFAULT_CLASSIFIER",
    "build_keyword_vocabulary",
    "build_classifier_vocabulary",
]


DEFAULT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "date": ("일자", "날짜", "거래일", "date"),
    "debit": ("차변", "debit", "차변금액", "debit amount"),
    "credit": ("대변", "credit", "대변금액", "credit amount"),
    "balance": ("잔액", "balance"),
    "vendor": ("거래처", "업체", "회사", "vendor", "customer", "counterparty", "company"),
    "description": ("적요", "내용", "비고", "description", "remark", "memo"),
    "account": ("계정명", "계정과목", "계정", "account"),
    "code": ("코드", "code"),
    # Extra terms counted when scoring a header candidate row.
    "header_extra": ("금액", "amount", "코드", "code", "내용", "content", "비고", "note"),
    "subtotal_markers": ("월계", "누계", "전기이월", "차기이월", "carriedforward", "broughtforward",
                         "monthlytotal", "cumulativetotal"),
    "repeated_header_artifacts": ("일자", "일  자", "날짜", "date"),
    "document_titles": ("계정별원장", "generalledger", "accountledger"),
    "deposit_loan_accounts": ("예금", "보통예금", "당좌예금", "정기예금", "적립예금", "저축예금",
                              "차입금", "차입", "대출", "사채", "deposit", "loan", "borrowing"),
}

DEFAULT_CLASSIFIER: dict[str, Any] = {
    "sales_suffixes": ("매출", "매출액", "공사", "수입", "sales", "salesrevenue", "revenue"),
    "special_revenue_names": ("폐기물처분수입", "스팀판매수입", "자원회수시설운영수입"),
    "sga_marker": "판",
    "sga_code_prefix": "8",
    "manufacturing_marker": "제",
    "manufacturing_code_prefix": "5",
    "cost_of_goods": ("매출원가", "제품매출원가", "상품매출원가", "costofgoodssold", "costofsales"),
    "cost_of_goods_exclude": (),
    "receivable": ("외상매출금", "매출채권", "받을어음", "accountsreceivable", "tradereceivable"),
    "receivable_exclude": ("대손충당금", "allowance"),
    "payable": ("외상매입금", "매입채무", "미지급금", "미지급비용", "지급어음", "accountspayable",
                "accruedliabilities", "accruedexpenses"),
    "payable_exclude": ("미지급법인세", "미지급배당금", "incometaxpayable", "dividendspayable",
                        "tradepayableliabilities"),
    "logistics": ("운반", "운임", "택배", "선적", "보관", "freight", "shipping", "delivery", "storage"),
    "purchase_code_prefixes": ("4", "5", "8"),
}


def _as_tuple(values: Any) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(str(v) for v in values)


def build_keyword_vocabulary(overrides: dict[str, Any] | None = None) -> KeywordVocabulary:
    """Merge ``keywords`` overrides over the defaults (lists replace, not extend)."""
    merged = dict(DEFAULT_KEYWORDS)
    for key, values in (overrides or {}).items():
        merged[key] = _as_tuple(values)
    return KeywordVocabulary(**merged)


def build_classifier_vocabulary(overrides: dict[str, Any] | None = None) -> ClassifierVocabulary:
    merged = dict(DEFAULT_CLASSIFIER)
    for key, values in (overrides or {}).items():
        if key in {"sga_marker", "sga_code_prefix", "manufacturing_marker", "manufacturing_code_prefix"}:
            merged[key] = str(values)
        else:
            merged[key] = _as_tuple(values)
    return ClassifierVocabulary(**merged)
