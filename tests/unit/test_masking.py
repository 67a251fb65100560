from __future__ import annotations

import pytest

from ledger_analyzer.models.ledger import ColumnRoleSet
from ledger_analyzer.services.masking import (
    is_deposit_or_loan_account,
    mask_account_number,
    mask_records,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("국민 123-456-789012", "국민 123-4**-**9012"),
        ("1234567890", "1234**7890"),
        ("계좌 1002 345 678901 이체", "계좌 1002 *** **8901 이체"),
        ("카드 1234-5678-9012-3456", "카드 1234-****-9012-3456"),
    ],
)
def test_mask_account_number(raw, expected):
    assert mask_account_number(raw) == expected


@pytest.mark.parametrize("raw", ["금액 12345678", "2024-03-05", "", "대금 지급"])
def test_short_digit_runs_untouched(raw):
    assert mask_account_number(raw) == raw


def test_is_deposit_or_loan_account(ledger_config):
    keywords = ledger_config.keywords.deposit_loan_accounts
    assert is_deposit_or_loan_account("보통 예금(10300)", keywords)
    assert is_deposit_or_loan_account("단기차입금", keywords)
    assert is_deposit_or_loan_account("Bank Deposit", keywords)
    assert not is_deposit_or_loan_account("제품매출", keywords)
    assert not is_deposit_or_loan_account("", keywords)


def test_mask_records_uses_sheet_name(ledger_config):
    roles = ColumnRoleSet(date="일자", vendor="거래처", description="적요")
    records = [{"일자": "01-02", "거래처": "국민은행", "적요": "이체 123-456-789012", "차변": 10}]
    changed = mask_records(records, roles, "보통예금(10300)", ledger_config.keywords.deposit_loan_accounts)
    assert changed == 1
    assert records[0]["적요"] == "이체 123-4**-**9012"

    untouched = [{"일자": "01-02", "거래처": "국민은행", "적요": "이체 123-456-789012"}]
    assert mask_records(untouched, roles, "제품매출", ledger_config.keywords.deposit_loan_accounts) == 0
    assert untouched[0]["적요"] == "이체 123-456-789012"


def test_mask_records_prefers_row_account(ledger_config):
    roles = ColumnRoleSet(date="일자", description="적요", account="계정과목")
    records = [
        {"계정과목": "보통예금", "적요": "123-456-789012"},
        {"계정과목": "외상매출금", "적요": "123-456-789012"},
    ]
    mask_records(records, roles, "전체원장", ledger_config.keywords.deposit_loan_accounts)
    assert records[0]["적요"] == "123-4**-**9012"
    assert records[1]["적요"] == "123-456-789012"
