from __future__ import annotations

from datetime import date, datetime

import pytest

from ledger_analyzer.models.ledger import AccountCategory, ColumnRoleSet, SheetExtraction, Side
from ledger_analyzer.models.processing_result import SheetAnalysis
from ledger_analyzer.services.aggregator import (
    aggregate,
    aggregate_by_category,
    estimate_profit_loss,
    sales_vs_sga_monthly,
    vendor_key,
)
from ledger_analyzer.services.amounts import parse_amount
from ledger_analyzer.services.classifier import AccountClassifier
from ledger_analyzer.services.header_locator import locate_header
from ledger_analyzer.services.role_resolver import resolve_roles
from ledger_analyzer.services.row_extractor import extract_records

ROLES = ColumnRoleSet(date="일자", debit="차변", credit="대변", vendor="거래처", description="적요")


def _rec(d, debit=0, credit=0, vendor="", memo=""):
    return {"일자": d, "적요": memo, "거래처": vendor, "차변": debit, "대변": credit}


def _sheet(name: str, category: AccountCategory, records: list[dict]) -> SheetAnalysis:
    return SheetAnalysis(
        sheet_name=name,
        category=category,
        extraction=SheetExtraction(columns=list(records[0]) if records else [], records=records),
        roles=ROLES,
        monthly=aggregate(records, ROLES),
    )


def test_sales_ledger_scenario(ledger_config, sales_grid):
    header = locate_header(sales_grid, ledger_config.keywords)
    ext = extract_records(sales_grid, header, ledger_config.keywords)
    roles = resolve_roles(ext.columns, ext.records, ledger_config.keywords)
    monthly = aggregate(ext.records, roles)
    assert list(monthly) == ["2024-03"]
    assert monthly["2024-03"].credit_sum == 1_000_000
    assert monthly["2024-03"].debit_sum == 0
    assert monthly["2024-03"].count == 1


def test_aggregate_conserves_totals():
    records = [
        _rec(date(2024, 1, 3), debit="1,000"),
        _rec(date(2024, 1, 20), debit=250, credit=10),
        _rec(date(2024, 2, 1), credit="3,000"),
        _rec("미정", debit=999),  # no resolvable date: skipped
        _rec(45352, debit=5),  # serial for 2024-03-01
    ]
    buckets = aggregate(records, ROLES)
    assert list(buckets) == ["2024-01", "2024-02", "2024-03"]
    dated = [r for r in records if r["일자"] != "미정"]
    assert sum(b.debit_sum for b in buckets.values()) == sum(parse_amount(r["차변"]) for r in dated)
    assert sum(b.credit_sum for b in buckets.values()) == sum(parse_amount(r["대변"]) for r in dated)
    assert sum(b.count for b in buckets.values()) == len(dated)


def test_aggregate_without_date_role():
    roles = ColumnRoleSet(debit="차변")
    assert aggregate([_rec(date(2024, 1, 1), debit=1)], roles) == {}


def test_aggregate_missing_amount_role_contributes_zero():
    roles = ColumnRoleSet(date="일자", debit="차변")
    buckets = aggregate([_rec(date(2024, 1, 1), debit=5, credit=7)], roles)
    assert buckets["2024-01"].debit_sum == 5
    assert buckets["2024-01"].credit_sum == 0


def test_aggregate_by_vendor():
    records = [
        _rec(datetime(2024, 1, 3), debit=100, vendor=" 대성물류 "),
        _rec(datetime(2024, 2, 3), debit=50, vendor="대성물류"),
        _rec(datetime(2024, 2, 4), debit=70, vendor=""),
        _rec(datetime(2024, 2, 5), debit=30, vendor="미래산업"),
    ]
    buckets = aggregate(records, ROLES, key_fn=vendor_key(ROLES))
    assert list(buckets) == ["대성물류", "미래산업"]
    assert buckets["대성물류"].debit_sum == 150
    assert buckets["대성물류"].count == 2


def test_aggregate_by_category_uses_one_side():
    sales = _sheet("제품매출", AccountCategory.SALES, [
        _rec(date(2024, 3, 1), credit=1000),
        _rec(date(2024, 3, 9), debit=50),  # return, ignored for sales
    ])
    expense = _sheet("여비교통비(판)", AccountCategory.EXPENSE, [_rec(date(2024, 3, 2), debit=200, credit=20)])
    other = _sheet("보통예금", AccountCategory.UNCLASSIFIED, [_rec(date(2024, 3, 2), debit=999)])
    totals = aggregate_by_category([sales, expense, other])
    assert totals == {"2024-03": {AccountCategory.SALES: 1000, AccountCategory.EXPENSE: 200}}


def test_aggregate_by_category_custom_side_map():
    sales = _sheet("제품매출", AccountCategory.SALES, [_rec(date(2024, 3, 1), debit=7, credit=1000)])
    totals = aggregate_by_category([sales], {AccountCategory.SALES: Side.DEBIT})
    assert totals["2024-03"][AccountCategory.SALES] == 7


def test_sales_vs_sga_monthly(ledger_config):
    classifier = AccountClassifier(ledger_config.classifier)
    sheets = [
        _sheet("제품매출 (41110)", AccountCategory.SALES, [_rec(date(2024, 3, 1), credit=1000)]),
        _sheet("여비교통비(판)(82100)", AccountCategory.EXPENSE, [_rec(date(2024, 3, 2), debit=200)]),
        _sheet("운반비(판)(82400)", AccountCategory.EXPENSE, [_rec(date(2024, 3, 3), debit=50)]),
        _sheet("접대비(판)(81300)", AccountCategory.EXPENSE, [_rec(date(2024, 4, 3), debit=10)]),
    ]
    rows = sales_vs_sga_monthly(sheets, classifier)
    assert rows[0] == {"month": "2024-03", "sales": 1000, "sga": 250, "logistics": 50, "ratio": 25.0}
    assert rows[1]["month"] == "2024-04"
    assert rows[1]["ratio"] == 0.0


def test_estimate_profit_loss():
    sheets = [
        _sheet("제품매출", AccountCategory.SALES, [_rec(date(2024, 1, 1), credit=1000), _rec("미정", credit=500)]),
        _sheet("상품매출원가", AccountCategory.COST_OF_GOODS, [_rec(date(2024, 1, 1), debit=400)]),
        _sheet("급여(판)", AccountCategory.EXPENSE, [_rec(date(2024, 1, 1), debit=250)]),
        _sheet("외상매출금", AccountCategory.RECEIVABLE, [_rec(date(2024, 1, 1), debit=9999)]),
    ]
    pl = estimate_profit_loss(sheets)
    assert pl.revenue == {"제품매출": 1500}
    assert pl.total_cost_of_goods == 400
    assert pl.total_expenses == 250
    assert pl.gross_profit == 1100
    assert pl.operating_profit == pytest.approx(850)
