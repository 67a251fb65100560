from __future__ import annotations

import pytest

from ledger_analyzer.models.ledger import AccountCategory, ColumnRoleSet, SheetExtraction
from ledger_analyzer.models.processing_result import SheetAnalysis, WorkbookAnalysis
from ledger_analyzer.services.period_comparison import (
    compare_periods,
    find_matching_sheet,
    normalize_account_name,
)

ROLES = ColumnRoleSet(date="일자", debit="차변", credit="대변", vendor="거래처")


def _sheet(name, rows, roles=ROLES):
    # dates left blank on purpose: vendor totals do not depend on them
    records = [{"일자": "", "거래처": v, "차변": d, "대변": c} for v, d, c in rows]
    return SheetAnalysis(
        sheet_name=name,
        category=AccountCategory.SALES,
        extraction=SheetExtraction(records=records),
        roles=roles,
    )


def _workbook(*sheets):
    return WorkbookAnalysis(sheets=list(sheets))


@pytest.mark.parametrize(
    "raw,expected",
    [("1. 제품매출(매출)", "제품매출(매출)"), ("12 제품매출", "제품매출"), ("제품매출", "제품매출"), ("3.", "")],
)
def test_normalize_account_name(raw, expected):
    assert normalize_account_name(raw) == expected


def test_find_matching_sheet_prefers_exact_name():
    exact = _sheet("1. 제품매출", [])
    loose = _sheet("제품매출", [])
    previous = _workbook(loose, exact)
    assert find_matching_sheet("1. 제품매출", previous) is exact
    assert find_matching_sheet("2. 제품매출", previous) is loose
    assert find_matching_sheet("상품매출", previous) is None


def test_compare_periods_all_amounts():
    current = _workbook(_sheet("제품매출", [
        ("미래산업", 0, 1500), ("미래산업", 0, 500), ("대성물류", 0, 900), ("신규상사", 0, 300), ("", 0, 99),
    ]))
    previous = _workbook(_sheet("1. 제품매출", [
        ("미래산업", 0, 1000), ("대성물류", 0, 1000), ("폐업상사", 0, 400),
    ]))
    result = compare_periods(current, previous, "제품매출")

    assert result.previous_sheet == "1. 제품매출"
    assert result.amount_filter == "all"
    by_vendor = {v.vendor: v for v in result.vendors}
    assert set(by_vendor) == {"미래산업", "대성물류", "신규상사", "폐업상사"}

    grown = by_vendor["미래산업"]
    assert grown.current_amount == 2000
    assert grown.previous_amount == 1000
    assert grown.change == 1000
    assert grown.change_percent == 100
    assert grown.current.count == 2

    assert by_vendor["대성물류"].change_percent == pytest.approx(-10.0)
    assert by_vendor["신규상사"].change_percent == 100
    assert by_vendor["폐업상사"].change_percent == -100

    # largest absolute change first, vendor name breaks ties
    assert [v.vendor for v in result.vendors] == ["미래산업", "신규상사", "폐업상사", "대성물류"]


def test_compare_periods_debit_and_credit_filters():
    current = _workbook(_sheet("외상매출금", [("A", 100, 40)]))
    previous = _workbook(_sheet("외상매출금", [("A", 50, 0), ("B", 0, 70)]))

    debit = compare_periods(current, previous, "외상매출금", "debit")
    assert [(v.vendor, v.current_amount, v.previous_amount) for v in debit.vendors] == [("A", 100, 50)]

    credit = compare_periods(current, previous, "외상매출금", "credit")
    by_vendor = {v.vendor: v for v in credit.vendors}
    assert by_vendor["A"].current_amount == 40
    assert by_vendor["A"].previous_amount == 0
    assert by_vendor["B"].change == -70


def test_compare_periods_without_previous_sheet():
    current = _workbook(_sheet("제품매출", [("A", 0, 10)]))
    result = compare_periods(current, _workbook(), "제품매출")
    assert result.previous_sheet is None
    assert [(v.vendor, v.previous_amount, v.change_percent) for v in result.vendors] == [("A", 0, 100)]


def test_compare_periods_without_vendor_column():
    roles = ColumnRoleSet(date="일자", debit="차변", credit="대변")
    current = _workbook(_sheet("제품매출", [("A", 0, 10)], roles=roles))
    assert compare_periods(current, current, "제품매출").vendors == []


def test_compare_periods_errors():
    current = _workbook(_sheet("제품매출", []))
    with pytest.raises(KeyError):
        compare_periods(current, current, "상품매출")
    with pytest.raises(ValueError, match="amount_filter"):
        compare_periods(current, current, "제품매출", "net")
