#!/usr/bin/env python3
"""Synthetic general-ledger workbook generator.

Each sheet imitates an account ledger (계정별원장) export:
- Row 1: document title, Row 2: blank, Row 3: period line
- Row 4: header row (일자 / 적요 / 코드 / 거래처 / 차변 / 대변 / 잔액)
- A ``[ 전기이월 ]`` carry-forward row, then transactions
- ``[ 월 계 ]`` / ``[ 누 계 ]`` subtotal rows after every month
- The header row repeated every ``--page-rows`` rows (multi-page export)

Useful for manual runs of the analyzer and rough throughput checks.
"""
from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

HEADER = ["일  자", "적  요", "코드", "거래처", "차  변", "대  변", "잔  액"]

DEFAULT_SHEETS = [
    "제품매출 (41110)",
    "상품매출(40100)",
    "여비교통비(판)(82100)",
    "운반비(판)(82400)",
    "원재료비(제)(50100)",
    "외상매출금(10800)",
    "외상매입금(25100)",
    "보통예금(10300)",
]

VENDORS = ["(주)한빛상사", "대성물류", "미래산업", "삼일테크", "동방유통", "청솔에너지", "Acme Corp."]
MEMOS = ["제품 판매", "원재료 구입", "출장 교통비", "택배 운송", "대금 회수", "대금 지급", "이체"]


def _credit_side(sheet_name: str) -> bool:
    head = sheet_name.split("(")[0]
    return head.endswith("매출") or "매입" in head


def generate_ledger_rows(
    sheet_name: str,
    rows: int,
    year: int,
    rng: np.random.Generator,
    page_rows: int,
) -> list[list[Any]]:
    """Build the full cell grid (title rows included) for one account sheet."""
    credit_side = _credit_side(sheet_name)
    grid: list[list[Any]] = [
        ["계 정 별 원 장"] + [None] * (len(HEADER) - 1),
        [None] * len(HEADER),
        [f"기간: {year}-01-01 ~ {year}-12-31", None, None, None, None, None, sheet_name],
        list(HEADER),
    ]
    opening = float(rng.integers(0, 50) * 100_000)
    grid.append(["[ 전기이월 ]", None, None, None, None, None, opening])

    months = np.sort(rng.integers(1, 13, size=rows))
    days = rng.integers(1, 29, size=rows)
    amounts = np.round(rng.uniform(10_000, 5_000_000, size=rows), -2)

    balance = opening
    month_debit = month_credit = 0.0
    cum_debit = cum_credit = 0.0
    since_header = 0
    for i in range(rows):
        month = int(months[i])
        d = date(year, month, int(days[i]))
        amount = float(amounts[i])
        debit, credit = (0.0, amount) if credit_side else (amount, 0.0)
        balance += credit - debit if credit_side else debit - credit
        memo = str(rng.choice(MEMOS))
        if sheet_name.startswith("보통예금"):
            memo = f"{memo} 국민 {rng.integers(100, 999)}-{rng.integers(10, 99)}-{rng.integers(100000, 999999)}"
        grid.append([
            d.strftime("%m-%d") if rng.random() < 0.3 else d,
            memo,
            f"{rng.integers(100, 999)}",
            str(rng.choice(VENDORS)),
            debit or None,
            credit or None,
            balance,
        ])
        month_debit += debit
        month_credit += credit
        cum_debit += debit
        cum_credit += credit
        since_header += 1

        last_of_month = i == rows - 1 or int(months[i + 1]) != month
        if last_of_month:
            grid.append(["[ 월      계 ]", None, None, None, month_debit, month_credit, None])
            grid.append(["[ 누      계 ]", None, None, None, cum_debit, cum_credit, None])
            month_debit = month_credit = 0.0
        if page_rows and since_header >= page_rows:
            grid.append(list(HEADER))
            since_header = 0
    return grid


def create_ledger_workbook(
    output_path: Path,
    rows: int,
    sheets: list[str] | None = None,
    year: int = 2024,
    seed: int = 42,
    page_rows: int = 40,
) -> None:
    """Write one ledger workbook with ``rows`` transactions per sheet."""
    if sheets is None:
        sheets = DEFAULT_SHEETS
    rng = np.random.default_rng(seed)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet_name in sheets:
            grid = generate_ledger_rows(sheet_name, rows, year, rng, page_rows)
            # Excel sheet names are limited to 31 chars
            pd.DataFrame(grid).to_excel(writer, sheet_name=sheet_name[:31], header=False, index=False)

    print(f"Created ledger workbook: {output_path}")
    print(f"  Sheets: {len(sheets)}")
    print(f"  Transactions per sheet: {rows:,}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic general-ledger workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/ledger.xlsx
  %(prog)s data/big.xlsx --rows 20000 --seed 7
  %(prog)s data/sales.xlsx --sheets "제품매출 (41110)" "외상매출금(10800)"
        """,
    )
    parser.add_argument("output", type=Path, help="Output Excel file path")
    parser.add_argument("--rows", type=int, default=500, help="Transactions per sheet (default: 500)")
    parser.add_argument("--sheets", nargs="+", default=None, help="Account sheet names")
    parser.add_argument("--year", type=int, default=2024, help="Fiscal year (default: 2024)")
    parser.add_argument("--page-rows", type=int, default=40, help="Repeat the header every N rows (0 = never)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    try:
        create_ledger_workbook(args.output, args.rows, args.sheets, args.year, args.seed, args.page_rows)
    except OSError as e:
        print(f"Error generating workbook: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
