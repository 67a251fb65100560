# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from ledger_analyzer.config.loader import default_config
from ledger_analyzer.logging.init import reset_logging
from ledger_analyzer.models.config_models import AnalyzerConfig


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
header_scan_rows: 20
lookahead_rows: 5
mask_account_numbers: true
keep_na_strings: ["NA"]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ledger.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def ledger_config() -> AnalyzerConfig:
    return default_config("./data")


@pytest.fixture()
def fresh_logging():
    reset_logging()
    yield
    reset_logging()


def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    """Write raw grids (no pandas header / index) to a real .xlsx file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    def _make(name: str, sheets: dict[str, list[list[Any]]]) -> Path:
        return write_workbook(temp_workdir / "data" / name, sheets)
    return _make


def ledger_sheet(rows: list[list[Any]], *, title: str = "계정별원장") -> list[list[Any]]:
    """Typical account-ledger export: title, blank line, header, then ``rows``."""
    return [
        [title, None, None, None, None, None],
        [None, None, None, None, None, None],
        ["일자", "적요", "거래처", "차변", "대변", "잔액"],
        *rows,
    ]


@pytest.fixture()
def sales_grid() -> list[list[Any]]:
    """One March sale plus monthly / cumulative subtotal rows."""
    return ledger_sheet([
        [datetime(2024, 3, 5), "제품 판매", "(주)한빛상사", 0, 1000000, 1000000],
        ["[ 월 계 ]", None, None, 0, 1000000, None],
        ["[ 누 계 ]", None, None, 0, 1000000, None],
    ])


@pytest.fixture()
def build_ledger_sheet() -> Callable[..., list[list[Any]]]:
    return ledger_sheet
