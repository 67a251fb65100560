from __future__ import annotations

import math
from collections.abc import Iterable
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

import numpy as np
import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

from ..models.ledger import CellGrid

"""Workbook reader: ``.xlsx`` -> ``{sheet name: cell grid}``.

Sheets are read raw (``header=None``) since the header row position varies
per sheet and is located later. Cells come back as plain Python values:
NaN -> None, Timestamp -> datetime, numpy scalars -> int / float.
"""

__all__ = [
    "WorkbookReadError",
    "read_workbook",
    "frame_to_grid",
]


class WorkbookReadError(Exception):
    """Raised when a workbook cannot be opened or parsed."""


def _na_options(keep_na_strings: Iterable[str] | None) -> tuple[list[str] | None, bool]:
    # pandas._libs.parsers.STR_NA_VALUES holds the default NA string set
    import pandas._libs.parsers as parsers

    if keep_na_strings:
        custom_na = parsers.STR_NA_VALUES - set(keep_na_strings)
        return list(custom_na), False
    return None, True


def _to_python(value: Any) -> Any:
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    """Raw DataFrame (``header=None``) -> list of row lists with Python cell values."""
    return [[_to_python(v) for v in row] for row in df.itertuples(index=False, name=None)]


def read_workbook(
    path: Path,
    keep_na_strings: Iterable[str] | None = None,
    target_sheets: Iterable[str] | None = None,
) -> dict[str, CellGrid]:
    """Read every sheet (or ``target_sheets``) of an Excel file as a cell grid.

    Parameters
    ----------
    path: Excel file path
    keep_na_strings: strings excluded from pandas' default NaN conversion (e.g. ['NA'])
    target_sheets: restrict to these sheet names (None = all sheets)

    Raises
    ------
    WorkbookReadError: the file is missing, not a workbook, or a sheet fails to parse
    """
    na_values, keep_default_na = _na_options(keep_na_strings)
    wanted = set(target_sheets) if target_sheets is not None else None
    grids: dict[str, CellGrid] = {}
    try:
        with pd.ExcelFile(path, engine="openpyxl") as xls:
            for name in xls.sheet_names:
                if wanted is not None and str(name) not in wanted:
                    continue
                df = xls.parse(
                    name,
                    header=None,
                    keep_default_na=keep_default_na,
                    na_values=na_values,
                )
                grids[str(name)] = frame_to_grid(df)
    except (OSError, ValueError, KeyError, BadZipFile, InvalidFileException) as e:
        raise WorkbookReadError(f"cannot read workbook {path}: {e}") from e
    return grids
