from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from numbers import Real
from typing import Any

"""Date normalization for ledger cells.

Ledger exports deliver dates in three shapes: native date cells, short
``MM-DD`` / ``MM/DD`` strings without a year, and raw spreadsheet serial
numbers. The checks run in that order; a serial is never tried on a value
that is already a date or on a string.
"""

__all__ = [
    "EXCEL_EPOCH",
    "normalize_date",
    "to_excel_serial",
]

# Conventional spreadsheet day 0 (accounts for the 1900 leap-year bug).
EXCEL_EPOCH = datetime(1899, 12, 30)
SERIAL_MIN = 1
SERIAL_MAX = 50000

_SHORT_DATE = re.compile(r"^(?P<month>\d{1,2})[-/](?P<day>\d{1,2})$")


def normalize_date(value: Any, *, today: date | None = None) -> date | None:
    """Convert a raw cell into a calendar date, or None when unparseable.

    Args:
        value: raw cell value
        today: reference date whose year completes ``MM-DD`` strings
            (defaults to the current system date)
    """
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        match = _SHORT_DATE.match(value.strip())
        if match is None:
            return None
        year = (today or date.today()).year
        try:
            return date(year, int(match.group("month")), int(match.group("day")))
        except ValueError:
            # e.g. "02-30"
            return None

    if isinstance(value, Real) and not isinstance(value, bool):
        serial = float(value)
        if not SERIAL_MIN < serial < SERIAL_MAX:
            return None
        try:
            return (EXCEL_EPOCH + timedelta(days=serial)).date()
        except (OverflowError, ValueError):
            return None

    return None


def to_excel_serial(d: date) -> int:
    """Inverse of the serial branch of normalize_date (whole days only)."""
    if isinstance(d, datetime):
        d = d.date()
    return (d - EXCEL_EPOCH.date()).days
