from __future__ import annotations

import math
import re
from typing import Any

"""Amount parsing: strips thousands separators, never raises."""

__all__ = ["parse_amount"]

_STRIP = re.compile(r"[,\s]")


def parse_amount(value: Any) -> float:
    """Parse a debit/credit cell into a float; anything unparseable is 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if math.isnan(value) or math.isinf(value) else float(value)
    if isinstance(value, str):
        cleaned = _STRIP.sub("", value)
        if cleaned in ("", "-", "0"):
            return 0.0
        try:
            parsed = float(cleaned)
        except ValueError:
            return 0.0
        return 0.0 if math.isnan(parsed) or math.isinf(parsed) else parsed
    return 0.0
