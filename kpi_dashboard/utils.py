"""
Shared utilities: numeric coercion, series normalisation, group names.
"""

import logging
import math
import re
import unicodedata
from datetime import date
from typing import Any

import pandas as pd

from .config import DEFAULT_GROUP, GROUP_PREFIXES

logger = logging.getLogger(__name__)

_PREFIX_PATTERN = re.compile(
    r"^(%s)(\s+DE)?\s+" % "|".join(sorted(GROUP_PREFIXES, key=len, reverse=True))
)


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for missing or non-numeric values.

    NaN and infinities are treated as missing.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", "")
        if not val:
            return None
        if val.endswith("%"):
            val = val[:-1]
        try:
            result = float(val)
        except ValueError:
            return None
    else:
        try:
            if pd.isna(val):
                return None
            result = float(val)
        except (ValueError, TypeError):
            return None
    if not math.isfinite(result):
        return None
    return result


def value_or_zero(series: list | None, idx: int) -> float:
    """Return the numeric value at series[idx], or 0.0 for no data."""
    if not series or idx < 0 or idx >= len(series):
        return 0.0
    val = safe_float(series[idx])
    return 0.0 if val is None else val


def normalise_series(series: list | None, length: int) -> list[float | None]:
    """Return a fresh list of exactly `length` slots, coercing each to float or None.

    Anything other than a list or tuple counts as an empty series.
    """
    values = list(series)[:length] if isinstance(series, (list, tuple)) else []
    result = [safe_float(v) for v in values]
    result.extend([None] * (length - len(result)))
    return result


def round_half_up(value: float, decimals: int) -> float:
    """Round like a spreadsheet: 0.5 always moves away from zero."""
    factor = 10 ** decimals
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5 + 1e-9) / factor
    return math.copysign(rounded, value) if rounded else 0.0


def normalise_name(name: Any) -> str:
    """Matching key for indicator names: trimmed and upper-cased."""
    return str(name or "").strip().upper()


def normalise_group_name(name: Any) -> str:
    """Canonical group/area name used for roll-up grouping.

    Strips accents, collapses whitespace, upper-cases and removes a leading
    hierarchy prefix ("Direccion de Ventas" -> "VENTAS"). Empty names map
    to DEFAULT_GROUP.
    """
    s = unicodedata.normalize("NFD", str(name or ""))
    s = "".join(ch for ch in s if unicodedata.category(ch) != "Mn")
    s = re.sub(r"\s+", " ", s).strip().upper()
    s = _PREFIX_PATTERN.sub("", s).strip()
    return s or DEFAULT_GROUP


def resolve_today(today: date | None) -> date:
    """Default to the system clock only when the caller did not inject a date."""
    return date.today() if today is None else today
