"""Lenient numeric coercion and rounding helpers.

Records arrive from forms and model output, so numbers may be missing,
strings, or garbage. Coercion never raises: anything that is not a finite
number becomes the supplied default.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_TRUE_STRINGS = frozenset({"true", "1", "yes"})


def to_number(value: Any, default: float = 0.0) -> float:
    """Coerce *value* to a finite float, falling back to *default*."""
    if value is None:
        return default
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(number):
        return default
    return number


def to_optional_number(value: Any) -> float | None:
    """Coerce *value* to a finite float, or None when absent or non-numeric."""
    if value is None or isinstance(value, bool):
        return None
    number = to_number(value, default=math.nan)
    return None if math.isnan(number) else number


def to_flag(value: Any) -> bool:
    """Coerce *value* to a bool without raising."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero to *places* decimals."""
    try:
        quantum = Decimal(1).scaleb(-places)
        return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return value


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* to [lo, hi]."""
    return max(lo, min(hi, value))
