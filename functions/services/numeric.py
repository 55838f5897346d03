"""Numeric helpers for Costeo AI.

Coercion and rounding that never raise, so that malformed numbers coming
from the oracle or from callers are absorbed instead of failing a costing.
"""

import math
from typing import Any


def coerce_number(value: Any, min_value: float, max_value: float, fallback: float) -> float:
    """Convert a value to a float inside [min_value, max_value].

    Args:
        value: Anything (number, numeric string, None, garbage).
        min_value: Lower bound.
        max_value: Upper bound.
        fallback: Returned when the value is not a finite number.

    Returns:
        The clamped float, or fallback.
    """
    if isinstance(value, str):
        value = value.strip()
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return min(max(number, min_value), max_value)


def round_money(value: Any) -> int:
    """Round to the nearest whole currency unit (halves round up).

    Non-finite or non-numeric input maps to 0.
    """
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(math.floor(number + 0.5))


def round_pct(value: float) -> float:
    """Round a percentage to two decimals (halves round up)."""
    if not math.isfinite(value):
        return 0.0
    return math.floor(value * 100 + 0.5) / 100
