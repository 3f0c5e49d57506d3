"""
fees/numbers.py

Numeric sanitising and monetary rounding shared by every fee formula.
"""

from __future__ import annotations

import math
import sys
from typing import Any

_EPSILON = sys.float_info.epsilon


def as_number(value: Any) -> float:
    """
    Return ``value`` as a finite float, or ``0.0`` when it is missing,
    non-numeric, boolean, or non-finite.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return number


def as_flag(value: Any) -> bool:
    """Only a real ``True`` counts as set; anything else is ``False``."""
    return value is True


def round_money(value: float) -> float:
    """
    Round to 2 decimals, half away from zero, after nudging by machine epsilon.

    Equivalent to ``round((x + eps) * 100) / 100`` applied to the magnitude,
    so ``2.675`` and ``-2.675`` round symmetrically.
    """
    if not math.isfinite(value):
        return 0.0
    scaled = math.floor((abs(value) + _EPSILON) * 100 + 0.5)
    if scaled == 0:
        return 0.0
    return math.copysign(scaled / 100, value)


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return min(upper, max(lower, value))
