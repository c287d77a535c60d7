"""Rounding helpers shared by the metric calculations."""

from __future__ import annotations

import math


def round_half_up(value: float, ndigits: int = 0) -> float | int:
    """Round halves toward positive infinity (2.5 -> 3, -2.5 -> -2).

    Python's ``round`` uses banker's rounding, which would shift percentages
    such as 12.5% down to 12.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return 0 if ndigits == 0 else 0.0
    factor = 10**ndigits
    rounded = math.floor(value * factor + 0.5) / factor
    if ndigits == 0:
        return int(rounded)
    return rounded


def round1(value: float) -> float:
    return float(round_half_up(value, 1))
