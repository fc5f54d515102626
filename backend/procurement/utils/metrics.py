from __future__ import annotations
"""Guarded arithmetic for report figures.

Zero denominators give 0 instead of raising or producing NaN/inf; genuine zero
values stay zero rather than being replaced by a fallback.
"""
from typing import Iterable, List, Sequence


def safe_div(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def percentage(part: float, whole: float, ndigits: int = 2) -> float:
    return round(safe_div(part, whole) * 100, ndigits)


def safe_mean(values: Iterable[float]) -> float:
    values = list(values)
    return safe_div(sum(values), len(values))


def growth_series(amounts: Sequence[float], ndigits: int = 2) -> List[float]:
    """Percent change between consecutive buckets.

    >>> growth_series([100, 150, 0, 50])
    [0.0, 50.0, -100.0, 0.0]
    """
    out: List[float] = []
    for idx, current in enumerate(amounts):
        if idx == 0:
            out.append(0.0)
            continue
        previous = amounts[idx - 1]
        out.append(round(safe_div(current - previous, previous) * 100, ndigits))
    return out


def money(value: float) -> float:
    return round(float(value or 0.0), 2)


__all__ = ['safe_div', 'percentage', 'safe_mean', 'growth_series', 'money']
