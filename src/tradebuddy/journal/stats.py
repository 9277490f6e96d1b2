"""Shared numeric helpers for the aggregators.

All helpers are total: empty inputs and zero denominators return None
(or 0.0 where documented) instead of NaN, Infinity or an exception.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

import numpy as np


def mean(values: Iterable[float]) -> float | None:
    """Arithmetic mean using exact summation; None for no values."""
    vals = list(values)
    if not vals:
        return None
    return math.fsum(vals) / len(vals)


def mean_or_zero(values: Iterable[float]) -> float:
    result = mean(values)
    return 0.0 if result is None else result


def safe_divide(numerator: float, denominator: float) -> float | None:
    if denominator == 0:
        return None
    return numerator / denominator


def percent(part: int | float, whole: int | float) -> float:
    """``part / whole * 100`` clamped to [0, 100]; 0.0 when whole is 0."""
    if whole == 0:
        return 0.0
    return clamp_percent(part / whole * 100.0)


def clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, value))


def pct_change(baseline: float | None, current: float | None) -> float | None:
    """Signed percentage change from ``baseline`` to ``current``."""
    if baseline is None or current is None or baseline == 0:
        return None
    return (current - baseline) / baseline * 100.0


def std_dev(values: Sequence[float]) -> float | None:
    """Population standard deviation; None below two values."""
    if len(values) < 2:
        return None
    return float(np.std(np.asarray(values, dtype=float)))


def max_drawdown(increments: Sequence[float]) -> float:
    """Largest peak-to-trough decline of the cumulative sum of ``increments``.

    The peak starts at the first cumulative value, so a leading loss is
    not a drawdown.  Expressed in the units of ``increments`` (currency
    or R).
    """
    if len(increments) == 0:
        return 0.0
    curve = np.cumsum(np.asarray(increments, dtype=float))
    running_max = np.maximum.accumulate(curve)
    return float(np.max(running_max - curve))


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Gross profit over gross loss magnitude.

    With no losses the raw gross profit is reported (unbounded edge);
    with neither profit nor loss the factor is 0.
    """
    loss = abs(gross_loss)
    if loss > 0:
        return gross_profit / loss
    if gross_profit > 0:
        return gross_profit
    return 0.0


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float | None:
    """Pearson correlation of paired samples.

    None below two pairs, for unequal lengths, or when either side has
    zero variance.
    """
    if len(xs) != len(ys) or len(xs) < 2:
        return None
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return None
    r = float(np.corrcoef(x, y)[0, 1])
    if not math.isfinite(r):
        return None
    return max(-1.0, min(1.0, r))
