"""Numeric helpers shared by the analysis modules. Pure functions, no I/O.

Degenerate inputs (zero divisors, zero-variance windows) follow IEEE-754
semantics: the result is ``inf`` or ``nan`` and is handed back to the
caller instead of raising ``ZeroDivisionError``.
"""

import math
from typing import Sequence

import numpy as np


def ieee_div(a: float, b: float) -> float:
    """Divide *a* by *b*, yielding ``±inf`` / ``nan`` on a zero divisor."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(a) / np.float64(b))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; ``nan`` for an empty sequence."""
    if not values:
        return float("nan")
    return sum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (divides by ``n``)."""
    avg = mean(values)
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def pct_change(first: float, last: float) -> float:
    """Relative change from *first* to *last*."""
    return ieee_div(last - first, first)


def least_squares_slope(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Slope of the least-squares line through ``(xs[i], ys[i])``.

    Formula::

        slope = (n·Σxy − Σx·Σy) / (n·Σx² − (Σx)²)
    """
    n = len(xs)
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_x2 = sum(x * x for x in xs)
    return ieee_div(n * sum_xy - sum_x * sum_y, n * sum_x2 - sum_x * sum_x)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation over the common prefix of *x* and *y*.

    Returns ``nan`` for empty input or a zero-variance side.
    """
    n = min(len(x), len(y))
    if n == 0:
        return float("nan")
    x = list(x[:n])
    y = list(y[:n])
    mean_x = sum(x) / n
    mean_y = sum(y) / n

    cov_xy = sum((xi - mean_x) * (yi - mean_y) for xi, yi in zip(x, y)) / n
    var_x = sum((xi - mean_x) ** 2 for xi in x) / n
    var_y = sum((yi - mean_y) ** 2 for yi in y) / n

    return ieee_div(cov_xy, math.sqrt(var_x * var_y))
