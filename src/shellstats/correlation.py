"""Pearson and Spearman correlation estimators.

Spearman correlation is the Pearson correlation of the average ranks, so
ties are handled exactly as in the usual textbook definition.
"""

from typing import Callable, Tuple

import numpy as np
import pandas as pd
from scipy.stats import rankdata

from ._typing import Float64Array, Table
from .exceptions import DegenerateStatisticError

METHODS = ("pearson", "spearman")


def _as_vectors(x, y) -> Tuple[Float64Array, Float64Array]:
    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()
    if x.shape[0] != y.shape[0]:
        raise ValueError(f"x and y have different lengths: {x.shape[0]} vs {y.shape[0]}")
    if x.shape[0] < 2:
        raise ValueError(f"Need at least 2 observations, got {x.shape[0]}")
    if not (np.isfinite(x).all() and np.isfinite(y).all()):
        raise ValueError("x and y must be finite")
    return x, y


def pearson(x, y) -> float:
    """Product-moment correlation of two equal-length sequences.

    Raises:
        DegenerateStatisticError: if either sequence is constant.
    """
    x, y = _as_vectors(x, y)
    if np.ptp(x) == 0.0 or np.ptp(y) == 0.0:
        raise DegenerateStatisticError("Correlation undefined for a constant sequence")
    dx = x - x.mean()
    dy = y - y.mean()
    r = np.dot(dx, dy) / np.sqrt(np.dot(dx, dx) * np.dot(dy, dy))
    return float(np.clip(r, -1.0, 1.0))


def spearman(x, y) -> float:
    """Rank correlation: Pearson correlation of average ranks."""
    x, y = _as_vectors(x, y)
    return pearson(rankdata(x, method="average"), rankdata(y, method="average"))


def correlation(x, y, method: str = "pearson") -> float:
    """Correlation of x and y by `method` ('pearson' or 'spearman')."""
    if method == "pearson":
        return pearson(x, y)
    if method == "spearman":
        return spearman(x, y)
    raise ValueError(f"Unknown method: {method}. Available: {list(METHODS)}")


def correlation_statistic(
    method: str = "pearson",
    columns: Tuple = (0, 1),
) -> Callable[[Table], float]:
    """Build a statistic computing the correlation between two columns.

    Args:
        method: 'pearson' or 'spearman'
        columns: Positions (arrays) or labels (DataFrames) of the two columns

    Returns:
        Callable mapping a table to the correlation of its two columns,
        suitable for the jackknife and bootstrap primitives.
    """
    if method not in METHODS:
        raise ValueError(f"Unknown method: {method}. Available: {list(METHODS)}")
    first, second = columns

    def statistic(data: Table) -> float:
        if isinstance(data, pd.DataFrame):
            return correlation(data[first].to_numpy(), data[second].to_numpy(), method)
        return correlation(data[:, first], data[:, second], method)

    statistic.__name__ = f"{method}_correlation"
    return statistic
