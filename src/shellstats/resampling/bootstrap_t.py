"""Studentized (bootstrap-t) confidence intervals.

For b = 1...B:
    - Resample the data, compute θ*_b
    - Estimate se*_b by a nested bootstrap of the resample (B' replicates)
    - t_b = (θ*_b - θ̂) / se*_b
Sort t, estimate se(θ̂) by a bootstrap of the original data, then

    CI = [θ̂ + se · t_(α/2), θ̂ + se · t_(1-α/2)]

The α/2 quantile of t is paired with the lower bound directly (the
quantiles are not swapped). The bounds are ordered afterwards so the
result always has lower <= upper.

Outer iterations whose θ*_b is degenerate or whose nested SE is zero,
non-finite or not computable are excluded and counted, so the sorted t
sample never contains NaN or Inf.
"""

import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .._typing import Float64Array, SeedLike, Statistic, Table
from ..exceptions import DegenerateStatisticError
from ._common import (
    EXCLUSION_WARNING_RATE,
    as_generator,
    check_confidence,
    check_n_boot,
    order_statistic,
    run_replicates,
    take_rows,
)
from .bootstrap import bootstrap_replicates, bootstrap_se


@dataclass
class BootstrapTResult:
    """Bootstrap-t confidence interval for a scalar statistic."""
    estimate: float
    se: float
    lower: float
    upper: float
    t_values: Float64Array  # sorted studentized replicates
    n_excluded: int
    confidence: float = 0.95

    @property
    def interval(self) -> Tuple[float, float]:
        return (self.lower, self.upper)

    @property
    def n_valid(self) -> int:
        return int(self.t_values.shape[0])

    @property
    def exclusion_rate(self) -> float:
        total = self.n_valid + self.n_excluded
        return self.n_excluded / total if total else 0.0

    def __repr__(self) -> str:
        level = int(round(self.confidence * 100))
        return (
            f"<BootstrapTResult: estimate={self.estimate:.4f}, se={self.se:.4f}, "
            f"{level}% CI=[{self.lower:.4f}, {self.upper:.4f}], excluded={self.n_excluded}>"
        )


def bootstrap_t_interval(
    data: Table,
    statistic: Statistic,
    n_boot: int = 10_000,
    n_inner: int = 100,
    confidence: float = 0.95,
    rng: SeedLike = None,
    estimate: Optional[float] = None,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> BootstrapTResult:
    """Bootstrap-t interval for `statistic` on `data`.

    Args:
        data: Table whose rows are records
        statistic: Callable mapping a table to a float
        n_boot: Outer resamples B (also used for the SE of θ̂)
        n_inner: Nested resamples B' per outer resample
        confidence: Interval level, e.g. 0.95
        rng: Generator or seed
        estimate: Observed θ̂ (computed from data if None)
        n_jobs: Parallel workers for the outer loop
        show_progress: Show a progress bar for the outer loop

    Returns:
        BootstrapTResult with ordered bounds and the sorted t sample.
    """
    check_n_boot(n_boot)
    check_n_boot(n_inner, "n_inner")
    check_confidence(confidence)
    rng = as_generator(rng)

    if estimate is None:
        estimate = float(statistic(data))
    n = len(data)

    def replicate(gen):
        resample = take_rows(data, gen.choice(n, n, replace=True))
        theta_b = statistic(resample)
        se_b = bootstrap_replicates(resample, statistic, n_inner, gen).se
        if not np.isfinite(se_b) or se_b <= 0.0:
            raise DegenerateStatisticError("Zero nested bootstrap standard error")
        return (theta_b - estimate) / se_b

    t_set = run_replicates(
        replicate, n_boot, rng,
        n_jobs=n_jobs, show_progress=show_progress, desc="Bootstrap-t",
    )
    if t_set.n_valid == 0:
        raise DegenerateStatisticError(
            f"All {n_boot} bootstrap-t iterations were degenerate"
        )
    if t_set.exclusion_rate > EXCLUSION_WARNING_RATE:
        warnings.warn(
            f"{t_set.n_excluded} of {n_boot} bootstrap-t iterations excluded "
            f"({100 * t_set.exclusion_rate:.1f}%) because of degenerate resamples.",
            UserWarning,
        )

    t_sorted = t_set.sorted()
    se = bootstrap_se(data, statistic, n_boot, rng)

    alpha = 1.0 - confidence
    lower = estimate + se * order_statistic(t_sorted, alpha / 2)
    upper = estimate + se * order_statistic(t_sorted, 1 - alpha / 2)
    if lower > upper:
        lower, upper = upper, lower

    return BootstrapTResult(
        estimate=estimate,
        se=se,
        lower=float(lower),
        upper=float(upper),
        t_values=t_sorted,
        n_excluded=t_set.n_excluded,
        confidence=confidence,
    )
