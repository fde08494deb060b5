"""Leave-one-out (jackknife) standard error and bias.

    SE_jack   = √((n-1)/n · Σᵢ (θ̂₍ᵢ₎ - θ̄)²)
    bias_jack = (n-1) · (θ̄ - θ̂)

where θ̂₍ᵢ₎ is the statistic with record i removed and θ̄ their mean.
Every leave-one-out subset is recomputed, so the cost is n statistic
evaluations.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .._typing import Float64Array, Statistic, Table
from ._common import take_rows


@dataclass
class JackknifeResult:
    """Jackknife estimates for a scalar statistic."""
    estimate: float
    se: float
    bias: float
    values: Float64Array  # leave-one-out estimates, in record order

    def __repr__(self) -> str:
        return (
            f"<JackknifeResult: estimate={self.estimate:.4f}, se={self.se:.4f}, "
            f"bias={self.bias:.4f}, n={len(self.values)}>"
        )


def jackknife_values(data: Table, statistic: Statistic) -> Float64Array:
    """Statistic evaluated on each leave-one-out subset.

    A DegenerateStatisticError on any subset propagates to the caller.
    """
    n = len(data)
    if n < 2:
        raise ValueError(f"Jackknife needs at least 2 records, got {n}")

    all_idx = np.arange(n)
    values = np.empty(n)
    for i in range(n):
        values[i] = statistic(take_rows(data, np.delete(all_idx, i)))
    return values


def _se_from_values(values: Float64Array) -> float:
    n = values.shape[0]
    return float(np.sqrt((n - 1) / n * np.sum((values - values.mean()) ** 2)))


def jackknife_se(data: Table, statistic: Statistic) -> float:
    """Jackknife standard error of `statistic` on `data`."""
    return _se_from_values(jackknife_values(data, statistic))


def jackknife(
    data: Table,
    statistic: Statistic,
    estimate: Optional[float] = None,
) -> JackknifeResult:
    """Jackknife standard error and bias.

    Args:
        data: Table whose rows are records
        statistic: Callable mapping a table to a float
        estimate: Statistic on the full data (computed if None)
    """
    if estimate is None:
        estimate = float(statistic(data))
    values = jackknife_values(data, statistic)
    n = values.shape[0]
    return JackknifeResult(
        estimate=estimate,
        se=_se_from_values(values),
        bias=float((n - 1) * (values.mean() - estimate)),
        values=values,
    )
