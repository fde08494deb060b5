"""Nonparametric bootstrap replicates and standard error.

1. For b = 1...B:
   - Resample the records with replacement
   - Evaluate the statistic on the resample
2. SE = std(θ*₁, ..., θ*_B) with ddof=1
"""

from typing import Optional

from .._typing import SeedLike, Statistic, Table
from ._common import (
    ReplicateSet,
    as_generator,
    check_n_boot,
    run_replicates,
    take_rows,
)


def bootstrap_replicates(
    data: Table,
    statistic: Statistic,
    n_boot: int = 1000,
    rng: SeedLike = None,
    n_jobs: int = 1,
    show_progress: bool = False,
    desc: Optional[str] = None,
) -> ReplicateSet:
    """Statistic evaluated on `n_boot` case resamples of `data`.

    Degenerate resamples (e.g. a constant column) are excluded and counted
    in ReplicateSet.n_excluded.
    """
    check_n_boot(n_boot)
    n = len(data)
    if n < 1:
        raise ValueError("Cannot bootstrap an empty table")

    def replicate(gen):
        idx = gen.choice(n, n, replace=True)
        return statistic(take_rows(data, idx))

    return run_replicates(
        replicate, n_boot, as_generator(rng),
        n_jobs=n_jobs, show_progress=show_progress, desc=desc,
    )


def bootstrap_se(
    data: Table,
    statistic: Statistic,
    n_boot: int = 1000,
    rng: SeedLike = None,
) -> float:
    """Bootstrap standard error of `statistic` on `data`.

    Raises:
        DegenerateStatisticError: fewer than 2 valid replicates.
    """
    return bootstrap_replicates(data, statistic, n_boot, rng).se
