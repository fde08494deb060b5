"""Shared machinery for the resampling estimators.

Replicate loops, row selection, and the order-statistic convention used by
every interval in the package:

    index = floor(q * B), 0-based into the ascending sorted replicates,
    clipped to [0, B - 1], where B counts the valid replicates.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed, effective_n_jobs
from tqdm import tqdm

from .._typing import Float64Array, SeedLike, Table
from ..exceptions import DegenerateStatisticError, ModelFitError

# Per-replicate failures that are excluded instead of aborting the loop
RECOVERABLE_ERRORS = (DegenerateStatisticError, ModelFitError)

# Warn when more than this share of a replicate loop is excluded
EXCLUSION_WARNING_RATE = 0.10

# Guards floor(q * B) against q * B landing just below an integer
_INDEX_EPS = 1e-9


def as_generator(seed: SeedLike = None) -> np.random.Generator:
    """Return a Generator; an existing Generator is passed through unchanged."""
    return np.random.default_rng(seed)


def take_rows(data: Table, idx: np.ndarray) -> Table:
    """Select rows by position from an ndarray or DataFrame."""
    if isinstance(data, (pd.DataFrame, pd.Series)):
        return data.iloc[idx]
    return data[idx]


def check_n_boot(n_boot: int, name: str = "n_boot") -> None:
    if n_boot < 2:
        raise ValueError(f"{name} must be at least 2, got {n_boot}")


def check_confidence(confidence: float) -> None:
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"confidence must be in (0, 1), got {confidence}")


# =============================================================================
# Replicate containers
# =============================================================================

@dataclass
class ReplicateSet:
    """Values of the successful replicates of a resampling loop."""
    values: Float64Array
    n_excluded: int = 0

    @property
    def n_valid(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_attempted(self) -> int:
        return self.n_valid + self.n_excluded

    @property
    def exclusion_rate(self) -> float:
        if self.n_attempted == 0:
            return 0.0
        return self.n_excluded / self.n_attempted

    @property
    def se(self) -> float:
        """Sample standard deviation (ddof=1) of the valid replicates."""
        if self.n_valid < 2:
            raise DegenerateStatisticError(
                f"Need at least 2 valid replicates for a standard error, got {self.n_valid}"
            )
        return float(np.std(self.values, ddof=1))

    def sorted(self) -> Float64Array:
        return np.sort(self.values)


@dataclass
class PercentileInterval:
    """Percentile confidence interval from a replicate distribution."""
    lower: float
    upper: float
    se: float
    n_valid: int
    n_excluded: int = 0
    confidence: float = 0.95

    @property
    def interval(self) -> Tuple[float, float]:
        return (self.lower, self.upper)

    def __repr__(self) -> str:
        level = int(round(self.confidence * 100))
        return (
            f"<PercentileInterval: {level}% CI=[{self.lower:.4f}, {self.upper:.4f}], "
            f"se={self.se:.4f}, n_valid={self.n_valid}>"
        )


# =============================================================================
# Order statistics
# =============================================================================

def order_statistic(sorted_values: np.ndarray, q: float) -> float:
    """Value at probability q of an ascending sorted sample (floor convention)."""
    B = sorted_values.shape[0]
    if B == 0:
        raise DegenerateStatisticError("Order statistic of an empty sample")
    idx = int(np.floor(q * B + _INDEX_EPS))
    idx = min(max(idx, 0), B - 1)
    return float(sorted_values[idx])


def percentile_interval(
    replicates: ReplicateSet,
    confidence: float = 0.95,
) -> PercentileInterval:
    """Percentile interval [q(alpha/2), q(1 - alpha/2)] of the replicates."""
    check_confidence(confidence)
    alpha = 1.0 - confidence
    ordered = replicates.sorted()
    return PercentileInterval(
        lower=order_statistic(ordered, alpha / 2),
        upper=order_statistic(ordered, 1 - alpha / 2),
        se=replicates.se,
        n_valid=replicates.n_valid,
        n_excluded=replicates.n_excluded,
        confidence=confidence,
    )


# =============================================================================
# Replicate loops
# =============================================================================

def _run_chunk(
    replicate: Callable[[np.random.Generator], float],
    size: int,
    rng: np.random.Generator,
    show_progress: bool = False,
    desc: Optional[str] = None,
) -> Tuple[list, int]:
    values = []
    n_excluded = 0
    for _ in tqdm(range(size), desc=desc, ncols=80, disable=not show_progress):
        try:
            value = replicate(rng)
        except RECOVERABLE_ERRORS:
            n_excluded += 1
            continue
        if np.isfinite(value):
            values.append(float(value))
        else:
            n_excluded += 1
    return values, n_excluded


def run_replicates(
    replicate: Callable[[np.random.Generator], float],
    n_boot: int,
    rng: SeedLike = None,
    n_jobs: int = 1,
    show_progress: bool = False,
    desc: Optional[str] = None,
) -> ReplicateSet:
    """Evaluate `replicate(rng)` n_boot times and collect the valid values.

    Replicates raising DegenerateStatisticError or ModelFitError, or
    returning a non-finite value, are excluded and counted.

    With n_jobs != 1 the loop is split into one chunk per worker and each
    chunk draws from its own child generator spawned from `rng`, so results
    are reproducible for a fixed seed and n_jobs. Each chunk shows its own
    progress bar, labelled with its chunk number.
    """
    rng = as_generator(rng)
    n_workers = effective_n_jobs(n_jobs)

    if n_workers == 1 or n_boot < 2 * n_workers:
        values, n_excluded = _run_chunk(replicate, n_boot, rng, show_progress, desc)
        return ReplicateSet(np.asarray(values, dtype=np.float64), n_excluded)

    sizes = [len(c) for c in np.array_split(np.arange(n_boot), n_workers)]
    children = rng.spawn(n_workers)
    chunks = Parallel(n_jobs=n_workers)(
        delayed(_run_chunk)(
            replicate, size, child, show_progress,
            f"{desc or 'Replicates'} [{i + 1}/{n_workers}]",
        )
        for i, (size, child) in enumerate(zip(sizes, children))
    )
    values = [v for chunk_values, _ in chunks for v in chunk_values]
    n_excluded = sum(n for _, n in chunks)
    return ReplicateSet(np.asarray(values, dtype=np.float64), n_excluded)
