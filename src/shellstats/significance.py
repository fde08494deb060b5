"""Parametric bootstrap test for a logistic regression coefficient.

H₀: β_tested = 0, tested without relying on asymptotic normality.

1. Fit the full model, T_obs = β̂²_tested
2. Fit the reduced model (tested predictor dropped) → p̂ᵢ under H₀
3. For b = 1...B:
   - Simulate yᵢ* ~ Bernoulli(p̂ᵢ)
   - Refit the full model on (y*, original predictors)
   - T*_b = (β̂*_tested)²
4. p-value = mean(T*_b ≥ T_obs) over the refits that succeeded

Refits that fail (perfect separation, non-convergence) are excluded and
their count is reported on the result.
"""

import warnings
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from ._typing import Float64Array, SeedLike
from .exceptions import DegenerateStatisticError
from .models import ModelSpec, design_matrices, fit_logit
from .resampling._common import (
    EXCLUSION_WARNING_RATE,
    as_generator,
    check_n_boot,
    run_replicates,
)


@dataclass
class ParametricBootstrapResult:
    """Result of a parametric bootstrap test of one coefficient."""
    tested: str
    coefficient: float          # β̂ from the full model
    statistic: float            # T_obs
    p_value: float
    null_statistics: Float64Array
    n_excluded: int
    wald_pvalue: float          # asymptotic p-value of the full fit, for comparison

    @property
    def n_valid(self) -> int:
        return int(self.null_statistics.shape[0])

    @property
    def exclusion_rate(self) -> float:
        total = self.n_valid + self.n_excluded
        return self.n_excluded / total if total else 0.0

    def __repr__(self) -> str:
        return (
            f"<ParametricBootstrapResult: {self.tested} coef={self.coefficient:.4f}, "
            f"T={self.statistic:.4f}, p={self.p_value:.4f}, "
            f"Wald p={self.wald_pvalue:.4f}, excluded={self.n_excluded}/{self.n_valid + self.n_excluded}>"
        )


def parametric_bootstrap_test(
    data: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    tested: str,
    n_boot: int = 1000,
    rng: SeedLike = None,
    observed: Optional[float] = None,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> ParametricBootstrapResult:
    """Test whether the logit coefficient of `tested` differs from zero.

    Args:
        data: DataFrame holding outcome and predictor columns
        outcome: Binary outcome column
        predictors: Full predictor set (must contain `tested`)
        tested: Predictor whose coefficient is tested
        n_boot: Number of simulated outcomes B
        rng: Generator or seed
        observed: Observed statistic T_obs; defaults to β̂²_tested of the full fit
        n_jobs: Parallel workers for the simulation loop
        show_progress: Show a progress bar

    Returns:
        ParametricBootstrapResult with the empirical p-value.

    Raises:
        ModelFitError: the full or reduced fit on the observed data failed.
        DegenerateStatisticError: every simulated refit failed.
    """
    check_n_boot(n_boot)
    rng = as_generator(rng)

    full_spec = ModelSpec(outcome, tuple(predictors), family="logit")
    if tested not in full_spec.predictors:
        raise ValueError(f"Tested predictor '{tested}' is not in {list(full_spec.predictors)}")
    reduced_spec = full_spec.without(tested)

    y, X_full, full_names = design_matrices(data, full_spec)
    _, X_reduced, reduced_names = design_matrices(data, reduced_spec)
    tested_idx = full_names.index(tested)

    full_fit = fit_logit(y, X_full, full_names)
    coefficient = float(full_fit.params[tested_idx])
    if observed is None:
        observed = coefficient ** 2

    p_null = fit_logit(y, X_reduced, reduced_names).fitted_values

    def replicate(gen):
        y_star = gen.binomial(1, p_null).astype(np.float64)
        refit = fit_logit(y_star, X_full, full_names)
        return float(refit.params[tested_idx]) ** 2

    null_set = run_replicates(
        replicate, n_boot, rng,
        n_jobs=n_jobs, show_progress=show_progress, desc=f"Parametric bootstrap ({tested})",
    )
    if null_set.n_valid == 0:
        raise DegenerateStatisticError(
            f"All {n_boot} simulated refits failed for predictor '{tested}'"
        )
    if null_set.exclusion_rate > EXCLUSION_WARNING_RATE:
        warnings.warn(
            f"{null_set.n_excluded} of {n_boot} simulated refits failed for '{tested}' "
            f"({100 * null_set.exclusion_rate:.1f}%). The p-value uses the remaining "
            f"{null_set.n_valid} replicates.",
            UserWarning,
        )

    p_value = float(np.mean(null_set.values >= observed))

    return ParametricBootstrapResult(
        tested=tested,
        coefficient=coefficient,
        statistic=float(observed),
        p_value=p_value,
        null_statistics=null_set.values,
        n_excluded=null_set.n_excluded,
        wald_pvalue=full_fit.pvalue(tested),
    )
