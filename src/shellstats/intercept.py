"""Bootstrap confidence intervals for a model intercept.

Two resampling schemes share the percentile-interval construction:

- Case resampling: resample whole records with replacement and refit the
  selected model.
- Model-based resampling: fit the full logit model once, simulate
  yᵢ* ~ Bernoulli(p̂ᵢ) with the predictors held fixed, and refit the
  selected model on the simulated outcome.

Failed refits are excluded and counted; a UserWarning is emitted when
more than 10% of either scheme fails.
"""

import warnings
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from tabulate import tabulate

from ._typing import SeedLike
from .models import ModelSpec, design_matrices, fit_arrays, fit_logit
from .resampling._common import (
    EXCLUSION_WARNING_RATE,
    PercentileInterval,
    ReplicateSet,
    as_generator,
    check_n_boot,
    percentile_interval,
    run_replicates,
)


def case_resampling_intercepts(
    data: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    family: str = "logit",
    n_boot: int = 1000,
    rng: SeedLike = None,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> ReplicateSet:
    """Intercepts of `outcome ~ predictors` refitted on case resamples."""
    check_n_boot(n_boot)
    spec = ModelSpec(outcome, tuple(predictors), family=family)
    y, X, names = design_matrices(data, spec)
    n = len(y)

    def replicate(gen):
        idx = gen.choice(n, n, replace=True)
        return fit_arrays(family, y[idx], X[idx], names).intercept

    return run_replicates(
        replicate, n_boot, as_generator(rng),
        n_jobs=n_jobs, show_progress=show_progress, desc="Case resampling",
    )


def model_based_intercepts(
    data: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    full_predictors: Sequence[str],
    n_boot: int = 1000,
    rng: SeedLike = None,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> ReplicateSet:
    """Intercepts of the selected logit model refitted on simulated outcomes.

    Outcomes are simulated from the fitted probabilities of the full model
    `outcome ~ full_predictors`.
    """
    check_n_boot(n_boot)
    full_spec = ModelSpec(outcome, tuple(full_predictors), family="logit")
    selected_spec = full_spec.with_predictors(predictors)

    y, X_full, full_names = design_matrices(data, full_spec)
    _, X_sel, sel_names = design_matrices(data, selected_spec)
    p_hat = fit_logit(y, X_full, full_names).fitted_values

    def replicate(gen):
        y_star = gen.binomial(1, p_hat).astype(np.float64)
        return fit_logit(y_star, X_sel, sel_names).intercept

    return run_replicates(
        replicate, n_boot, as_generator(rng),
        n_jobs=n_jobs, show_progress=show_progress, desc="Model-based resampling",
    )


@dataclass
class InterceptBootstrapResult:
    """Intercept estimate with case and model-based percentile intervals."""
    formula: str
    estimate: float
    case: PercentileInterval
    model_based: PercentileInterval
    case_replicates: ReplicateSet
    model_replicates: ReplicateSet

    def summary(self) -> str:
        level = int(round(self.case.confidence * 100))
        rows = [
            [name, f"{iv.lower:.4f}", f"{iv.upper:.4f}", f"{iv.se:.4f}", iv.n_valid, iv.n_excluded]
            for name, iv in (("case", self.case), ("model-based", self.model_based))
        ]
        lines = [
            f"Intercept bootstrap: {self.formula}",
            f"  Estimate:    {self.estimate:.4f}",
            tabulate(
                rows,
                headers=["scheme", f"{level}% lower", f"{level}% upper", "se", "valid", "excluded"],
                tablefmt="simple",
            ),
        ]
        return "\n".join(lines)


def intercept_bootstrap(
    data: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    full_predictors: Optional[Sequence[str]] = None,
    n_boot: int = 1000,
    confidence: float = 0.95,
    rng: SeedLike = None,
    n_jobs: int = 1,
    show_progress: bool = False,
) -> InterceptBootstrapResult:
    """Case and model-based percentile intervals for a logit intercept.

    Args:
        data: DataFrame holding outcome and predictor columns
        outcome: Binary outcome column
        predictors: Predictors of the selected model
        full_predictors: Predictors of the model that generates the
            simulated outcomes (defaults to `predictors`)
        n_boot: Replicates per scheme
        confidence: Interval level
        rng: Generator or seed, shared by both schemes in turn
        n_jobs: Parallel workers
        show_progress: Show progress bars
    """
    rng = as_generator(rng)
    if full_predictors is None:
        full_predictors = predictors

    spec = ModelSpec(outcome, tuple(predictors), family="logit")
    y, X, names = design_matrices(data, spec)
    estimate = fit_logit(y, X, names).intercept

    case_set = case_resampling_intercepts(
        data, outcome, predictors, "logit", n_boot, rng, n_jobs, show_progress,
    )
    model_set = model_based_intercepts(
        data, outcome, predictors, full_predictors, n_boot, rng, n_jobs, show_progress,
    )
    for scheme, replicates in (("case resampling", case_set), ("model-based", model_set)):
        if replicates.exclusion_rate > EXCLUSION_WARNING_RATE:
            warnings.warn(
                f"{replicates.n_excluded} of {n_boot} {scheme} refits failed "
                f"({100 * replicates.exclusion_rate:.1f}%). The interval uses the remaining "
                f"{replicates.n_valid} replicates.",
                UserWarning,
            )

    return InterceptBootstrapResult(
        formula=spec.formula,
        estimate=estimate,
        case=percentile_interval(case_set, confidence),
        model_based=percentile_interval(model_set, confidence),
        case_replicates=case_set,
        model_replicates=model_set,
    )
