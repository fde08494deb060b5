"""Backward stepwise predictor selection on cross-validated R².

Stopping rule: the best single removal is accepted when its
cross-validated R² is at least ``current R² - tolerance``. Ties between
candidate removals go to the predictor listed first in the current model.
The fold assignment is drawn once and shared by every candidate model, so
the procedure is deterministic for a fixed seed.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold
from tabulate import tabulate

from ._typing import Float64Array, SeedLike
from .correlation import pearson
from .exceptions import DegenerateStatisticError
from .models import INTERCEPT, ModelSpec, design_matrices, fit_arrays
from .resampling._common import as_generator

METRICS = ("sse", "correlation")

Folds = List[Tuple[np.ndarray, np.ndarray]]


def make_folds(n: int, n_folds: int = 10, rng: SeedLike = None) -> Folds:
    """Shuffled k-fold (train, test) index pairs for n records."""
    if n_folds < 2:
        raise ValueError(f"n_folds must be at least 2, got {n_folds}")
    if n_folds > n:
        raise ValueError(f"n_folds ({n_folds}) exceeds the number of records ({n})")
    rng = as_generator(rng)
    kfold = KFold(n_splits=n_folds, shuffle=True, random_state=int(rng.integers(2**31 - 1)))
    return list(kfold.split(np.arange(n)))


def r2_score(y: Float64Array, y_pred: Float64Array, metric: str = "sse") -> float:
    """Out-of-sample R² of predictions.

    'sse': 1 - Σ(y - ŷ)² / Σ(y - ȳ)²
    'correlation': corr(y, ŷ)²

    Raises:
        DegenerateStatisticError: if y is constant.
    """
    if metric == "sse":
        ss_res = np.sum((y - y_pred) ** 2)
        ss_tot = np.sum((y - np.mean(y)) ** 2)
        if ss_tot < 1e-12:
            raise DegenerateStatisticError("R² undefined for a constant outcome")
        return float(1.0 - ss_res / ss_tot)
    if metric == "correlation":
        return pearson(y, y_pred) ** 2
    raise ValueError(f"Unknown metric: {metric}. Available: {list(METRICS)}")


def _cv_r2_arrays(
    family: str,
    y: Float64Array,
    X: Float64Array,
    names: List[str],
    folds: Folds,
    metric: str,
) -> float:
    y_oof = np.empty_like(y)
    for train_idx, test_idx in folds:
        model = fit_arrays(family, y[train_idx], X[train_idx], names)
        y_oof[test_idx] = model.predict(X[test_idx])
    return r2_score(y, y_oof, metric)


def cross_validated_r2(
    data: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    family: str = "logit",
    n_folds: int = 10,
    rng: SeedLike = None,
    folds: Optional[Folds] = None,
    metric: str = "sse",
) -> float:
    """k-fold cross-validated R² of `outcome ~ predictors`.

    Out-of-fold predictions are pooled over the folds before the metric is
    computed. An empty predictor list is the intercept-only model.
    """
    spec = ModelSpec(outcome, tuple(predictors), family=family)
    y, X, names = design_matrices(data, spec)
    if folds is None:
        folds = make_folds(len(y), n_folds, rng)
    return _cv_r2_arrays(family, y, X, names, folds, metric)


# =============================================================================
# Backward elimination
# =============================================================================

@dataclass
class SelectionStep:
    """One accepted removal."""
    removed: str
    r2: float
    candidates: Dict[str, float]


@dataclass
class SelectionResult:
    """Outcome of backward stepwise selection."""
    outcome: str
    family: str
    predictors: List[str]
    r2: float
    initial_predictors: List[str]
    initial_r2: float
    history: List[SelectionStep] = field(default_factory=list)
    tolerance: float = 1e-4
    metric: str = "sse"

    @property
    def removed(self) -> List[str]:
        return [step.removed for step in self.history]

    @property
    def formula(self) -> str:
        return ModelSpec(self.outcome, tuple(self.predictors), self.family).formula

    def summary(self) -> str:
        rows = [["(full model)", "-", f"{self.initial_r2:.4f}"]]
        for i, step in enumerate(self.history, start=1):
            rows.append([f"step {i}", step.removed, f"{step.r2:.4f}"])
        lines = [
            "Backward stepwise selection",
            f"  Family:      {self.family}",
            f"  CV metric:   {self.metric} (tolerance {self.tolerance:g})",
            tabulate(rows, headers=["", "removed", "CV R²"], tablefmt="simple"),
            f"  Selected:    {self.formula}",
            f"  CV R²:       {self.r2:.4f}",
        ]
        return "\n".join(lines)


def backward_stepwise(
    data: pd.DataFrame,
    outcome: str,
    predictors: Sequence[str],
    family: str = "logit",
    n_folds: int = 10,
    rng: SeedLike = None,
    tolerance: float = 1e-4,
    metric: str = "sse",
) -> SelectionResult:
    """Greedy backward elimination on cross-validated R².

    Args:
        data: DataFrame holding outcome and predictor columns
        outcome: Response column
        predictors: Candidate predictors (starting model)
        family: 'logit' or 'ols'
        n_folds: Number of cross-validation folds
        rng: Generator or seed for the fold assignment
        tolerance: Largest R² loss accepted for a removal
        metric: 'sse' or 'correlation' (see r2_score)

    Returns:
        SelectionResult with the final predictors, their CV R², and the
        removal history.
    """
    if not predictors:
        raise ValueError("Need at least one candidate predictor")
    if tolerance < 0:
        raise ValueError("tolerance must be non-negative")
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}. Available: {list(METRICS)}")

    full_spec = ModelSpec(outcome, tuple(predictors), family=family)
    y, X_full, full_names = design_matrices(data, full_spec)
    folds = make_folds(len(y), n_folds, rng)
    column_of = {name: i for i, name in enumerate(full_names)}

    def score(subset: Sequence[str]) -> float:
        cols = [column_of[INTERCEPT]] + [column_of[p] for p in subset]
        names = [INTERCEPT] + list(subset)
        return _cv_r2_arrays(family, y, X_full[:, cols], names, folds, metric)

    current = list(full_spec.predictors)
    current_r2 = score(current)
    result = SelectionResult(
        outcome=outcome,
        family=family,
        predictors=current,
        r2=current_r2,
        initial_predictors=list(current),
        initial_r2=current_r2,
        tolerance=tolerance,
        metric=metric,
    )

    while len(current) > 1:
        candidates = {p: score([q for q in current if q != p]) for p in current}
        best, best_r2 = None, -np.inf
        for p in current:
            if candidates[p] > best_r2:
                best, best_r2 = p, candidates[p]

        if best_r2 < current_r2 - tolerance:
            break

        current = [q for q in current if q != best]
        current_r2 = best_r2
        result.history.append(SelectionStep(removed=best, r2=best_r2, candidates=candidates))

    result.predictors = current
    result.r2 = current_r2
    return result
