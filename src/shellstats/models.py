"""Linear and logistic regression fits used by the resampling procedures.

Model fitting is a pure function of (outcome vector, design matrix): every
call returns an independent FittedModel snapshot. Design matrices are built
once from a formula with formulaic, and the bootstrap loops then refit on
row subsets or simulated outcomes of the same matrix.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Sequence, Tuple

import formulaic
import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy.special import expit
from statsmodels.tools.sm_exceptions import (
    ConvergenceWarning,
    HessianInversionWarning,
    PerfectSeparationError,
    PerfectSeparationWarning,
)
from tabulate import tabulate

from ._typing import Float64Array
from .exceptions import ModelFitError

FAMILIES = ("ols", "logit")
INTERCEPT = "Intercept"

# Warnings that mean the logit estimate cannot be trusted
_FIT_FAILURE_WARNINGS = (PerfectSeparationWarning, ConvergenceWarning, HessianInversionWarning)


def _check_family(family: str) -> None:
    if family not in FAMILIES:
        raise ValueError(f"Unknown family: {family}. Available: {list(FAMILIES)}")


# =============================================================================
# Model specification
# =============================================================================

@dataclass(frozen=True)
class ModelSpec:
    """Outcome, predictors and family of a regression model."""
    outcome: str
    predictors: Tuple[str, ...]
    family: str = "logit"

    def __post_init__(self):
        _check_family(self.family)
        object.__setattr__(self, "predictors", tuple(self.predictors))
        if self.outcome in self.predictors:
            raise ValueError(f"Outcome '{self.outcome}' cannot also be a predictor")
        if len(set(self.predictors)) != len(self.predictors):
            raise ValueError(f"Duplicate predictors in {list(self.predictors)}")

    @property
    def formula(self) -> str:
        rhs = " + ".join(self.predictors) if self.predictors else "1"
        return f"{self.outcome} ~ {rhs}"

    def without(self, predictor: str) -> "ModelSpec":
        """Same model with one predictor removed."""
        if predictor not in self.predictors:
            raise ValueError(f"'{predictor}' is not a predictor of {self.formula}")
        kept = tuple(p for p in self.predictors if p != predictor)
        return ModelSpec(self.outcome, kept, self.family)

    def with_predictors(self, predictors: Sequence[str]) -> "ModelSpec":
        return ModelSpec(self.outcome, tuple(predictors), self.family)


def design_matrices(
    data: pd.DataFrame,
    spec: ModelSpec,
) -> Tuple[Float64Array, Float64Array, list[str]]:
    """Build (y, X, feature_names) for `spec` from a DataFrame.

    X carries an intercept column named 'Intercept' first.
    """
    if not isinstance(data, pd.DataFrame):
        raise ValueError("data must be a DataFrame to build a design matrix")
    missing = [c for c in (spec.outcome, *spec.predictors) if c not in data.columns]
    if missing:
        raise ValueError(f"Columns not found in data: {missing}")

    model_matrix = formulaic.model_matrix(spec.formula, data)
    y = model_matrix.lhs.to_numpy().ravel().astype(np.float64)
    X_df = model_matrix.rhs
    feature_names = [str(c) for c in X_df.columns]
    X = X_df.to_numpy().astype(np.float64)

    if INTERCEPT in feature_names and feature_names[0] != INTERCEPT:
        idx = feature_names.index(INTERCEPT)
        order = [idx] + [i for i in range(len(feature_names)) if i != idx]
        X = X[:, order]
        feature_names = [feature_names[i] for i in order]

    return y, X, feature_names


# =============================================================================
# Fitted models
# =============================================================================

@dataclass(frozen=True)
class FittedModel:
    """Immutable snapshot of a regression fit.

    Attributes
    ----------
    family : str
        'ols' or 'logit'.
    feature_names : list[str]
        Names of the design columns, 'Intercept' first.
    params : Float64Array
        Coefficient estimates (one per design column).
    std_errors : Float64Array
        Asymptotic standard errors.
    pvalues : Float64Array
        Two-sided Wald p-values.
    fitted_values : Float64Array
        In-sample fitted values (probabilities for logit).
    n_obs : int
        Number of observations.
    converged : bool
        Whether the optimizer reported convergence.
    """
    family: str
    feature_names: list[str]
    params: Float64Array
    std_errors: Float64Array
    pvalues: Float64Array
    fitted_values: Float64Array
    n_obs: int
    converged: bool = True

    def __post_init__(self):
        for arr in (self.params, self.std_errors, self.pvalues, self.fitted_values):
            arr.setflags(write=False)

    def _column(self, name: str) -> int:
        try:
            return self.feature_names.index(name)
        except ValueError:
            raise KeyError(f"No coefficient named '{name}'. Available: {self.feature_names}") from None

    def coef(self, name: str) -> float:
        """Coefficient of the design column `name`."""
        return float(self.params[self._column(name)])

    def pvalue(self, name: str) -> float:
        return float(self.pvalues[self._column(name)])

    @property
    def intercept(self) -> float:
        return self.coef(INTERCEPT)

    def predict(self, X: Float64Array) -> Float64Array:
        """Predictions for a design matrix with the same columns."""
        eta = np.asarray(X, dtype=np.float64) @ self.params
        if self.family == "logit":
            return expit(eta)
        return eta

    def summary(self) -> str:
        rows = [
            [
                name,
                f"{self.params[i]:.4f}",
                f"{self.std_errors[i]:.4f}",
                f"{self.pvalues[i]:.4f}" if np.isfinite(self.pvalues[i]) else "-",
            ]
            for i, name in enumerate(self.feature_names)
        ]
        title = "Logistic regression" if self.family == "logit" else "Linear regression"
        lines = [
            "=" * 60,
            f"{title}  (n={self.n_obs:,}, converged={self.converged})",
            "=" * 60,
            tabulate(rows, headers=["", "coef", "std err", "P>|z|"], tablefmt="simple"),
            "=" * 60,
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FittedModel(family='{self.family}', n_obs={self.n_obs}, "
            f"n_params={len(self.params)}, converged={self.converged})"
        )


def fit_ols(
    y: Float64Array,
    X: Float64Array,
    feature_names: Sequence[str],
) -> FittedModel:
    """OLS regression of y on the columns of X."""
    try:
        result = sm.OLS(y, X).fit()
    except (np.linalg.LinAlgError, ValueError) as e:
        raise ModelFitError(f"OLS fit failed: {e}") from e

    return FittedModel(
        family="ols",
        feature_names=list(feature_names),
        params=np.asarray(result.params, dtype=np.float64),
        std_errors=np.asarray(result.bse, dtype=np.float64),
        pvalues=np.asarray(result.pvalues, dtype=np.float64),
        fitted_values=np.asarray(result.fittedvalues, dtype=np.float64),
        n_obs=int(result.nobs),
        converged=True,
    )


def fit_logit(
    y: Float64Array,
    X: Float64Array,
    feature_names: Sequence[str],
    maxiter: int = 100,
) -> FittedModel:
    """Logit regression of a binary y on the columns of X.

    Raises:
        ModelFitError: perfect separation, failed convergence, or a
            singular Hessian.
    """
    with warnings.catch_warnings():
        for category in _FIT_FAILURE_WARNINGS:
            warnings.simplefilter("error", category)
        try:
            result = sm.Logit(y, X).fit(disp=0, maxiter=maxiter)
        except (PerfectSeparationError, np.linalg.LinAlgError, *_FIT_FAILURE_WARNINGS) as e:
            raise ModelFitError(f"Logit fit failed: {e}") from e

    converged = bool(result.mle_retvals.get("converged", True))
    if not converged:
        raise ModelFitError(f"Logit fit did not converge in {maxiter} iterations")

    params = np.asarray(result.params, dtype=np.float64)
    if not np.isfinite(params).all():
        raise ModelFitError("Logit fit produced non-finite coefficients")

    with np.errstate(invalid="ignore"):
        std_errors = np.asarray(result.bse, dtype=np.float64)
        pvalues = np.asarray(result.pvalues, dtype=np.float64)

    return FittedModel(
        family="logit",
        feature_names=list(feature_names),
        params=params,
        std_errors=std_errors,
        pvalues=pvalues,
        fitted_values=np.asarray(result.predict(), dtype=np.float64),
        n_obs=int(result.nobs),
        converged=converged,
    )


def fit_arrays(
    family: str,
    y: Float64Array,
    X: Float64Array,
    feature_names: Sequence[str],
) -> FittedModel:
    """Dispatch to fit_ols or fit_logit."""
    _check_family(family)
    if family == "logit":
        return fit_logit(y, X, feature_names)
    return fit_ols(y, X, feature_names)


def fit_model(data: pd.DataFrame, spec: ModelSpec) -> FittedModel:
    """Fit `spec` on a DataFrame."""
    y, X, names = design_matrices(data, spec)
    return fit_arrays(spec.family, y, X, names)
