"""
shellstats: Resampling inference for abalone shell measurements.

Compares parametric and rank-based correlation estimators under outliers,
tests logistic regression coefficients by parametric bootstrap, selects
predictors by cross-validated backward elimination, and builds bootstrap
confidence intervals for a model intercept.

Key Features
------------
- Jackknife and bootstrap standard errors for any scalar statistic
- Studentized (bootstrap-t) confidence intervals with nested SEs
- Parametric bootstrap hypothesis tests for logit coefficients
- Case and model-based percentile intervals
- Explicit random generators everywhere (reproducible, parallel-safe)

Basic Usage
-----------
>>> import numpy as np
>>> from shellstats import correlation_statistic, jackknife_se, bootstrap_t_interval
>>>
>>> stat = correlation_statistic("spearman")
>>> se = jackknife_se(table, stat)
>>> ci = bootstrap_t_interval(table, stat, n_boot=2000, n_inner=50, rng=np.random.default_rng(1))
>>> print(f"r={ci.estimate:.4f}  95% CI=[{ci.lower:.4f}, {ci.upper:.4f}]")
>>>
>>> # Full analysis
>>> from shellstats import AnalysisConfig, run_analysis
>>> results = run_analysis(AnalysisConfig(seed=1), path="abalone.txt")
>>> print(results.summary())

References
----------
- Efron & Tibshirani (1993). "An Introduction to the Bootstrap"
- Davison & Hinkley (1997). "Bootstrap Methods and their Application"
"""

__version__ = "0.1.0"

# Configuration and errors
from .config import AnalysisConfig
from .exceptions import (
    DataLoadError,
    DegenerateStatisticError,
    ModelFitError,
    ShellStatsError,
)

# Data
from .data import REQUIRED_COLUMNS, load_abalone, remove_outliers, validate_dataset

# Estimators
from .correlation import correlation, correlation_statistic, pearson, spearman
from .resampling import (
    BootstrapTResult,
    JackknifeResult,
    PercentileInterval,
    ReplicateSet,
    bootstrap_replicates,
    bootstrap_se,
    bootstrap_t_interval,
    jackknife,
    jackknife_se,
    jackknife_values,
    percentile_interval,
)

# Models and procedures
from .models import FittedModel, ModelSpec, fit_logit, fit_model, fit_ols
from .significance import ParametricBootstrapResult, parametric_bootstrap_test
from .selection import SelectionResult, backward_stepwise, cross_validated_r2
from .intercept import (
    InterceptBootstrapResult,
    case_resampling_intercepts,
    intercept_bootstrap,
    model_based_intercepts,
)

# Driver
from .analysis import AnalysisResults, run_analysis

__all__ = [
    # Version
    "__version__",
    # Configuration and errors
    "AnalysisConfig",
    "ShellStatsError",
    "DataLoadError",
    "DegenerateStatisticError",
    "ModelFitError",
    # Data
    "REQUIRED_COLUMNS",
    "load_abalone",
    "remove_outliers",
    "validate_dataset",
    # Estimators
    "correlation",
    "correlation_statistic",
    "pearson",
    "spearman",
    "BootstrapTResult",
    "JackknifeResult",
    "PercentileInterval",
    "ReplicateSet",
    "bootstrap_replicates",
    "bootstrap_se",
    "bootstrap_t_interval",
    "jackknife",
    "jackknife_se",
    "jackknife_values",
    "percentile_interval",
    # Models and procedures
    "FittedModel",
    "ModelSpec",
    "fit_logit",
    "fit_model",
    "fit_ols",
    "ParametricBootstrapResult",
    "parametric_bootstrap_test",
    "SelectionResult",
    "backward_stepwise",
    "cross_validated_r2",
    "InterceptBootstrapResult",
    "case_resampling_intercepts",
    "intercept_bootstrap",
    "model_based_intercepts",
    # Driver
    "AnalysisResults",
    "run_analysis",
]
