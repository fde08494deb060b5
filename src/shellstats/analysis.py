"""End-to-end abalone analysis.

Stages, all drawing from one random generator seeded by the config:

1. Correlations: for each variable pair, with and without outliers, and for
   each method: estimate, jackknife SE, bootstrap SE, bootstrap-t interval
2. Parametric bootstrap tests of logit coefficients of the infant indicator
3. Backward stepwise selection on cross-validated R²
4. Case and model-based bootstrap intervals for the selected intercept
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from tabulate import tabulate

from .config import AnalysisConfig
from .correlation import correlation_statistic
from .data import load_abalone, remove_outliers, validate_dataset
from .intercept import InterceptBootstrapResult, intercept_bootstrap
from .report import create_full_report, save_report
from .resampling import (
    BootstrapTResult,
    JackknifeResult,
    bootstrap_se,
    bootstrap_t_interval,
    jackknife,
)
from .selection import SelectionResult, backward_stepwise
from .significance import ParametricBootstrapResult, parametric_bootstrap_test


@dataclass
class CorrelationSummary:
    """Estimator comparison for one variable pair, subset and method."""
    pair: Tuple[str, str]
    subset: str                 # 'all' or 'no_outliers'
    method: str
    n_obs: int
    estimate: float
    jackknife: JackknifeResult
    bootstrap_se: float
    bootstrap_t: BootstrapTResult


@dataclass
class AnalysisResults:
    """Everything a report needs from one analysis run."""
    config: AnalysisConfig
    n_records: int
    n_outliers: int
    correlations: List[CorrelationSummary] = field(default_factory=list)
    tests: List[ParametricBootstrapResult] = field(default_factory=list)
    selection: Optional[SelectionResult] = None
    intercept: Optional[InterceptBootstrapResult] = None
    timing: dict = field(default_factory=dict)

    def correlation_table(self) -> pd.DataFrame:
        """One row per (pair, subset, method)."""
        rows = []
        for c in self.correlations:
            rows.append({
                "pair": f"{c.pair[0]}~{c.pair[1]}",
                "subset": c.subset,
                "method": c.method,
                "n": c.n_obs,
                "estimate": c.estimate,
                "jackknife_se": c.jackknife.se,
                "bootstrap_se": c.bootstrap_se,
                "ci_lower": c.bootstrap_t.lower,
                "ci_upper": c.bootstrap_t.upper,
                "excluded": c.bootstrap_t.n_excluded,
            })
        return pd.DataFrame(rows)

    def summary(self) -> str:
        level = int(round(self.config.confidence * 100))
        lines = [
            "=" * 78,
            f"{'Abalone Resampling Analysis':^78}",
            "=" * 78,
            f"Records:          {self.n_records:,}",
            f"Outliers removed: {self.n_outliers} ({self.config.outlier_column} > {self.config.outlier_threshold})",
            f"Seed:             {self.config.seed}",
            "-" * 78,
            "Correlation estimators",
        ]
        if self.correlations:
            table = self.correlation_table()
            rows = [
                [r.pair, r.subset, r.method, f"{r.estimate:.4f}", f"{r.jackknife_se:.4f}",
                 f"{r.bootstrap_se:.4f}", f"[{r.ci_lower:.4f}, {r.ci_upper:.4f}]"]
                for r in table.itertuples()
            ]
            headers = ["pair", "subset", "method", "r", "jack se", "boot se", f"{level}% boot-t CI"]
            lines.append(tabulate(rows, headers=headers, tablefmt="simple"))
        lines.append("-" * 78)
        lines.append("Parametric bootstrap tests (logit)")
        if self.tests:
            rows = [
                [t.tested, f"{t.coefficient:.4f}", f"{t.p_value:.4f}", f"{t.wald_pvalue:.4f}",
                 f"{t.n_excluded}/{t.n_valid + t.n_excluded}"]
                for t in self.tests
            ]
            lines.append(tabulate(
                rows, headers=["predictor", "coef", "boot p", "Wald p", "excluded"], tablefmt="simple",
            ))
        if self.selection is not None:
            lines.append("-" * 78)
            lines.append(self.selection.summary())
        if self.intercept is not None:
            lines.append("-" * 78)
            lines.append(self.intercept.summary())
        lines.append("=" * 78)
        return "\n".join(lines)


def _compare_correlations(
    data: pd.DataFrame,
    subset: str,
    config: AnalysisConfig,
    rng: np.random.Generator,
) -> List[CorrelationSummary]:
    summaries = []
    for pair in config.pairs:
        table = data[list(pair)].to_numpy()
        for method in config.methods:
            statistic = correlation_statistic(method)
            estimate = statistic(table)
            if config.verbose:
                print(f"  {subset:12s} {pair[0]}~{pair[1]} {method}: r={estimate:.4f}")
            summaries.append(CorrelationSummary(
                pair=tuple(pair),
                subset=subset,
                method=method,
                n_obs=len(table),
                estimate=estimate,
                jackknife=jackknife(table, statistic, estimate=estimate),
                bootstrap_se=bootstrap_se(table, statistic, config.n_boot_se, rng),
                bootstrap_t=bootstrap_t_interval(
                    table, statistic,
                    n_boot=config.n_boot_outer,
                    n_inner=config.n_boot_inner,
                    confidence=config.confidence,
                    rng=rng,
                    estimate=estimate,
                    n_jobs=config.n_jobs,
                    show_progress=config.show_progress,
                ),
            ))
    return summaries


def run_analysis(
    config: Optional[AnalysisConfig] = None,
    data: Optional[pd.DataFrame] = None,
    path: Optional[Union[str, Path]] = None,
) -> AnalysisResults:
    """Run every stage of the analysis.

    Args:
        config: Analysis settings (defaults to AnalysisConfig())
        data: Abalone table; validated and copied
        path: File to load when `data` is not given

    Returns:
        AnalysisResults. When config.log_dir is set, a JSON report is also
        written there.
    """
    config = config or AnalysisConfig()
    config.validate()
    if data is None:
        if path is None:
            raise ValueError("Provide either data or path")
        data = load_abalone(path)
    else:
        data = validate_dataset(data)

    rng = np.random.default_rng(config.seed)
    filtered = remove_outliers(data, config.outlier_column, config.outlier_threshold)
    results = AnalysisResults(
        config=config,
        n_records=len(data),
        n_outliers=len(data) - len(filtered),
    )
    if config.verbose:
        print(f"Loaded {len(data)} records, {results.n_outliers} outliers")

    t0 = time.time()
    results.correlations = (
        _compare_correlations(data, "all", config, rng)
        + _compare_correlations(filtered, "no_outliers", config, rng)
    )
    results.timing["correlations"] = time.time() - t0

    t0 = time.time()
    for tested in config.tested_predictors:
        result = parametric_bootstrap_test(
            data, config.outcome, config.predictors, tested,
            n_boot=config.n_boot_test, rng=rng,
            n_jobs=config.n_jobs, show_progress=config.show_progress,
        )
        if config.verbose:
            print(f"  test {tested}: p={result.p_value:.4f} (Wald {result.wald_pvalue:.4f})")
        results.tests.append(result)
    results.timing["tests"] = time.time() - t0

    t0 = time.time()
    results.selection = backward_stepwise(
        data, config.outcome, config.predictors,
        family=config.selection_family,
        n_folds=config.n_folds,
        rng=rng,
        tolerance=config.stepwise_tolerance,
        metric=config.r2_metric,
    )
    results.timing["selection"] = time.time() - t0
    if config.verbose:
        print(f"  selected: {results.selection.formula} (CV R²={results.selection.r2:.4f})")

    t0 = time.time()
    results.intercept = intercept_bootstrap(
        data, config.outcome, results.selection.predictors,
        full_predictors=config.predictors,
        n_boot=config.n_boot_intercept,
        confidence=config.confidence,
        rng=rng,
        n_jobs=config.n_jobs,
        show_progress=config.show_progress,
    )
    results.timing["intercept"] = time.time() - t0

    if config.log_dir:
        report_path = save_report(create_full_report(results), config.log_dir)
        if config.verbose:
            print(f"Report written to {report_path}")

    return results
