"""Machine-readable and human-readable analysis reports.

Creates JSON reports containing every estimate, interval and exclusion
count of an analysis run, plus a sectioned text rendering.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from .analysis import AnalysisResults

REPORT_VERSION = "1.0"


def _safe_float(val: Any) -> Any:
    """Convert numpy types to Python native types for JSON serialization."""
    if isinstance(val, np.integer):
        return int(val)
    if isinstance(val, np.floating):
        val = float(val)
    if isinstance(val, np.ndarray):
        return val.tolist()
    if isinstance(val, float) and not np.isfinite(val):
        return None
    if val is None or (np.isscalar(val) and pd.isna(val)):
        return None
    return val


def _round4(val: Any) -> Any:
    val = _safe_float(val)
    return round(val, 4) if isinstance(val, float) else val


def extract_correlations(results: "AnalysisResults") -> list:
    """Correlation estimator comparison, one record per pair/subset/method."""
    records = []
    for c in results.correlations:
        records.append({
            "pair": list(c.pair),
            "subset": c.subset,
            "method": c.method,
            "n_obs": c.n_obs,
            "estimate": _round4(c.estimate),
            "jackknife_se": _round4(c.jackknife.se),
            "jackknife_bias": _round4(c.jackknife.bias),
            "bootstrap_se": _round4(c.bootstrap_se),
            "bootstrap_t": {
                "lower": _round4(c.bootstrap_t.lower),
                "upper": _round4(c.bootstrap_t.upper),
                "se": _round4(c.bootstrap_t.se),
                "n_valid": c.bootstrap_t.n_valid,
                "n_excluded": c.bootstrap_t.n_excluded,
            },
        })
    return records


def extract_tests(results: "AnalysisResults") -> list:
    """Parametric bootstrap tests."""
    return [
        {
            "tested": t.tested,
            "coefficient": _round4(t.coefficient),
            "statistic": _round4(t.statistic),
            "p_value": _round4(t.p_value),
            "wald_pvalue": _round4(t.wald_pvalue),
            "n_valid": t.n_valid,
            "n_excluded": t.n_excluded,
            "exclusion_rate": _round4(t.exclusion_rate),
        }
        for t in results.tests
    ]


def extract_selection(results: "AnalysisResults") -> dict:
    """Stepwise selection path and final model."""
    sel = results.selection
    if sel is None:
        return {}
    return {
        "family": sel.family,
        "metric": sel.metric,
        "tolerance": sel.tolerance,
        "initial_predictors": sel.initial_predictors,
        "initial_r2": _round4(sel.initial_r2),
        "steps": [
            {
                "removed": step.removed,
                "r2": _round4(step.r2),
                "candidates": {k: _round4(v) for k, v in step.candidates.items()},
            }
            for step in sel.history
        ],
        "predictors": sel.predictors,
        "r2": _round4(sel.r2),
        "formula": sel.formula,
    }


def extract_intercept(results: "AnalysisResults") -> dict:
    """Intercept intervals under both resampling schemes."""
    ib = results.intercept
    if ib is None:
        return {}

    def interval(iv):
        return {
            "lower": _round4(iv.lower),
            "upper": _round4(iv.upper),
            "se": _round4(iv.se),
            "n_valid": iv.n_valid,
            "n_excluded": iv.n_excluded,
        }

    return {
        "formula": ib.formula,
        "estimate": _round4(ib.estimate),
        "case": interval(ib.case),
        "model_based": interval(ib.model_based),
    }


def create_full_report(results: "AnalysisResults") -> str:
    """Generate the JSON report of an analysis run.

    Returns:
        JSON string containing the full report
    """
    report = {
        "meta": {
            "generated": datetime.now().isoformat(),
            "version": REPORT_VERSION,
            "framework": "shellstats abalone resampling analysis",
        },
        "config": results.config.to_dict(),
        "data": {
            "n_records": results.n_records,
            "n_outliers": results.n_outliers,
        },
        "correlations": extract_correlations(results),
        "parametric_bootstrap_tests": extract_tests(results),
        "stepwise_selection": extract_selection(results),
        "intercept_bootstrap": extract_intercept(results),
        "timing": {k: _round4(v) for k, v in results.timing.items()},
    }
    return json.dumps(report, indent=2, default=str)


def save_report(report: str, output_dir: str = "logs") -> str:
    """Save report to a timestamped file.

    Args:
        report: JSON string report
        output_dir: Directory to save report

    Returns:
        Path to saved report file
    """
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = Path(output_dir) / f"analysis_{timestamp}.json"
    with open(path, "w") as f:
        f.write(report)
    return str(path)


def format_human_readable(report_json: str) -> str:
    """Format report as human-readable text with JSON sections."""
    report = json.loads(report_json)

    lines = []
    lines.append("=" * 80)
    lines.append("ABALONE RESAMPLING REPORT")
    lines.append(f"Generated: {report['meta']['generated']}")
    lines.append("=" * 80)
    lines.append("")

    sections = [
        ("CONFIGURATION", "config"),
        ("DATA", "data"),
        ("CORRELATION ESTIMATORS", "correlations"),
        ("PARAMETRIC BOOTSTRAP TESTS", "parametric_bootstrap_tests"),
        ("STEPWISE SELECTION", "stepwise_selection"),
        ("INTERCEPT BOOTSTRAP", "intercept_bootstrap"),
    ]
    for title, key in sections:
        if report.get(key):
            lines.append(f"## {title}")
            lines.append(json.dumps(report[key], indent=2))
            lines.append("")

    if report.get("timing"):
        lines.append("## TIMING")
        lines.append(json.dumps(report["timing"], indent=2))
        lines.append("")

    lines.append("=" * 80)
    lines.append("END REPORT")
    lines.append("=" * 80)

    return "\n".join(lines)
