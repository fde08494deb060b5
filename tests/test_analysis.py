"""End-to-end tests for the analysis driver and its reports."""

import json

import pandas as pd
import pytest

from shellstats import AnalysisConfig, run_analysis
from shellstats.dgp import get_dgp
from shellstats.report import create_full_report, format_human_readable, save_report


def small_config(**overrides):
    """Config with replicate counts shrunk for testing."""
    settings = dict(
        seed=7,
        n_boot_se=30,
        n_boot_outer=30,
        n_boot_inner=10,
        n_boot_test=30,
        n_folds=3,
        n_boot_intercept=30,
        predictors=["length", "diameter", "whole", "shell"],
        tested_predictors=["length", "shell"],
    )
    settings.update(overrides)
    return AnalysisConfig(**settings)


@pytest.fixture(scope="module")
def shell_table():
    return get_dgp("abalone", n_outliers=2, seed=3).generate(250)


@pytest.fixture(scope="module")
def results(shell_table):
    return run_analysis(small_config(), data=shell_table)


class TestAnalysisConfig:
    """Test suite for AnalysisConfig validation."""

    def test_defaults_valid(self):
        config = AnalysisConfig()
        config.validate()
        assert config.outlier_threshold == 0.4
        assert config.n_boot_outer == 10_000
        assert config.n_boot_inner == 100

    @pytest.mark.parametrize("overrides, match", [
        ({"confidence": 1.0}, "confidence"),
        ({"n_boot_inner": 1}, "n_boot_inner"),
        ({"n_folds": 1}, "n_folds"),
        ({"r2_metric": "aic"}, "r2_metric"),
        ({"selection_family": "probit"}, "selection_family"),
        ({"tested_predictors": ["rings"]}, "tested predictors"),
    ])
    def test_invalid(self, overrides, match):
        with pytest.raises(ValueError, match=match):
            AnalysisConfig(**overrides).validate()

    def test_to_dict(self):
        d = AnalysisConfig(seed=1).to_dict()
        assert d["seed"] == 1
        assert d["pairs"] == [("height", "diameter")]


class TestRunAnalysis:
    """Test suite for run_analysis."""

    def test_outliers_counted(self, results, shell_table):
        assert results.n_records == len(shell_table)
        assert results.n_outliers == 2

    def test_correlation_grid(self, results):
        # one pair × two subsets × two methods
        assert len(results.correlations) == 4
        keys = {(c.subset, c.method) for c in results.correlations}
        assert keys == {
            ("all", "pearson"), ("all", "spearman"),
            ("no_outliers", "pearson"), ("no_outliers", "spearman"),
        }
        for c in results.correlations:
            assert -1.0 <= c.estimate <= 1.0
            assert c.jackknife.se >= 0.0
            assert c.bootstrap_se > 0.0
            assert c.bootstrap_t.lower <= c.bootstrap_t.upper

    def test_outliers_depress_pearson(self, results):
        """Gross heights pull Pearson down; removing them restores it."""
        by_key = {(c.subset, c.method): c.estimate for c in results.correlations}
        assert by_key[("no_outliers", "pearson")] > by_key[("all", "pearson")]

    def test_tests_and_selection(self, results):
        assert [t.tested for t in results.tests] == ["length", "shell"]
        for t in results.tests:
            assert 0.0 <= t.p_value <= 1.0
        assert results.selection is not None
        assert set(results.selection.predictors) <= {"length", "diameter", "whole", "shell"}
        assert results.intercept.formula == results.selection.formula

    def test_correlation_table(self, results):
        table = results.correlation_table()
        assert isinstance(table, pd.DataFrame)
        assert len(table) == 4
        assert {"estimate", "jackknife_se", "ci_lower", "ci_upper"} <= set(table.columns)

    def test_summary(self, results):
        text = results.summary()
        assert "Abalone Resampling Analysis" in text
        assert "Parametric bootstrap tests" in text
        assert "Backward stepwise selection" in text

    def test_timing_recorded(self, results):
        assert set(results.timing) == {"correlations", "tests", "selection", "intercept"}

    def test_reproducible_with_seed(self, shell_table):
        config = small_config(n_boot_outer=10, n_boot_test=10, n_boot_intercept=10)
        a = run_analysis(config, data=shell_table)
        b = run_analysis(config, data=shell_table)
        pd.testing.assert_frame_equal(a.correlation_table(), b.correlation_table())
        assert [t.p_value for t in a.tests] == [t.p_value for t in b.tests]
        assert a.intercept.case.interval == b.intercept.case.interval

    def test_requires_data_or_path(self):
        with pytest.raises(ValueError, match="data or path"):
            run_analysis(small_config())

    def test_loads_from_path(self, shell_table, tmp_path):
        path = tmp_path / "abalone.csv"
        shell_table.to_csv(path, index=False)
        results = run_analysis(
            small_config(n_boot_outer=10, n_boot_test=10, n_boot_intercept=10), path=path,
        )
        assert results.n_records == len(shell_table)

    def test_writes_report(self, shell_table, tmp_path):
        config = small_config(n_boot_outer=10, n_boot_test=10, n_boot_intercept=10, log_dir=str(tmp_path))
        run_analysis(config, data=shell_table)
        written = list(tmp_path.glob("analysis_*.json"))
        assert len(written) == 1
        report = json.loads(written[0].read_text())
        assert report["data"]["n_outliers"] == 2


class TestReport:
    """Test suite for JSON and text reports."""

    def test_json_sections(self, results):
        report = json.loads(create_full_report(results))
        assert set(report) >= {
            "meta", "config", "data", "correlations",
            "parametric_bootstrap_tests", "stepwise_selection", "intercept_bootstrap", "timing",
        }
        assert len(report["correlations"]) == 4
        assert report["stepwise_selection"]["formula"] == results.selection.formula
        assert report["intercept_bootstrap"]["case"]["n_valid"] == results.intercept.case.n_valid

    def test_values_are_rounded(self, results):
        report = json.loads(create_full_report(results))
        estimate = report["correlations"][0]["estimate"]
        assert estimate == round(results.correlations[0].estimate, 4)

    def test_save_report(self, results, tmp_path):
        path = save_report(create_full_report(results), str(tmp_path / "logs"))
        assert path.endswith(".json")
        assert json.loads(open(path).read())["meta"]["version"] == "1.0"

    def test_human_readable(self, results):
        text = format_human_readable(create_full_report(results))
        assert "ABALONE RESAMPLING REPORT" in text
        assert "## STEPWISE SELECTION" in text
        assert "## TIMING" in text
        assert text.rstrip().endswith("=" * 80)
