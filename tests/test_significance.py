"""Tests for the parametric bootstrap coefficient test."""

import numpy as np
import pytest

from shellstats import parametric_bootstrap_test


class TestParametricBootstrap:
    """Test suite for parametric_bootstrap_test."""

    def test_strong_effect_small_pvalue(self, logit_dgp):
        result = parametric_bootstrap_test(
            logit_dgp.data, "y", logit_dgp.predictors, "x1", n_boot=100, rng=1,
        )
        assert result.p_value < 0.05
        assert result.coefficient > 0
        assert result.statistic == pytest.approx(result.coefficient ** 2)

    def test_pvalue_in_unit_interval(self, logit_dgp):
        result = parametric_bootstrap_test(
            logit_dgp.data, "y", logit_dgp.predictors, "x3", n_boot=100, rng=2,
        )
        assert 0.0 <= result.p_value <= 1.0
        assert 0.0 <= result.wald_pvalue <= 1.0

    def test_counts_add_up(self, logit_dgp):
        result = parametric_bootstrap_test(
            logit_dgp.data, "y", logit_dgp.predictors, "x2", n_boot=60, rng=3,
        )
        assert result.n_valid + result.n_excluded == 60
        assert np.all(result.null_statistics >= 0)
        assert 0.0 <= result.exclusion_rate <= 1.0

    def test_reproducible_with_seed(self, logit_dgp):
        args = (logit_dgp.data, "y", logit_dgp.predictors, "x2")
        a = parametric_bootstrap_test(*args, n_boot=40, rng=5)
        b = parametric_bootstrap_test(*args, n_boot=40, rng=5)
        np.testing.assert_array_equal(a.null_statistics, b.null_statistics)
        assert a.p_value == b.p_value

    def test_observed_override(self, logit_dgp):
        """Every squared coefficient is at least zero, so T_obs = 0 gives p = 1."""
        result = parametric_bootstrap_test(
            logit_dgp.data, "y", logit_dgp.predictors, "x3", n_boot=30, rng=0, observed=0.0,
        )
        assert result.statistic == 0.0
        assert result.p_value == 1.0

    def test_single_predictor_model(self, logit_dgp):
        """Reduced model is intercept-only."""
        result = parametric_bootstrap_test(logit_dgp.data, "y", ["x1"], "x1", n_boot=30, rng=0)
        assert result.n_valid > 0

    def test_tested_not_in_predictors(self, logit_dgp):
        with pytest.raises(ValueError, match="not in"):
            parametric_bootstrap_test(logit_dgp.data, "y", ["x1", "x2"], "x3", n_boot=10)

    def test_invalid_n_boot(self, logit_dgp):
        with pytest.raises(ValueError, match="n_boot"):
            parametric_bootstrap_test(logit_dgp.data, "y", ["x1"], "x1", n_boot=0)

    def test_abalone_schema(self, abalone_data):
        result = parametric_bootstrap_test(
            abalone_data, "infant", ["length", "whole", "shell"], "length", n_boot=40, rng=8,
        )
        assert "length" in repr(result)
        assert result.n_valid + result.n_excluded == 40


class TestFailedRefits:
    """Separated or non-convergent simulated refits are excluded, not fatal."""

    def test_excluded_and_counted(self, near_separable):
        with pytest.warns(UserWarning, match="failed"):
            result = parametric_bootstrap_test(
                near_separable, "y", ["x1", "x2"], "x2", n_boot=200, rng=1,
            )
        assert result.n_excluded > 0
        assert result.n_valid + result.n_excluded == 200
        assert result.exclusion_rate > 0.10
        assert np.isfinite(result.null_statistics).all()
        assert 0.0 <= result.p_value <= 1.0
