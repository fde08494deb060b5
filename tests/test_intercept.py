"""Tests for the case and model-based intercept bootstraps."""

import numpy as np
import pytest

from shellstats import (
    case_resampling_intercepts,
    fit_model,
    intercept_bootstrap,
    model_based_intercepts,
    ModelSpec,
)


class TestCaseResampling:
    """Test suite for case-resampled intercepts."""

    def test_ols_centered_on_truth(self, linear_dgp):
        reps = case_resampling_intercepts(
            linear_dgp.data, "y", linear_dgp.predictors, family="ols", n_boot=200, rng=0,
        )
        assert reps.n_valid == 200
        assert np.mean(reps.values) == pytest.approx(linear_dgp.intercept, abs=0.1)

    def test_reproducible(self, logit_dgp):
        a = case_resampling_intercepts(logit_dgp.data, "y", ["x1"], n_boot=30, rng=6)
        b = case_resampling_intercepts(logit_dgp.data, "y", ["x1"], n_boot=30, rng=6)
        np.testing.assert_array_equal(a.values, b.values)


class TestModelBased:
    """Test suite for model-based intercepts."""

    def test_se_close_to_wald(self, logit_dgp):
        predictors = ["x1", "x2"]
        reps = model_based_intercepts(
            logit_dgp.data, "y", predictors, predictors, n_boot=300, rng=1,
        )
        model = fit_model(logit_dgp.data, ModelSpec("y", tuple(predictors)))
        assert reps.se == pytest.approx(model.std_errors[0], rel=0.3)

    def test_counts_add_up(self, logit_dgp):
        reps = model_based_intercepts(
            logit_dgp.data, "y", ["x1"], logit_dgp.predictors, n_boot=40, rng=2,
        )
        assert reps.n_attempted == 40


class TestInterceptBootstrap:
    """Test suite for intercept_bootstrap."""

    def test_intervals(self, logit_dgp):
        result = intercept_bootstrap(
            logit_dgp.data, "y", ["x1", "x2"], full_predictors=logit_dgp.predictors,
            n_boot=100, rng=3,
        )
        assert result.formula == "y ~ x1 + x2"
        for iv in (result.case, result.model_based):
            assert iv.lower <= iv.upper
            assert iv.se > 0
            assert iv.n_valid + iv.n_excluded == 100
        assert result.case.lower <= result.estimate <= result.case.upper

    def test_defaults_to_selected_model(self, logit_dgp):
        result = intercept_bootstrap(logit_dgp.data, "y", ["x1"], n_boot=30, rng=0)
        assert result.model_replicates.n_attempted == 30

    def test_reproducible(self, logit_dgp):
        a = intercept_bootstrap(logit_dgp.data, "y", ["x1"], n_boot=30, rng=9)
        b = intercept_bootstrap(logit_dgp.data, "y", ["x1"], n_boot=30, rng=9)
        assert a.case.interval == b.case.interval
        assert a.model_based.interval == b.model_based.interval

    def test_summary(self, abalone_data):
        result = intercept_bootstrap(abalone_data, "infant", ["length"], n_boot=30, rng=0)
        text = result.summary()
        assert "model-based" in text
        assert "infant ~ length" in text


class TestFailedRefits:
    """Separated resamples are excluded from both schemes with a warning."""

    def test_both_schemes_warn(self, near_separable):
        with pytest.warns(UserWarning) as record:
            result = intercept_bootstrap(
                near_separable, "y", ["x1"], full_predictors=["x1", "x2"], n_boot=200, rng=1,
            )
        messages = [str(w.message) for w in record]
        assert any("case resampling refits failed" in m for m in messages)
        assert any("model-based refits failed" in m for m in messages)

        for reps in (result.case_replicates, result.model_replicates):
            assert reps.n_excluded > 0
            assert reps.n_attempted == 200
            assert np.isfinite(reps.values).all()
        assert result.case.n_excluded == result.case_replicates.n_excluded
        assert result.case.lower <= result.case.upper

    def test_no_warning_when_well_conditioned(self, logit_dgp, recwarn):
        intercept_bootstrap(logit_dgp.data, "y", ["x1"], n_boot=30, rng=0)
        assert not [w for w in recwarn if "refits failed" in str(w.message)]
