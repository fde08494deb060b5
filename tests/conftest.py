"""Pytest configuration and fixtures for shellstats tests."""

import numpy as np
import pandas as pd
import pytest

from shellstats.dgp import get_dgp


@pytest.fixture
def seed():
    """Random seed for reproducibility."""
    return 42


@pytest.fixture
def rng(seed):
    return np.random.default_rng(seed)


@pytest.fixture
def literal_sample():
    """Hand-checkable height/diameter sub-sample.

    Pearson r = 0.04725 / sqrt(0.051875 * 0.0435) ≈ 0.994668
    """
    return {
        "height": np.array([0.1, 0.15, 0.2, 0.4]),
        "diameter": np.array([0.1, 0.16, 0.22, 0.38]),
        "pearson": 0.994668,
    }


@pytest.fixture
def correlated_table(seed):
    """(200, 2) bivariate normal sample with rho = 0.6."""
    return get_dgp("correlated_normal", rho=0.6, seed=seed).generate(200)


@pytest.fixture
def linear_dgp(seed):
    """y = 0.5 + 2 x1 - x2 + eps, eps ~ N(0, 0.5²), plus one noise predictor."""
    return get_dgp(
        "linear", coefficients=(2.0, -1.0), intercept=0.5, sigma=0.5, n_noise=1, seed=seed,
    ).generate(500)


@pytest.fixture
def logit_dgp(seed):
    """y ~ Bernoulli(expit(-0.25 + x1 - 0.5 x2 + 0 x3)), n = 400."""
    return get_dgp(
        "logit", coefficients=(1.0, -0.5, 0.0), intercept=-0.25, seed=seed,
    ).generate(400)


@pytest.fixture
def abalone_data(seed):
    """Synthetic abalone-schema table with two height outliers (includes rings)."""
    return get_dgp("abalone", n_outliers=2, seed=seed).generate(300)


@pytest.fixture
def near_separable():
    """16 records split by the sign of x1 except one y = 1 record at x1 = -1.

    That record sits strictly inside the hull of the y = 0 records, so the
    observed logit fits exist, while many resamples and simulated outcomes
    are perfectly separated.
    """
    y0 = [(-2.0, 0.1), (-1.6, -0.2), (-1.2, 0.3), (-1.2, -0.3), (-0.8, 0.3), (-0.8, -0.3), (-0.4, 0.1)]
    y1 = [(-1.0, 0.0), (0.4, -0.1), (0.8, 0.3), (0.8, -0.3), (1.0, 0.0),
          (1.2, 0.3), (1.2, -0.3), (1.6, 0.2), (2.0, -0.1)]
    rows = [(x1, x2, 0.0) for x1, x2 in y0] + [(x1, x2, 1.0) for x1, x2 in y1]
    return pd.DataFrame(rows, columns=["x1", "x2", "y"])
