"""Data generating processes with known ground truth.

Used to check the resampling procedures against known parameters:
- CorrelatedNormalDGP: bivariate normal with correlation ρ
- LinearDGP: y = Xβ + ε, optionally with pure-noise predictors
- LogitDGP: y ~ Bernoulli(expit(β₀ + Xβ))
- AbaloneDGP: synthetic table with the abalone schema and a few
  gross height outliers
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy.special import expit

from .config import CONTINUOUS_COLUMNS


@dataclass
class DGPResult:
    """Container for generated regression data."""
    data: pd.DataFrame
    outcome: str
    predictors: List[str]
    coefficients: np.ndarray   # true slopes, aligned with predictors
    intercept: float


# =============================================================================
# Base Class
# =============================================================================

class BaseDGP(ABC):
    """Abstract base for DGPs."""
    name: str = "base"

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

    def reset_rng(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.seed = seed
        self.rng = np.random.default_rng(self.seed)

    @abstractmethod
    def generate(self, n: int):
        pass


# =============================================================================
# DGP Implementations
# =============================================================================

class CorrelatedNormalDGP(BaseDGP):
    """(x, y) ~ N(0, [[1, ρ], [ρ, 1]]); generate() returns an (n, 2) array."""
    name = "correlated_normal"

    def __init__(self, rho: float = 0.5, seed: int = 42):
        if not -1.0 < rho < 1.0:
            raise ValueError(f"rho must be in (-1, 1), got {rho}")
        super().__init__(seed)
        self.rho = rho

    def generate(self, n: int) -> np.ndarray:
        cov = np.array([[1.0, self.rho], [self.rho, 1.0]])
        return self.rng.multivariate_normal(np.zeros(2), cov, size=n)


class LinearDGP(BaseDGP):
    """y = β₀ + Xβ + ε, ε ~ N(0, σ²), plus `n_noise` predictors with β = 0."""
    name = "linear"

    def __init__(
        self,
        coefficients: Sequence[float] = (2.0, -1.0),
        intercept: float = 0.5,
        sigma: float = 0.5,
        n_noise: int = 1,
        seed: int = 42,
    ):
        super().__init__(seed)
        self.coefficients = np.asarray(coefficients, dtype=np.float64)
        self.intercept = intercept
        self.sigma = sigma
        self.n_noise = n_noise

    def generate(self, n: int) -> DGPResult:
        p = len(self.coefficients)
        X = self.rng.normal(size=(n, p + self.n_noise))
        beta = np.concatenate([self.coefficients, np.zeros(self.n_noise)])
        y = self.intercept + X @ beta + self.rng.normal(0, self.sigma, n)

        names = [f"x{i + 1}" for i in range(p)] + [f"noise{i + 1}" for i in range(self.n_noise)]
        data = pd.DataFrame(X, columns=names)
        data["y"] = y
        return DGPResult(data, "y", names, beta, self.intercept)


class LogitDGP(BaseDGP):
    """y ~ Bernoulli(expit(β₀ + Xβ)) with standard normal X."""
    name = "logit"

    def __init__(
        self,
        coefficients: Sequence[float] = (1.0, -0.5, 0.0),
        intercept: float = -0.25,
        seed: int = 42,
    ):
        super().__init__(seed)
        self.coefficients = np.asarray(coefficients, dtype=np.float64)
        self.intercept = intercept

    def generate(self, n: int) -> DGPResult:
        p = len(self.coefficients)
        X = self.rng.normal(size=(n, p))
        prob = expit(self.intercept + X @ self.coefficients)
        y = self.rng.binomial(1, prob).astype(np.float64)

        names = [f"x{i + 1}" for i in range(p)]
        data = pd.DataFrame(X, columns=names)
        data["y"] = y
        return DGPResult(data, "y", names, self.coefficients.copy(), self.intercept)


class AbaloneDGP(BaseDGP):
    """Synthetic table with the abalone schema.

    Measurements grow allometrically with length; the infant indicator is
    more likely for small shells. The first `n_outliers` records get gross
    height values (0.515, 1.13, ...), mimicking data-entry errors.
    """
    name = "abalone"

    OUTLIER_HEIGHTS = (0.515, 1.13)

    def __init__(self, n_outliers: int = 2, seed: int = 42):
        super().__init__(seed)
        self.n_outliers = n_outliers

    def generate(self, n: int) -> pd.DataFrame:
        rng = self.rng

        def jitter(scale):
            return 1.0 + rng.normal(0, scale, n)

        length = np.clip(rng.normal(0.52, 0.12, n), 0.08, 0.82)
        diameter = np.clip(0.8 * length - 0.01 + rng.normal(0, 0.015, n), 0.05, None)
        height = np.clip(0.36 * diameter + 0.005 + rng.normal(0, 0.012, n), 0.01, None)
        whole = np.clip(5.5 * length ** 3 * jitter(0.08), 0.002, None)
        shucked = np.clip(0.43 * whole * jitter(0.1), 0.001, None)
        viscera = np.clip(0.22 * whole * jitter(0.1), 0.0005, None)
        shell = np.clip(0.29 * whole * jitter(0.1), 0.0015, None)
        infant = rng.binomial(1, expit(6.0 - 14.0 * length)).astype(np.float64)
        rings = np.clip(np.round(1 + 20 * shell + rng.normal(0, 2, n)), 1, 29).astype(int)

        for i in range(min(self.n_outliers, n)):
            height[i] = self.OUTLIER_HEIGHTS[i % len(self.OUTLIER_HEIGHTS)]

        columns = dict(zip(
            CONTINUOUS_COLUMNS,
            [length, diameter, height, whole, shucked, viscera, shell],
        ))
        data = pd.DataFrame(columns)
        data["infant"] = infant
        data["rings"] = rings
        return data


# =============================================================================
# Factory
# =============================================================================

DGPS = {
    "correlated_normal": CorrelatedNormalDGP,
    "linear": LinearDGP,
    "logit": LogitDGP,
    "abalone": AbaloneDGP,
}


def get_dgp(name: str, **kwargs) -> BaseDGP:
    """Factory function for DGPs."""
    if name not in DGPS:
        raise ValueError(f"Unknown DGP: {name}. Available: {list(DGPS.keys())}")
    return DGPS[name](**kwargs)
