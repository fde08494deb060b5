"""Analysis configuration."""

from dataclasses import asdict, dataclass, field
from typing import List, Optional, Tuple

CONTINUOUS_COLUMNS = [
    "length",
    "diameter",
    "height",
    "whole",
    "shucked",
    "viscera",
    "shell",
]


@dataclass
class AnalysisConfig:
    """Configuration for a full analysis run.

    Replicate counts default to the sizes used for reporting; tests and
    exploratory runs should shrink them.
    """
    seed: int = 42
    # Correlation comparison
    pairs: List[Tuple[str, str]] = field(default_factory=lambda: [("height", "diameter")])
    methods: List[str] = field(default_factory=lambda: ["pearson", "spearman"])
    outlier_column: str = "height"
    outlier_threshold: float = 0.4     # records with value > threshold are outliers
    n_boot_se: int = 1000              # bootstrap SE replicates
    n_boot_outer: int = 10_000         # bootstrap-t outer replicates
    n_boot_inner: int = 100            # bootstrap-t nested SE replicates
    confidence: float = 0.95
    # Logistic regression of the infant indicator
    outcome: str = "infant"
    predictors: List[str] = field(default_factory=lambda: list(CONTINUOUS_COLUMNS))
    tested_predictors: List[str] = field(default_factory=lambda: ["length", "shell"])
    n_boot_test: int = 1000
    # Stepwise selection
    selection_family: str = "logit"
    n_folds: int = 10
    stepwise_tolerance: float = 1e-4
    r2_metric: str = "sse"             # 'sse' or 'correlation'
    # Intercept bootstrap
    n_boot_intercept: int = 1000
    # Execution
    n_jobs: int = 1
    show_progress: bool = False
    verbose: bool = False
    log_dir: Optional[str] = None

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if not 0.0 < self.confidence < 1.0:
            raise ValueError(f"confidence must be in (0, 1), got {self.confidence}")
        for name in ("n_boot_se", "n_boot_outer", "n_boot_inner", "n_boot_test", "n_boot_intercept"):
            if getattr(self, name) < 2:
                raise ValueError(f"{name} must be at least 2, got {getattr(self, name)}")
        if self.n_folds < 2:
            raise ValueError(f"n_folds must be at least 2, got {self.n_folds}")
        if self.stepwise_tolerance < 0:
            raise ValueError("stepwise_tolerance must be non-negative")
        if self.r2_metric not in ("sse", "correlation"):
            raise ValueError(f"r2_metric must be 'sse' or 'correlation', got '{self.r2_metric}'")
        if self.selection_family not in ("ols", "logit"):
            raise ValueError(f"selection_family must be 'ols' or 'logit', got '{self.selection_family}'")
        unknown = [p for p in self.tested_predictors if p not in self.predictors]
        if unknown:
            raise ValueError(f"tested predictors {unknown} are not in the predictor set")

    def to_dict(self) -> dict:
        return asdict(self)
