"""Resampling estimators: jackknife, bootstrap SE, bootstrap-t, percentile intervals."""

from ._common import (
    PercentileInterval,
    ReplicateSet,
    as_generator,
    order_statistic,
    percentile_interval,
    run_replicates,
)
from .bootstrap import bootstrap_replicates, bootstrap_se
from .bootstrap_t import BootstrapTResult, bootstrap_t_interval
from .jackknife import JackknifeResult, jackknife, jackknife_se, jackknife_values

__all__ = [
    "PercentileInterval",
    "ReplicateSet",
    "as_generator",
    "order_statistic",
    "percentile_interval",
    "run_replicates",
    "bootstrap_replicates",
    "bootstrap_se",
    "BootstrapTResult",
    "bootstrap_t_interval",
    "JackknifeResult",
    "jackknife",
    "jackknife_se",
    "jackknife_values",
]
