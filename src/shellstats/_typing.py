"""Type definitions for shellstats.

This module provides type aliases using numpy.typing for clear,
consistent type annotations throughout the package.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Union

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    import pandas as pd

# Core numeric types
Float64Array = NDArray[np.float64]

# Row-indexable tables accepted by the resampling primitives
Table = Union[Float64Array, "pd.DataFrame"]

# Anything np.random.default_rng accepts
SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


class Statistic(Protocol):
    """Protocol for scalar statistics.

    Any callable mapping a table (rows are records) to a float satisfies
    this protocol. Statistics signal an undefined value by raising
    DegenerateStatisticError.
    """

    def __call__(self, data: Table) -> float:
        ...
