"""Loading and filtering of the abalone measurement table.

The input is a delimited text table with a header row. Whitespace is the
default delimiter; files ending in ``.csv`` are read as comma separated.
The ``rings`` column is not used by the analysis and is dropped.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from .config import CONTINUOUS_COLUMNS
from .exceptions import DataLoadError

REQUIRED_COLUMNS = CONTINUOUS_COLUMNS + ["infant"]
DROPPED_COLUMNS = ["rings"]


def load_abalone(
    path: Union[str, Path],
    sep: Optional[str] = None,
) -> pd.DataFrame:
    """Read the abalone table and return the 8 analysis columns.

    Args:
        path: Location of the table file.
        sep: Column delimiter. Defaults to ',' for .csv files and
            runs of whitespace otherwise.

    Returns:
        DataFrame with columns REQUIRED_COLUMNS (float64, infant as 0/1).

    Raises:
        DataLoadError: file missing or unreadable, or schema violated.
    """
    path = Path(path)
    if not path.is_file():
        raise DataLoadError(f"Data file not found: {path}")

    if sep is None:
        sep = "," if path.suffix.lower() == ".csv" else r"\s+"

    try:
        raw = pd.read_csv(path, sep=sep)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Could not parse {path}: {e}") from e

    raw.columns = [str(c).strip().strip('"').lower() for c in raw.columns]
    return validate_dataset(raw.drop(columns=DROPPED_COLUMNS, errors="ignore"))


def validate_dataset(data: pd.DataFrame) -> pd.DataFrame:
    """Check the schema and return a clean float64 copy.

    Extra columns are dropped and the index is reset. The input frame is
    never modified.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in data.columns]
    if missing:
        raise DataLoadError(f"Missing required columns: {missing}")
    if len(data) < 2:
        raise DataLoadError(f"Need at least 2 records, got {len(data)}")

    try:
        clean = data[REQUIRED_COLUMNS].astype(np.float64)
    except (TypeError, ValueError) as e:
        raise DataLoadError(f"Non-numeric values in measurement columns: {e}") from e

    if not np.isfinite(clean.to_numpy()).all():
        bad = clean.columns[~np.isfinite(clean.to_numpy()).all(axis=0)].tolist()
        raise DataLoadError(f"Missing or non-finite values in columns: {bad}")

    if not clean["infant"].isin([0.0, 1.0]).all():
        raise DataLoadError("Column 'infant' must be binary (0/1)")

    return clean.reset_index(drop=True)


def remove_outliers(
    data: pd.DataFrame,
    column: str,
    threshold: float,
) -> pd.DataFrame:
    """Return a new frame without records whose `column` exceeds `threshold`."""
    if column not in data.columns:
        raise DataLoadError(f"Unknown column: {column}")
    kept = data.loc[data[column] <= threshold]
    return kept.reset_index(drop=True)
