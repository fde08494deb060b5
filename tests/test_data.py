"""Tests for loading and filtering the abalone table."""

import numpy as np
import pandas as pd
import pytest

from shellstats import DataLoadError, REQUIRED_COLUMNS, load_abalone, remove_outliers, validate_dataset

HEADER = "length diameter height whole shucked viscera shell rings infant"
ROWS = [
    "0.455 0.365 0.095 0.514 0.2245 0.101 0.15 15 0",
    "0.35 0.265 0.09 0.2255 0.0995 0.0485 0.07 7 0",
    "0.33 0.255 0.08 0.205 0.0895 0.0395 0.055 7 1",
    "0.425 0.3 0.095 0.3515 0.141 0.0775 0.12 8 1",
]


@pytest.fixture
def whitespace_file(tmp_path):
    path = tmp_path / "abalone.txt"
    path.write_text("\n".join([HEADER] + ROWS) + "\n")
    return path


class TestLoadAbalone:
    """Test suite for load_abalone."""

    def test_whitespace_table(self, whitespace_file):
        data = load_abalone(whitespace_file)
        assert list(data.columns) == REQUIRED_COLUMNS
        assert len(data) == 4
        assert "rings" not in data.columns
        assert data["infant"].tolist() == [0.0, 0.0, 1.0, 1.0]
        assert data.dtypes.eq(np.float64).all()

    def test_csv_table(self, tmp_path):
        path = tmp_path / "abalone.csv"
        lines = [HEADER.upper().replace(" ", ",")] + [r.replace(" ", ",") for r in ROWS]
        path.write_text("\n".join(lines) + "\n")
        data = load_abalone(path)
        assert list(data.columns) == REQUIRED_COLUMNS
        assert data["height"].iloc[0] == pytest.approx(0.095)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataLoadError, match="not found"):
            load_abalone(tmp_path / "nope.txt")

    def test_missing_column(self, tmp_path):
        path = tmp_path / "short.txt"
        path.write_text("length diameter\n0.1 0.2\n0.3 0.4\n")
        with pytest.raises(DataLoadError, match="Missing required columns"):
            load_abalone(path)

    def test_is_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            load_abalone(tmp_path / "nope.txt")


class TestValidateDataset:
    """Test suite for validate_dataset."""

    def test_non_binary_infant(self, abalone_data):
        bad = abalone_data.copy()
        bad.loc[0, "infant"] = 2.0
        with pytest.raises(DataLoadError, match="binary"):
            validate_dataset(bad)

    def test_non_finite(self, abalone_data):
        bad = abalone_data.copy()
        bad.loc[3, "shell"] = np.nan
        with pytest.raises(DataLoadError, match="shell"):
            validate_dataset(bad)

    def test_non_numeric(self, abalone_data):
        bad = abalone_data.copy().astype({"length": object})
        bad.loc[1, "length"] = "short"
        with pytest.raises(DataLoadError, match="Non-numeric"):
            validate_dataset(bad)

    def test_too_few_records(self, abalone_data):
        with pytest.raises(DataLoadError, match="at least 2"):
            validate_dataset(abalone_data.iloc[:1])

    def test_returns_copy(self, abalone_data):
        clean = validate_dataset(abalone_data)
        clean.loc[0, "length"] = -1.0
        assert abalone_data.loc[0, "length"] != -1.0
        assert "rings" not in clean.columns
        assert "rings" in abalone_data.columns


class TestRemoveOutliers:
    """Test suite for remove_outliers."""

    def test_drops_gross_heights(self, abalone_data):
        filtered = remove_outliers(abalone_data, "height", 0.4)
        assert len(filtered) == len(abalone_data) - 2
        assert filtered["height"].max() <= 0.4
        assert filtered.index.equals(pd.RangeIndex(len(filtered)))

    def test_threshold_is_inclusive(self):
        data = pd.DataFrame({"height": [0.1, 0.4, 0.41]})
        assert remove_outliers(data, "height", 0.4)["height"].tolist() == [0.1, 0.4]

    def test_input_unchanged(self, abalone_data):
        n = len(abalone_data)
        remove_outliers(abalone_data, "height", 0.4)
        assert len(abalone_data) == n

    def test_unknown_column(self, abalone_data):
        with pytest.raises(DataLoadError, match="Unknown column"):
            remove_outliers(abalone_data, "weight", 0.4)
