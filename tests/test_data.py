from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from featimp.data import InvalidTargetError, as_feature_table, as_target, load_dataset_csv


def test_as_feature_table_from_array_names_columns() -> None:
    frame = as_feature_table(np.arange(6).reshape(3, 2))
    assert list(frame.columns) == ["x0", "x1"]

    named = as_feature_table(np.arange(6).reshape(3, 2), feature_names=["p", "q"])
    assert list(named.columns) == ["p", "q"]


def test_as_feature_table_resets_index_and_copies() -> None:
    X = pd.DataFrame({"a": [1, 2]}, index=[10, 20])

    frame = as_feature_table(X)
    frame.loc[0, "a"] = 99

    assert list(frame.index) == [0, 1]
    assert X["a"].tolist() == [1, 2]


def test_duplicate_feature_names_rejected() -> None:
    X = pd.DataFrame([[1, 2]], columns=["a", "a"])
    with pytest.raises(ValueError, match="unique"):
        as_feature_table(X)


def test_as_target_variants() -> None:
    assert as_target([1, 2, 3]).tolist() == [1, 2, 3]
    assert as_target(pd.DataFrame({"y": [4, 5]})).tolist() == [4, 5]

    with pytest.raises(InvalidTargetError, match="exactly one column"):
        as_target(pd.DataFrame({"y": [1], "z": [2]}))
    with pytest.raises(InvalidTargetError, match="1D"):
        as_target(np.zeros((2, 2)))
    with pytest.raises(InvalidTargetError, match="3 rows"):
        as_target([1, 2], n_rows=3)


def test_load_dataset_csv(tmp_path: Path) -> None:
    path = tmp_path / "train.csv"
    pd.DataFrame({"a": [1, 2, 3], "b": [4, 5, 6], "y": [0.1, 0.2, 0.3]}).to_csv(path, index=False)

    X, y = load_dataset_csv(path, target="y")
    assert list(X.columns) == ["a", "b"]
    assert y.tolist() == [0.1, 0.2, 0.3]

    X_sub, _ = load_dataset_csv(path, target="y", features=["b"])
    assert list(X_sub.columns) == ["b"]


def test_load_dataset_csv_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_dataset_csv(tmp_path / "missing.csv", target="y")

    path = tmp_path / "train.csv"
    pd.DataFrame({"a": [1, 2]}).to_csv(path, index=False)
    with pytest.raises(InvalidTargetError, match="Target column"):
        load_dataset_csv(path, target="y")
