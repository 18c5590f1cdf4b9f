"""Load and validate feature tables and target vectors."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Optional

import numpy as np
import pandas as pd


class InvalidTargetError(ValueError):
    """Raised when the target does not line up with the feature table."""


def as_feature_table(X: Any, *, feature_names: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """Return a copy of ``X`` as a DataFrame with a fresh RangeIndex."""
    if isinstance(X, pd.DataFrame):
        frame = X.copy()
    else:
        values = np.asarray(X)
        if values.ndim != 2:
            raise ValueError(f"X must be 2D, got shape {values.shape}")
        names = list(feature_names) if feature_names is not None else [
            f"x{idx}" for idx in range(values.shape[1])
        ]
        frame = pd.DataFrame(values, columns=names)

    if frame.columns.has_duplicates:
        duplicated = sorted({str(col) for col in frame.columns[frame.columns.duplicated()]})
        raise ValueError(f"Feature names must be unique, duplicated: {duplicated}")
    if frame.shape[1] == 0:
        raise ValueError("X must have at least one feature")
    return frame.reset_index(drop=True)


def as_target(y: Any, *, n_rows: Optional[int] = None) -> pd.Series:
    """Return ``y`` as a Series, checking shape and missing values."""
    if isinstance(y, pd.DataFrame):
        if y.shape[1] != 1:
            raise InvalidTargetError(f"y must have exactly one column, got {y.shape[1]}")
        series = y.iloc[:, 0]
    elif isinstance(y, pd.Series):
        series = y
    else:
        values = np.asarray(y)
        if values.ndim != 1:
            raise InvalidTargetError(f"y must be 1D, got shape {values.shape}")
        series = pd.Series(values, name="y")

    series = series.reset_index(drop=True)
    if series.isna().any():
        raise InvalidTargetError("y must not contain missing values")
    if n_rows is not None and len(series) != n_rows:
        raise InvalidTargetError(
            f"y has {len(series)} values but X has {n_rows} rows"
        )
    return series


def load_dataset_csv(
    path: str | Path,
    *,
    target: str,
    features: Optional[Iterable[str]] = None,
) -> tuple[pd.DataFrame, pd.Series]:
    """Read a CSV file and split it into (X, y).

    Parameters
    ----------
    path:
        CSV file with a header row.
    target:
        Name of the target column.
    features:
        Optional subset of feature columns; defaults to every other column.
    """
    data_path = Path(path)
    if not data_path.exists():
        raise FileNotFoundError(f"Dataset not found: {data_path}")

    df = pd.read_csv(data_path)
    if target not in df.columns:
        raise InvalidTargetError(f"Target column {target!r} not in {data_path}")

    y = df.pop(target)
    if features is not None:
        selected = list(features)
        missing = [col for col in selected if col not in df.columns]
        if missing:
            raise ValueError(f"Unknown feature columns: {missing}")
        df = df[selected]

    return as_feature_table(df), as_target(y, n_rows=len(df))
