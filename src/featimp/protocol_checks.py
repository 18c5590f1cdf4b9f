"""Sanity checks for reproducibility and well-formed importance results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from .explain.importance import FeatureImportance
from .explain.perturbation import SOURCE_FEATURE_COLUMN, build_perturbed_batch, estimate_batch_rows
from .modeling.prediction import PredictionAdapter


@dataclass(frozen=True)
class SanityReport:
    n_features: int
    nan_features: tuple[str, ...]
    negative_features: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.nan_features and not self.negative_features


def check_shuffle_determinism(
    model: Any,
    X: pd.DataFrame,
    y: pd.Series,
    *,
    loss: Any,
    seed: int,
) -> bool:
    """Verify two shuffle runs with the same seed give identical results."""
    first = FeatureImportance(PredictionAdapter(model), X, y, loss, "shuffle", random_state=seed)
    second = FeatureImportance(PredictionAdapter(model), X, y, loss, "shuffle", random_state=seed)
    return first.data().equals(second.data())


def check_importance_sanity(results: pd.DataFrame) -> SanityReport:
    """Flag features with NaN or negative importance."""
    importance = results["importance"].to_numpy(dtype=float)
    features = results["feature"].astype(str).to_numpy()
    return SanityReport(
        n_features=len(results),
        nan_features=tuple(features[np.isnan(importance)]),
        negative_features=tuple(features[importance < 0]),
    )


def check_batch_shape(X: pd.DataFrame, *, method: str, seed: int | None = None) -> bool:
    """Verify the perturbed batch has the expected rows for every feature."""
    batch = build_perturbed_batch(X, method, random_state=seed)
    if len(batch) != estimate_batch_rows(len(X), X.shape[1], method):
        return False
    per_feature = batch[SOURCE_FEATURE_COLUMN].value_counts()
    expected = estimate_batch_rows(len(X), 1, method)
    return all(per_feature.get(feature, 0) == expected for feature in X.columns)
