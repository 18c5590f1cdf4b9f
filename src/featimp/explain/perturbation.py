"""Perturbation schemes that decorrelate one feature from the target.

- shuffle: one random permutation of the feature column, n rows per feature.
- cartesian: every instance paired with the feature value of every other
  instance, n * (n - 1) rows per feature.

Every perturbed row is tagged with the feature that was perturbed
(``SOURCE_FEATURE_COLUMN``) and the original row it stands for
(``SOURCE_ROW_COLUMN``), so a single batched prediction can be split back
into per-feature groups and compared against the matching targets.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd


PERTURBATION_METHODS: tuple[str, ...] = ("shuffle", "cartesian")

SOURCE_FEATURE_COLUMN = "_feature"
SOURCE_ROW_COLUMN = "_row"
TAG_COLUMNS: tuple[str, ...] = (SOURCE_FEATURE_COLUMN, SOURCE_ROW_COLUMN)


class UnsupportedMethodError(ValueError):
    """Raised when a perturbation method is not implemented."""


def validate_method(method: str) -> str:
    if method not in PERTURBATION_METHODS:
        raise UnsupportedMethodError(
            f"method must be one of {', '.join(PERTURBATION_METHODS)}, got {method!r}"
        )
    return method


def check_tag_columns(columns: Iterable[str]) -> None:
    clashes = [col for col in columns if col in TAG_COLUMNS]
    if clashes:
        raise ValueError(f"Feature names clash with reserved columns: {clashes}")


def _tag(frame: pd.DataFrame, feature: str, rows: np.ndarray) -> pd.DataFrame:
    frame[SOURCE_FEATURE_COLUMN] = feature
    frame[SOURCE_ROW_COLUMN] = rows
    return frame


def shuffle_feature(
    base: pd.DataFrame,
    feature: str,
    rng: np.random.Generator,
) -> pd.DataFrame:
    """Permute ``feature`` across the rows of ``base``."""
    n_rows = len(base)
    perturbed = base.reset_index(drop=True)
    order = rng.permutation(n_rows)
    perturbed[feature] = perturbed[feature].iloc[order].reset_index(drop=True)
    return _tag(perturbed, feature, np.arange(n_rows))


def cartesian_feature(base: pd.DataFrame, feature: str) -> pd.DataFrame:
    """Pair each row with the ``feature`` value of every other row."""
    n_rows = len(base)
    rows = np.repeat(np.arange(n_rows), n_rows)
    donors = np.tile(np.arange(n_rows), n_rows)
    keep = rows != donors
    rows, donors = rows[keep], donors[keep]

    perturbed = base.iloc[rows].reset_index(drop=True)
    perturbed[feature] = base[feature].iloc[donors].reset_index(drop=True)
    return _tag(perturbed, feature, rows)


def feature_rngs(
    features: Sequence[str],
    random_state: Optional[int | np.random.SeedSequence] = None,
) -> dict[str, np.random.Generator]:
    """Spawn one independent generator per feature from a single seed."""
    seed_seq = (
        random_state
        if isinstance(random_state, np.random.SeedSequence)
        else np.random.SeedSequence(random_state)
    )
    children = seed_seq.spawn(len(features))
    return {feature: np.random.default_rng(child) for feature, child in zip(features, children)}


def perturb_feature(
    base: pd.DataFrame,
    feature: str,
    method: str,
    *,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    if method == "shuffle":
        return shuffle_feature(base, feature, rng if rng is not None else np.random.default_rng())
    if method == "cartesian":
        return cartesian_feature(base, feature)
    raise UnsupportedMethodError(f"{method} method not implemented")


def build_perturbed_batch(
    base: pd.DataFrame,
    method: str,
    *,
    features: Optional[Sequence[str]] = None,
    random_state: Optional[int | np.random.SeedSequence] = None,
) -> pd.DataFrame:
    """Concatenate the perturbed rows of every feature, in column order."""
    validate_method(method)
    check_tag_columns(base.columns)
    features = list(base.columns) if features is None else list(features)
    rngs = feature_rngs(features, random_state) if method == "shuffle" else {}

    batches = [
        perturb_feature(base, feature, method, rng=rngs.get(feature))
        for feature in features
    ]
    if not batches:
        return pd.DataFrame(columns=list(base.columns) + list(TAG_COLUMNS))
    return pd.concat(batches, ignore_index=True)


def estimate_batch_rows(n_rows: int, n_features: int, method: str) -> int:
    """Number of perturbed rows a run allocates (cartesian grows as n**2)."""
    validate_method(method)
    if method == "shuffle":
        return n_features * n_rows
    return n_features * n_rows * max(n_rows - 1, 0)
