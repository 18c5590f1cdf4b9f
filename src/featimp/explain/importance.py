"""Permutation feature importance.

The importance of a feature is the factor by which the model's error grows
when the feature's values are perturbed:

    importance = error(perturbed) / error(original)

Two perturbation schemes are available (see ``featimp.explain.perturbation``):
``shuffle`` is one random permutation per feature (n rows each) and
``cartesian`` matches every instance with the feature value of every other
instance (n * (n - 1) rows each, exact but quadratic in memory).

When the original error is zero, a feature whose perturbation raises the
error gets ``inf`` and a feature whose perturbation leaves it at zero gets
``1.0`` (no change).

Reference:
    Fisher, A., Rudin, C., and Dominici, F. (2018). Model Class Reliance:
    Variable Importance Measures for any Machine Learning Model Class, from
    the "Rashomon" Perspective. http://arxiv.org/abs/1801.01489
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Optional

import pandas as pd

from featimp.data import InvalidTargetError, as_feature_table, as_target
from featimp.explain.perturbation import (
    SOURCE_FEATURE_COLUMN,
    SOURCE_ROW_COLUMN,
    TAG_COLUMNS,
    UnsupportedMethodError,
    build_perturbed_batch,
    check_tag_columns,
    estimate_batch_rows,
    validate_method,
)
from featimp.metrics.losses import (
    InvalidMetricShapeError,
    LossFunction,
    LossSpec,
    UnknownMetricError,
    evaluate_loss,
    resolve_loss,
)
from featimp.modeling.prediction import PredictionAdapter, reduce_predictions
from featimp.plotting import plot_importance

__all__ = [
    "DegenerateBaselineError",
    "FeatureImportance",
    "InvalidMetricShapeError",
    "InvalidTargetError",
    "UnknownMetricError",
    "UnsupportedMethodError",
    "compute_importance",
    "importance_ratio",
]

logger = logging.getLogger(__name__)

RESULT_COLUMNS: tuple[str, ...] = ("feature", "error", "importance")
ZERO_BASELINE_UNCHANGED = 1.0


class DegenerateBaselineError(ValueError):
    """Raised in strict mode when the unperturbed error is exactly zero."""


def importance_ratio(error: float, baseline_error: float) -> float:
    """Ratio of perturbed to original error, defined for a zero baseline."""
    if baseline_error == 0:
        if error == 0:
            return ZERO_BASELINE_UNCHANGED
        return float("inf")
    return float(error / baseline_error)


class FeatureImportance:
    """Permutation importance of every feature of ``X`` for one model.

    Attributes:
        predictor: Adapter with ``predict(DataFrame) -> DataFrame``
        loss: Resolved loss, ``loss(actual, predicted) -> float``
        method: ``"shuffle"`` or ``"cartesian"``
        baseline_error: Loss of the unperturbed predictions
    """

    def __init__(
        self,
        predictor: PredictionAdapter,
        X: pd.DataFrame,
        y: Any,
        loss: LossSpec | LossFunction,
        method: str = "shuffle",
        *,
        random_state: Optional[int] = None,
        strict_baseline: bool = False,
    ) -> None:
        self.method = validate_method(method)
        self.loss = resolve_loss(loss)
        self.predictor = predictor
        self.random_state = random_state

        self._X = as_feature_table(X)
        check_tag_columns(self._X.columns)
        self._y = as_target(y, n_rows=len(self._X))
        if self.method == "cartesian" and len(self._X) < 2:
            raise ValueError("cartesian method needs at least 2 rows")
        if len(self._X) == 0:
            raise ValueError("X must have at least one row")
        self._results: Optional[pd.DataFrame] = None

        self.baseline_error = evaluate_loss(
            self.loss,
            self._y.to_numpy(),
            reduce_predictions(self.predictor.predict(self._X)),
        )
        logger.info(
            "Baseline %s=%.6g over %d rows (method=%s)",
            self.loss.name,
            self.baseline_error,
            len(self._X),
            self.method,
        )
        if self.baseline_error == 0:
            if strict_baseline:
                raise DegenerateBaselineError(
                    "Baseline error is zero; importance ratios are not finite"
                )
            logger.warning(
                "Baseline error is zero: perturbed errors above zero map to inf, "
                "unchanged errors map to %s",
                ZERO_BASELINE_UNCHANGED,
            )

    @property
    def feature_names(self) -> list[str]:
        return list(self._X.columns)

    @property
    def n_perturbed_rows(self) -> int:
        return estimate_batch_rows(len(self._X), self._X.shape[1], self.method)

    @property
    def is_complete(self) -> bool:
        return self._results is not None

    def run(self) -> "FeatureImportance":
        """Perturb every feature, predict once, aggregate per feature."""
        if self._results is not None:
            return self

        logger.info(
            "Perturbing %d features with %s: %d rows",
            self._X.shape[1],
            self.method,
            self.n_perturbed_rows,
        )
        batch = build_perturbed_batch(
            self._X,
            self.method,
            random_state=self.random_state,
        )
        design = batch.drop(columns=list(TAG_COLUMNS))
        predicted = reduce_predictions(self.predictor.predict(design))
        actual = self._y.to_numpy()[batch[SOURCE_ROW_COLUMN].to_numpy()]

        groups = batch.groupby(SOURCE_FEATURE_COLUMN, sort=False).indices
        rows = []
        for feature in self.feature_names:
            idx = groups[feature]
            error = evaluate_loss(self.loss, actual[idx], predicted[idx])
            rows.append(
                {
                    "feature": feature,
                    "error": error,
                    "importance": importance_ratio(error, self.baseline_error),
                }
            )

        self._results = pd.DataFrame(rows, columns=list(RESULT_COLUMNS))
        logger.debug("Importance results:\n%s", self._results)
        return self

    def data(self) -> pd.DataFrame:
        """Results sorted by importance, descending; ties keep feature order."""
        results = self.run()._results
        return results.sort_values(
            "importance", ascending=False, kind="mergesort"
        ).reset_index(drop=True)

    def plot(self, sort: bool = True, **kwargs: Any):
        """Lollipop chart of the results; returns the matplotlib Axes."""
        return plot_importance(self.data(), sort=sort, **kwargs)

    def __repr__(self) -> str:
        state = "completed" if self.is_complete else "initialized"
        return (
            f"FeatureImportance(method='{self.method}', loss='{self.loss.name}', "
            f"baseline_error={self.baseline_error:.6g}, "
            f"n_features={self._X.shape[1]}, state={state})"
        )


def compute_importance(
    model: Any,
    X: pd.DataFrame,
    y: Any,
    loss: LossSpec | LossFunction,
    method: str = "shuffle",
    class_: Optional[Hashable] = None,
    predict_options: Optional[dict[str, Any]] = None,
    *,
    response_method: str = "auto",
    random_state: Optional[int] = None,
    strict_baseline: bool = False,
) -> FeatureImportance:
    """Compute permutation feature importance for a fitted model.

    Args:
        model: Fitted estimator or callable ``f(DataFrame) -> predictions``
        X: Feature table
        y: True target values aligned with ``X``
        loss: Registered loss name (e.g. ``"mae"``, ``"ce"``) or a callable
            taking ``(actual, predicted)`` and returning one value
        method: ``"shuffle"`` (n rows per feature) or ``"cartesian"``
            (n * (n - 1) rows per feature)
        class_: For multi-class probability outputs, only score this class
        predict_options: Keyword arguments for the model's predict call
        response_method: ``"auto"``, ``"predict"`` or ``"predict_proba"``
        random_state: Seed for the shuffle method
        strict_baseline: Raise ``DegenerateBaselineError`` on a zero baseline

    Returns:
        A ``FeatureImportance`` that has already been run.
    """
    validate_method(method)
    resolved = resolve_loss(loss)
    table = as_feature_table(X)
    target = as_target(y, n_rows=len(table))

    predictor = PredictionAdapter(
        model,
        target_class=class_,
        response_method=response_method,
        predict_options=predict_options,
    )
    engine = FeatureImportance(
        predictor,
        table,
        target,
        resolved,
        method=method,
        random_state=random_state,
        strict_baseline=strict_baseline,
    )
    return engine.run()
