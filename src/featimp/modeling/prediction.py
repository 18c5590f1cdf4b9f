"""Uniform prediction interface over fitted models."""

from __future__ import annotations

from typing import Any, Callable, Hashable, Optional

import numpy as np
import pandas as pd


RESPONSE_METHODS: tuple[str, ...] = ("auto", "predict", "predict_proba")


def _as_output_frame(raw: Any, *, class_labels: Optional[list[Hashable]] = None) -> pd.DataFrame:
    if isinstance(raw, pd.DataFrame):
        return raw.reset_index(drop=True)
    if isinstance(raw, pd.Series):
        return pd.DataFrame({"prediction": raw.to_numpy()})

    values = np.asarray(raw)
    if values.ndim == 1:
        return pd.DataFrame({"prediction": values})
    if values.ndim != 2:
        raise ValueError(f"Predictions must be 1D or 2D, got shape {values.shape}")
    if values.shape[1] == 1:
        return pd.DataFrame({"prediction": values[:, 0]})

    if class_labels is None or len(class_labels) != values.shape[1]:
        class_labels = list(range(values.shape[1]))
    return pd.DataFrame(values, columns=class_labels)


def reduce_predictions(output: pd.DataFrame) -> np.ndarray:
    """Reduce a prediction frame to one comparable value per row.

    A single column is returned unchanged; a frame of per-class
    probabilities is reduced to the label of the most probable class.
    This must be applied the same way to baseline and perturbed outputs.
    """
    if output.shape[1] == 1:
        return output.iloc[:, 0].to_numpy()
    return output.idxmax(axis=1).to_numpy()


class PredictionAdapter:
    """Wrap a fitted estimator or a plain callable behind ``predict``.

    Parameters
    ----------
    model:
        A scikit-learn style estimator or a callable taking a DataFrame.
    target_class:
        Optional class label (or column position) to keep when the model
        returns per-class probabilities.
    response_method:
        ``"auto"`` uses ``predict_proba`` when the model has it, otherwise
        ``predict``.
    predict_options:
        Extra keyword arguments forwarded to the prediction call.
    """

    def __init__(
        self,
        model: Any,
        *,
        target_class: Optional[Hashable] = None,
        response_method: str = "auto",
        predict_options: Optional[dict[str, Any]] = None,
    ) -> None:
        if response_method not in RESPONSE_METHODS:
            raise ValueError(
                f"response_method must be one of {', '.join(RESPONSE_METHODS)}"
            )
        self.model = model
        self.target_class = target_class
        self.response_method = response_method
        self.predict_options = dict(predict_options or {})
        self._predict_fn = self._resolve_predict_fn()

    def _resolve_predict_fn(self) -> Callable[..., Any]:
        if self.response_method == "predict_proba":
            if not hasattr(self.model, "predict_proba"):
                raise ValueError("Model does not support predict_proba")
            return self.model.predict_proba
        if self.response_method == "auto" and hasattr(self.model, "predict_proba"):
            return self.model.predict_proba
        if hasattr(self.model, "predict"):
            return self.model.predict
        if callable(self.model):
            return self.model
        raise ValueError("Model must provide predict/predict_proba or be callable")

    def _class_labels(self) -> Optional[list[Hashable]]:
        classes = getattr(self.model, "classes_", None)
        if classes is None:
            return None
        return list(classes)

    def _select_class(self, output: pd.DataFrame) -> pd.DataFrame:
        if self.target_class in output.columns:
            column = self.target_class
        elif isinstance(self.target_class, (int, np.integer)) and 0 <= self.target_class < output.shape[1]:
            column = output.columns[int(self.target_class)]
        else:
            raise ValueError(
                f"Class {self.target_class!r} not found in prediction columns {list(output.columns)}"
            )
        return pd.DataFrame({"prediction": output[column].to_numpy()})

    def predict(self, table: pd.DataFrame) -> pd.DataFrame:
        raw = self._predict_fn(table, **self.predict_options)
        output = _as_output_frame(raw, class_labels=self._class_labels())
        if len(output) != len(table):
            raise ValueError(
                f"Model returned {len(output)} predictions for {len(table)} rows"
            )
        if self.target_class is not None:
            output = self._select_class(output)
        return output

    def __repr__(self) -> str:
        return (
            f"PredictionAdapter(model={type(self.model).__name__}, "
            f"target_class={self.target_class!r}, response_method={self.response_method!r})"
        )
