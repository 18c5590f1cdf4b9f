"""Named loss functions and resolution of loss specifications."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Union

import numpy as np
from sklearn.metrics import (
    log_loss,
    mean_absolute_error,
    mean_absolute_percentage_error,
    mean_squared_error,
    mean_squared_log_error,
    median_absolute_error,
    zero_one_loss,
)


LossFn = Callable[[np.ndarray, np.ndarray], float]
LossSpec = Union[str, LossFn]

_LABEL_MAX_CHARS = 40


class MetricsConfigError(ValueError):
    """Raised when a loss specification is invalid."""


class UnknownMetricError(MetricsConfigError):
    """Raised when a named loss is not registered."""


class InvalidMetricShapeError(MetricsConfigError):
    """Raised when a loss returns something other than a single value."""


@dataclass(frozen=True)
class LossFunction:
    name: str
    display_name: str
    fn: LossFn

    def __call__(self, actual: np.ndarray, predicted: np.ndarray) -> float:
        return evaluate_loss(self, actual, predicted)


def _sse(actual: np.ndarray, predicted: np.ndarray) -> float:
    return float(np.sum(np.square(np.asarray(actual, dtype=float) - np.asarray(predicted, dtype=float))))


def _sae(actual: np.ndarray, predicted: np.ndarray) -> float:
    return float(np.sum(np.abs(np.asarray(actual, dtype=float) - np.asarray(predicted, dtype=float))))


def _smape(actual: np.ndarray, predicted: np.ndarray) -> float:
    a = np.asarray(actual, dtype=float)
    p = np.asarray(predicted, dtype=float)
    return float(2.0 * np.mean(np.abs(a - p) / (np.abs(a) + np.abs(p))))


def _rse(actual: np.ndarray, predicted: np.ndarray) -> float:
    a = np.asarray(actual, dtype=float)
    return float(np.float64(_sse(a, predicted)) / np.sum(np.square(a - a.mean())))


def _rae(actual: np.ndarray, predicted: np.ndarray) -> float:
    a = np.asarray(actual, dtype=float)
    return float(np.float64(_sae(a, predicted)) / np.sum(np.abs(a - a.mean())))


def _binary_log_loss(actual: np.ndarray, predicted: np.ndarray) -> float:
    y_true = np.asarray(actual).astype(int)
    y_score = np.asarray(predicted, dtype=float)
    return float(log_loss(y_true, y_score, labels=[0, 1]))


def _registry(*definitions: LossFunction) -> Mapping[str, LossFunction]:
    return MappingProxyType({definition.name: definition for definition in definitions})


LOSS_REGISTRY: Mapping[str, LossFunction] = _registry(
    LossFunction(
        name="mae",
        display_name="Mean Absolute Error",
        fn=lambda a, p: float(mean_absolute_error(a, p)),
    ),
    LossFunction(
        name="mse",
        display_name="Mean Squared Error",
        fn=lambda a, p: float(mean_squared_error(a, p)),
    ),
    LossFunction(
        name="rmse",
        display_name="Root Mean Squared Error",
        fn=lambda a, p: float(np.sqrt(mean_squared_error(a, p))),
    ),
    LossFunction(
        name="msle",
        display_name="Mean Squared Log Error",
        fn=lambda a, p: float(mean_squared_log_error(a, p)),
    ),
    LossFunction(
        name="rmsle",
        display_name="Root Mean Squared Log Error",
        fn=lambda a, p: float(np.sqrt(mean_squared_log_error(a, p))),
    ),
    LossFunction(
        name="mdae",
        display_name="Median Absolute Error",
        fn=lambda a, p: float(median_absolute_error(a, p)),
    ),
    LossFunction(
        name="mape",
        display_name="Mean Absolute Percentage Error",
        fn=lambda a, p: float(mean_absolute_percentage_error(a, p)),
    ),
    LossFunction(name="smape", display_name="Symmetric MAPE", fn=_smape),
    LossFunction(name="sse", display_name="Sum of Squared Errors", fn=_sse),
    LossFunction(name="sae", display_name="Sum of Absolute Errors", fn=_sae),
    LossFunction(name="rse", display_name="Relative Squared Error", fn=_rse),
    LossFunction(
        name="rrse",
        display_name="Root Relative Squared Error",
        fn=lambda a, p: float(np.sqrt(_rse(a, p))),
    ),
    LossFunction(name="rae", display_name="Relative Absolute Error", fn=_rae),
    LossFunction(
        name="ce",
        display_name="Classification Error",
        fn=lambda a, p: float(zero_one_loss(np.asarray(a), np.asarray(p))),
    ),
    LossFunction(name="logloss", display_name="Log Loss", fn=_binary_log_loss),
)


def list_losses() -> list[str]:
    return sorted(LOSS_REGISTRY)


def _callable_label(fn: Callable) -> str:
    name = getattr(fn, "__name__", None)
    if name and name != "<lambda>":
        return name
    text = repr(fn)
    if len(text) > _LABEL_MAX_CHARS:
        return text[: _LABEL_MAX_CHARS - 3] + "..."
    return text


def resolve_loss(spec: LossSpec | LossFunction) -> LossFunction:
    """Resolve a loss name or callable into a ``LossFunction``.

    Strings are looked up in ``LOSS_REGISTRY``. Callables must take the
    actual values first and the predictions second, and return one value.
    """
    if isinstance(spec, LossFunction):
        return spec
    if isinstance(spec, str):
        if spec not in LOSS_REGISTRY:
            raise UnknownMetricError(
                f"Unsupported loss: {spec} (known: {', '.join(list_losses())})"
            )
        return LOSS_REGISTRY[spec]
    if callable(spec):
        label = _callable_label(spec)
        return LossFunction(name=label, display_name=label, fn=spec)
    raise TypeError(f"loss must be a name or a callable, got {type(spec).__name__}")


def evaluate_loss(
    loss: LossFunction,
    actual: np.ndarray,
    predicted: np.ndarray,
) -> float:
    """Apply ``loss`` and check that it produced a single value."""
    value = loss.fn(actual, predicted)
    if np.ndim(value) != 0:
        raise InvalidMetricShapeError(
            f"Loss {loss.name} must return a single value, got shape {np.shape(value)}"
        )
    return float(value)
