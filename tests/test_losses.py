from __future__ import annotations

import math

import numpy as np
import pytest

from featimp.metrics.losses import (
    LOSS_REGISTRY,
    InvalidMetricShapeError,
    MetricsConfigError,
    UnknownMetricError,
    evaluate_loss,
    list_losses,
    resolve_loss,
)


def test_resolve_named_regression_losses() -> None:
    actual = np.array([1.0, 2.0, 3.0])
    predicted = np.array([1.0, 2.0, 5.0])

    assert resolve_loss("mae")(actual, predicted) == pytest.approx(2 / 3)
    assert resolve_loss("mse")(actual, predicted) == pytest.approx(4 / 3)
    assert resolve_loss("rmse")(actual, predicted) == pytest.approx(math.sqrt(4 / 3))
    assert resolve_loss("sse")(actual, predicted) == pytest.approx(4.0)
    assert resolve_loss("sae")(actual, predicted) == pytest.approx(2.0)
    assert resolve_loss("rse")(actual, actual) == pytest.approx(0.0)


def test_classification_error_on_labels() -> None:
    actual = np.array(["a", "b", "c"], dtype=object)
    predicted = np.array(["a", "b", "a"], dtype=object)

    assert resolve_loss("ce")(actual, predicted) == pytest.approx(1 / 3)


def test_logloss_on_probabilities() -> None:
    value = resolve_loss("logloss")(np.array([0, 1]), np.array([0.5, 0.5]))
    assert value == pytest.approx(math.log(2))


def test_unknown_loss_raises() -> None:
    with pytest.raises(UnknownMetricError, match="Unsupported loss"):
        resolve_loss("not-a-loss")
    assert issubclass(UnknownMetricError, MetricsConfigError)
    assert issubclass(UnknownMetricError, ValueError)


def test_callable_is_used_directly_and_labelled() -> None:
    def max_error(actual: np.ndarray, predicted: np.ndarray) -> float:
        return float(np.max(np.abs(actual - predicted)))

    loss = resolve_loss(max_error)

    assert loss.name == "max_error"
    assert loss(np.array([1.0, 2.0]), np.array([1.0, 5.0])) == pytest.approx(3.0)


def test_lambda_label_is_truncated() -> None:
    loss = resolve_loss(lambda a, p: float(np.mean(a != p)))
    assert len(loss.name) <= 40
    assert loss.name


def test_vector_valued_loss_is_rejected() -> None:
    loss = resolve_loss(lambda a, p: np.abs(a - p))
    with pytest.raises(InvalidMetricShapeError, match="single value"):
        evaluate_loss(loss, np.array([1.0, 2.0]), np.array([2.0, 2.0]))


def test_non_callable_spec_raises_type_error() -> None:
    with pytest.raises(TypeError):
        resolve_loss(42)  # type: ignore[arg-type]


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        LOSS_REGISTRY["custom"] = LOSS_REGISTRY["mae"]  # type: ignore[index]


def test_list_losses_sorted() -> None:
    names = list_losses()
    assert names == sorted(names)
    assert {"mae", "mse", "ce", "logloss"}.issubset(names)
