from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402

from featimp.explain.importance import compute_importance  # noqa: E402
from featimp.plotting import plot_importance, save_importance_plot  # noqa: E402


def _results() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "feature": ["b", "a", "c"],
            "error": [3.0, 2.0, 1.0],
            "importance": [3.0, 2.0, 1.0],
        }
    )


def test_sorted_plot_is_ascending_bottom_to_top() -> None:
    ax = plot_importance(_results(), sort=True)

    points = ax.lines[0]
    assert list(points.get_xdata()) == [1.0, 2.0, 3.0]
    assert ax.get_xlabel() == "Feature Importance"
    plt.close(ax.get_figure())


def test_unsorted_plot_keeps_input_order_top_down() -> None:
    frame = _results().iloc[[2, 0, 1]].reset_index(drop=True)

    ax = plot_importance(frame, sort=False)

    # first row drawn at the top
    assert list(ax.lines[0].get_xdata()) == [2.0, 3.0, 1.0]
    plt.close(ax.get_figure())


def test_infinite_importance_is_drawn_and_labelled() -> None:
    frame = pd.DataFrame(
        {"feature": ["a", "b"], "error": [1.0, 0.0], "importance": [np.inf, 1.0]}
    )

    ax = plot_importance(frame)

    xdata = np.asarray(ax.lines[0].get_xdata(), dtype=float)
    assert np.isfinite(xdata).all()
    assert xdata[-1] > xdata[0]
    assert any(text.get_text() == "inf" for text in ax.texts)
    plt.close(ax.get_figure())


def test_plot_uses_given_axes() -> None:
    fig, ax = plt.subplots()

    returned = plot_importance(_results(), ax=ax, title="Importance")

    assert returned is ax
    assert ax.get_title() == "Importance"
    plt.close(fig)


def test_engine_plot_and_save(tmp_path: Path) -> None:
    X = pd.DataFrame({"a": [1.0, 2.0, 3.0, 4.0], "b": [0.0, 1.0, 0.0, 1.0]})
    y = pd.Series([1.5, 2.0, 3.5, 4.0])
    result = compute_importance(lambda frame: frame["a"], X, y, "mae", method="cartesian")

    ax = result.plot()
    assert len(ax.lines[0].get_xdata()) == 2
    plt.close(ax.get_figure())

    out = tmp_path / "importance.png"
    save_importance_plot(result.data(), out)
    assert out.exists()
