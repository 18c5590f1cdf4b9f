"""Lollipop chart for permutation importance results."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.axes import Axes


def plot_importance(
    results: pd.DataFrame,
    *,
    sort: bool = True,
    ax: Optional[Axes] = None,
    title: Optional[str] = None,
) -> Axes:
    """Draw one segment per feature from 1 (no change) to its importance.

    With ``sort`` the features are ordered by ascending importance from the
    bottom, so the most important feature ends up on top.
    """
    frame = results[["feature", "importance"]].copy()
    if sort:
        frame = frame.sort_values("importance", kind="mergesort").reset_index(drop=True)
    else:
        # position 0 is drawn at the bottom
        frame = frame.iloc[::-1].reset_index(drop=True)

    importance = frame["importance"].to_numpy(dtype=float)
    finite = importance[np.isfinite(importance)]
    upper = max(float(finite.max()) if finite.size else 1.0, 1.0)
    inf_position = upper * 1.1
    drawn = np.where(np.isposinf(importance), inf_position, importance)

    if ax is None:
        height = max(2.0, 0.4 * len(frame) + 1.0)
        _, ax = plt.subplots(figsize=(7, height))

    positions = np.arange(len(frame))
    labels = [str(name) for name in frame["feature"]]
    ax.hlines(positions, xmin=1.0, xmax=drawn, color="tab:gray", linewidth=1.5)
    ax.plot(drawn, positions, "o", color="tab:blue")
    for pos, value in zip(positions, importance):
        if np.isposinf(value):
            ax.annotate("inf", (inf_position, pos), xytext=(4, 0), textcoords="offset points", va="center")

    ax.set_yticks(positions)
    ax.set_yticklabels(labels)
    ax.axvline(1.0, color="black", linewidth=0.8, linestyle="--")
    ax.set_xlabel("Feature Importance")
    ax.set_ylabel("Feature")
    if title:
        ax.set_title(title)
    ax.grid(True, axis="x", alpha=0.3)
    return ax


def save_importance_plot(
    results: pd.DataFrame,
    path: str | Path,
    *,
    sort: bool = True,
    title: Optional[str] = None,
    dpi: int = 200,
) -> None:
    ax = plot_importance(results, sort=sort, title=title)
    fig = ax.get_figure()
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
