"""Schema and writer utilities for importance results."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import pandas as pd


@dataclass(frozen=True)
class ImportanceRecord:
    """Per-run importance results, one entry per feature."""

    run_id: str
    seed: Optional[int]
    method: str
    loss: str
    baseline_error: float
    error: dict[str, float]
    importance: dict[str, float]


def _validate_record(record: ImportanceRecord) -> None:
    if set(record.error) != set(record.importance):
        raise ValueError("error and importance must cover the same features")
    if math.isnan(record.baseline_error) or record.baseline_error < 0:
        raise ValueError("baseline_error must be a non-negative number")


def record_from_frame(
    frame: pd.DataFrame,
    *,
    run_id: str,
    seed: Optional[int],
    method: str,
    loss: str,
    baseline_error: float,
) -> ImportanceRecord:
    """Build a record from a ``feature/error/importance`` frame."""
    features = [str(name) for name in frame["feature"]]
    return ImportanceRecord(
        run_id=run_id,
        seed=seed,
        method=method,
        loss=loss,
        baseline_error=float(baseline_error),
        error=dict(zip(features, frame["error"].astype(float))),
        importance=dict(zip(features, frame["importance"].astype(float))),
    )


def record_to_frame(record: ImportanceRecord) -> pd.DataFrame:
    """Long format: one row per feature, ordered by importance descending."""
    _validate_record(record)

    rows: list[dict[str, Any]] = []
    for feature, importance in record.importance.items():
        rows.append(
            {
                "run_id": record.run_id,
                "seed": record.seed,
                "method": record.method,
                "loss": record.loss,
                "baseline_error": record.baseline_error,
                "feature": feature,
                "error": record.error[feature],
                "importance": importance,
            }
        )

    frame = pd.DataFrame(rows)
    return frame.sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


def append_record_csv(path: str | Path, record: ImportanceRecord) -> None:
    """Append a record to a CSV file (creates file if missing)."""
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    frame = record_to_frame(record)
    if output_path.exists():
        existing_cols = pd.read_csv(output_path, nrows=0).columns
        frame = frame.reindex(columns=existing_cols, fill_value=pd.NA)
        frame.to_csv(output_path, mode="a", index=False, header=False)
    else:
        frame.to_csv(output_path, index=False)

