from __future__ import annotations

import math
from pathlib import Path

import pandas as pd
import pytest

from featimp.metrics.results_io import (
    ImportanceRecord,
    append_record_csv,
    record_from_frame,
    record_to_frame,
)


def _record(run_id: str = "run-1") -> ImportanceRecord:
    return ImportanceRecord(
        run_id=run_id,
        seed=42,
        method="shuffle",
        loss="mae",
        baseline_error=0.5,
        error={"f1": 0.75, "f2": 1.5},
        importance={"f1": 1.5, "f2": 3.0},
    )


def test_record_to_frame_is_long_and_sorted() -> None:
    frame = record_to_frame(_record())

    assert frame.shape == (2, 8)
    assert frame["feature"].tolist() == ["f2", "f1"]
    assert set(frame.columns) == {
        "run_id",
        "seed",
        "method",
        "loss",
        "baseline_error",
        "feature",
        "error",
        "importance",
    }


def test_record_from_frame_round_trip_fields() -> None:
    frame = pd.DataFrame(
        {"feature": ["a", "b"], "error": [2.0, 1.0], "importance": [4.0, 2.0]}
    )

    record = record_from_frame(
        frame, run_id="r", seed=None, method="cartesian", loss="mse", baseline_error=0.5
    )

    assert record.importance == {"a": 4.0, "b": 2.0}
    assert record.error == {"a": 2.0, "b": 1.0}
    assert record.method == "cartesian"


def test_append_record_csv(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "results.csv"
    append_record_csv(path, _record("run-1"))
    append_record_csv(path, _record("run-2"))

    frame = pd.read_csv(path)
    assert len(frame) == 4
    assert frame["run_id"].tolist() == ["run-1", "run-1", "run-2", "run-2"]


def test_infinite_importance_survives_csv(tmp_path: Path) -> None:
    record = ImportanceRecord(
        run_id="r",
        seed=0,
        method="cartesian",
        loss="mae",
        baseline_error=0.0,
        error={"a": 1.0, "b": 0.0},
        importance={"a": math.inf, "b": 1.0},
    )
    path = tmp_path / "results.csv"
    append_record_csv(path, record)

    frame = pd.read_csv(path)
    assert math.isinf(frame.loc[0, "importance"])
    assert frame.loc[1, "importance"] == 1.0


def test_invalid_record_rejected() -> None:
    record = ImportanceRecord(
        run_id="r",
        seed=0,
        method="shuffle",
        loss="mae",
        baseline_error=-1.0,
        error={"a": 1.0},
        importance={"a": 1.0},
    )
    with pytest.raises(ValueError, match="baseline_error"):
        record_to_frame(record)

    mismatched = ImportanceRecord(
        run_id="r",
        seed=0,
        method="shuffle",
        loss="mae",
        baseline_error=1.0,
        error={"a": 1.0},
        importance={"b": 1.0},
    )
    with pytest.raises(ValueError, match="same features"):
        record_to_frame(mismatched)
