"""Run a single configured importance computation and persist artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional
import json

import joblib
import pandas as pd

from featimp.config_loader import load_config, validate_config
from featimp.data import load_dataset_csv
from featimp.experiment_utils import (
    configure_logging,
    create_run_metadata,
    generate_run_id,
    set_global_seed,
)
from featimp.explain.importance import compute_importance
from featimp.metrics.results_io import append_record_csv, record_from_frame
from featimp.plotting import save_importance_plot


@dataclass(frozen=True)
class RunArtifacts:
    results_path: Path
    metadata_path: Path
    log_path: Path
    plot_path: Optional[Path]


def run_single_importance(
    cfg: dict[str, Any],
    *,
    output_dir: str | Path | None = None,
    data: tuple[pd.DataFrame, pd.Series] | None = None,
    model: Any = None,
) -> RunArtifacts:
    validate_config(cfg, require_paths=data is None or model is None)

    experiment_cfg = cfg.get("experiment") or {}
    run_name = experiment_cfg.get("name", "run")
    seed = int(experiment_cfg.get("random_seed", 0))

    run_id = generate_run_id(prefix=run_name)
    base_dir = Path(output_dir or "artifacts") / run_id
    base_dir.mkdir(parents=True, exist_ok=True)

    results_path = base_dir / "results.csv"
    metadata_path = base_dir / "run_metadata.json"
    log_path = base_dir / "run.log"

    logger = configure_logging(
        run_id=run_id,
        seed=seed,
        log_file=log_path,
        force=True,
    )

    set_global_seed(seed)

    data_cfg = cfg["data"]
    if data is None:
        X, y = load_dataset_csv(
            data_cfg["path"],
            target=data_cfg["target"],
            features=data_cfg.get("features"),
        )
    else:
        X, y = data

    if model is None:
        model = joblib.load(cfg["model"]["path"])

    imp_cfg = cfg["importance"]
    method = imp_cfg.get("method", "shuffle")
    logger.info(
        "Starting run: rows=%s features=%s loss=%s method=%s",
        len(X),
        X.shape[1],
        imp_cfg["loss"],
        method,
    )

    result = compute_importance(
        model,
        X,
        y,
        imp_cfg["loss"],
        method=method,
        class_=imp_cfg.get("class"),
        predict_options=imp_cfg.get("predict_options") or {},
        response_method=imp_cfg.get("response_method", "auto"),
        random_state=seed,
    )
    frame = result.data()

    record = record_from_frame(
        frame,
        run_id=run_id,
        seed=seed,
        method=method,
        loss=result.loss.name,
        baseline_error=result.baseline_error,
    )
    append_record_csv(results_path, record)

    plot_path: Optional[Path] = None
    if (cfg.get("output") or {}).get("plot", True):
        plot_path = base_dir / "importance.png"
        save_importance_plot(frame, plot_path, title=f"Permutation importance ({result.loss.name})")

    metadata = create_run_metadata(
        run_id=run_id,
        seed=seed,
        extra={
            "experiment": run_name,
            "method": method,
            "loss": result.loss.name,
            "baseline_error": result.baseline_error,
            "n_perturbed_rows": result.n_perturbed_rows,
        },
    )
    metadata_path.write_text(json.dumps(metadata, indent=2), encoding="utf-8")

    logger.info("Results written to %s", results_path)

    return RunArtifacts(
        results_path=results_path,
        metadata_path=metadata_path,
        log_path=log_path,
        plot_path=plot_path,
    )


def run_from_config(
    config_path: str | Path,
    *,
    output_dir: str | Path | None = None,
) -> RunArtifacts:
    cfg = load_config(config_path)
    return run_single_importance(cfg, output_dir=output_dir)
