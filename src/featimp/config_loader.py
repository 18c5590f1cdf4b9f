"""YAML config loader for importance runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from featimp.explain.perturbation import PERTURBATION_METHODS
from featimp.modeling.prediction import RESPONSE_METHODS


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing required fields."""


REQUIRED_SECTIONS = ("experiment", "data", "model", "importance")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a YAML config file from disk."""
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if not isinstance(data, dict):
        raise ConfigError("Config root must be a mapping")

    return data


def _require_mapping(cfg: dict[str, Any], section: str) -> dict[str, Any]:
    value = cfg[section]
    if not isinstance(value, dict):
        raise ConfigError(f"{section} must be a mapping")
    return value


def validate_config(cfg: dict[str, Any], *, require_paths: bool = True) -> None:
    """Validate required sections, keys and choices.

    ``require_paths=False`` skips ``data.path`` and ``model.path`` for runs
    where data and model are passed in directly.
    """
    missing = [section for section in REQUIRED_SECTIONS if section not in cfg]
    if missing:
        raise ConfigError(f"Missing required sections: {', '.join(missing)}")

    data = _require_mapping(cfg, "data")
    model = _require_mapping(cfg, "model")
    importance = _require_mapping(cfg, "importance")

    if require_paths:
        if "path" not in data:
            raise ConfigError("data.path is required")
        if "path" not in model:
            raise ConfigError("model.path is required")
    if "target" not in data:
        raise ConfigError("data.target is required")

    if "loss" not in importance:
        raise ConfigError("importance.loss is required")

    method = importance.get("method", "shuffle")
    if method not in PERTURBATION_METHODS:
        raise ConfigError(
            f"importance.method must be one of {', '.join(PERTURBATION_METHODS)}"
        )

    response_method = importance.get("response_method", "auto")
    if response_method not in RESPONSE_METHODS:
        raise ConfigError(
            f"importance.response_method must be one of {', '.join(RESPONSE_METHODS)}"
        )

    if not isinstance(importance.get("predict_options", {}) or {}, dict):
        raise ConfigError("importance.predict_options must be a mapping")


if __name__ == "__main__":
    import sys

    config_path = sys.argv[1] if len(sys.argv) > 1 else "configs/example.yaml"
    config = load_config(config_path)
    validate_config(config)
    print(f"Loaded config: {config_path}")
