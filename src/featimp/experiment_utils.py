"""Logging, seeding and run metadata for importance runs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import os
import platform
import random
from typing import Any, Dict, Iterable, Optional
import uuid

import numpy as np
import pandas as pd
import sklearn


DEFAULT_LOGGER_NAME = "featimp"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s run_id=%(run_id)s seed=%(seed)s %(message)s"


@dataclass(frozen=True)
class RunContext:
    run_id: str
    seed: Optional[int]


class _RunContextFilter(logging.Filter):
    def __init__(self, context: RunContext) -> None:
        super().__init__()
        self._context = context

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.run_id = self._context.run_id
        record.seed = self._context.seed if self._context.seed is not None else "none"
        return True


def generate_run_id(prefix: str | None = None, now: datetime | None = None) -> str:
    """Return ``[prefix-]YYYYmmdd-HHMMSS-<token>``."""
    timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
    token = uuid.uuid4().hex[:8]
    return f"{prefix}-{timestamp}-{token}" if prefix else f"{timestamp}-{token}"


def set_global_seed(seed: int) -> None:
    """Seed Python and NumPy global RNGs.

    The shuffle method draws from its own seeded generators; this only
    covers models or callables that use the global state.
    """
    random.seed(seed)
    np.random.seed(seed)
    os.environ.setdefault("PYTHONHASHSEED", str(seed))


def create_run_metadata(
    *,
    run_id: str,
    seed: Optional[int],
    now: datetime | None = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Collect run metadata, including library versions, for persistence."""
    metadata: Dict[str, Any] = {
        "run_id": run_id,
        "seed": seed,
        "started_at": (now or datetime.now(timezone.utc)).isoformat(),
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "versions": {
            "numpy": np.__version__,
            "pandas": pd.__version__,
            "scikit-learn": sklearn.__version__,
        },
    }
    if extra:
        metadata.update(extra)
    return metadata


def configure_logging(
    *,
    run_id: str,
    seed: Optional[int],
    level: int | str = logging.INFO,
    logger_name: str = DEFAULT_LOGGER_NAME,
    log_file: str | os.PathLike[str] | None = None,
    stream: Optional[Any] = None,
    force: bool = False,
) -> logging.Logger:
    """Configure the package logger with run context on every record.

    Module loggers (``featimp.explain.importance`` etc.) propagate to this
    logger, so their records carry the same ``run_id`` and ``seed``.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    if force:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    context = RunContext(run_id=run_id, seed=seed)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if logger.handlers:
        for handler in logger.handlers:
            handler.setFormatter(formatter)
            handler.filters = [
                existing
                for existing in handler.filters
                if not isinstance(existing, _RunContextFilter)
            ]
            handler.addFilter(_RunContextFilter(context))
        return logger

    handlers: Iterable[logging.Handler] = [logging.StreamHandler(stream=stream)]
    if log_file:
        handlers = [*handlers, logging.FileHandler(log_file)]

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(_RunContextFilter(context))
        logger.addHandler(handler)

    return logger
