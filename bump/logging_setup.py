"""Logging setup.

Detailed logs go to ``$XDG_DATA_HOME/bump/logs/bump.log`` (by default
``~/.local/share/bump/logs/bump.log``); the terminal only sees the
human-facing progress lines printed by the pipeline. The level comes from
``$BUMP_LOG`` and defaults to INFO.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_LEVEL_ENV = "BUMP_LOG"


def log_dir() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "bump" / "logs"


def log_file() -> Path:
    return log_dir() / "bump.log"


def setup_logging(level: str | None = None) -> Path:
    """Attach a rotating file handler to the root logger.

    Safe to call more than once; only the first call configures anything.

    Returns:
        The log file path.
    """
    path = log_file()
    if getattr(setup_logging, "_configured", False):
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handler = RotatingFileHandler(
        path,
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.addHandler(handler)

    setup_logging._configured = True  # type: ignore[attr-defined]
    logging.getLogger(__name__).info("Logging initialized, writing to: %s", path)
    return path
