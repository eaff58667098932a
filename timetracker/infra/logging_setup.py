"""
Logging configuration.

The UI owns stdout/stderr while it runs, so records go to a file only.
"""

import logging
from pathlib import Path
from typing import Optional

from timetracker.infra.config import AppSettings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: AppSettings, log_file: Optional[Path] = None) -> logging.Handler:
    """Attach a file handler to the package logger and return it."""
    logger = logging.getLogger("timetracker")
    # Unknown level names raise ValueError before any file is opened
    logger.setLevel(settings.log_level.upper())

    path = Path(log_file or settings.log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logger.addHandler(handler)
    # Keep records away from the root logger's stderr handler
    logger.propagate = False
    return handler
