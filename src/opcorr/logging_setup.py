"""Logging configuration for processes embedding opcorr."""

from __future__ import annotations

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None) -> int:
    """Configure root logging; `level` falls back to the LOG_LEVEL env var.

    Returns the numeric level that was applied.
    """
    log_level = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    log_level_value = getattr(logging, log_level, logging.INFO)
    if not isinstance(log_level_value, int):
        log_level_value = logging.INFO

    logging.basicConfig(level=log_level_value, format=LOG_FORMAT)
    logging.getLogger("opcorr").setLevel(log_level_value)
    return log_level_value
