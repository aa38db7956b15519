"""Application logging helpers.

One stream handler per named logger, level taken from
``rentease.config.log_level_name()``.
"""
from __future__ import annotations

import logging
import threading

from rentease import config as app_config

_LOCK = threading.Lock()
_FORMAT = "[rentease] %(asctime)s %(levelname)s %(name)s %(message)s"


def get_logger(name: str = "rentease") -> logging.Logger:
    with _LOCK:
        logger = logging.getLogger(name)
        level = getattr(logging, app_config.log_level_name(), logging.INFO)
        logger.setLevel(level)
        if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(handler)
        logger.propagate = False
        return logger


__all__ = ["get_logger"]
