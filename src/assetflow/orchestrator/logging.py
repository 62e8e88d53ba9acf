from __future__ import annotations

"""Logging for the build: one `assetflow` logger tree on stderr, plus an
optional rotating file attached to the tree root with `--log-file`.

The dev server and the file watcher log every request and inotify event at
INFO; they are held at WARNING unless the build itself runs at DEBUG.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import os


ROOT_LOGGER = "assetflow"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
NOISY_LOGGERS = ("tornado.access", "tornado.general", "livereload", "watchdog")

_configured = False


def _ensure_base_logger() -> None:
    global _configured
    if _configured:
        return
    level = getattr(
        logging, os.getenv("ASSETFLOW_LOG_LEVEL", "INFO").upper(), logging.INFO
    )
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    _configured = True


def attach_log_file(log_file: Path, logger_name: str = ROOT_LOGGER) -> RotatingFileHandler:
    """Mirror everything under `logger_name` into `log_file` (once per path)."""
    _ensure_base_logger()
    logger = logging.getLogger(logger_name)
    target = str(log_file.resolve())
    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler) and h.baseFilename == target:
            return h
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return handler


def get_logger(name: str, log_file: Path | None = None) -> logging.Logger:
    _ensure_base_logger()
    if log_file:
        attach_log_file(log_file, name)
    return logging.getLogger(name)
