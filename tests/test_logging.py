# tests/test_logging.py

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from assetflow.orchestrator.logging import ROOT_LOGGER, attach_log_file, get_logger


def test_log_file_receives_child_logger_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "build.log"
    handler = attach_log_file(log_file)
    try:
        get_logger("assetflow.task.demo").warning("bundle %s failed", "main.js")
        handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "assetflow.task.demo | WARNING | bundle main.js failed" in text
    finally:
        logging.getLogger(ROOT_LOGGER).removeHandler(handler)
        handler.close()


def test_attach_log_file_is_idempotent(tmp_path: Path) -> None:
    log_file = tmp_path / "build.log"
    first = attach_log_file(log_file)
    try:
        assert attach_log_file(log_file) is first
        handlers = [
            h for h in logging.getLogger(ROOT_LOGGER).handlers if isinstance(h, RotatingFileHandler)
        ]
        assert handlers.count(first) == 1
    finally:
        logging.getLogger(ROOT_LOGGER).removeHandler(first)
        first.close()
