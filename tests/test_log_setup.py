"""Tests for logging configuration."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from geo_tutor.config import LoggingConfig
from geo_tutor.log_setup import configure_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    def test_console_only(self, restore_root_logging):
        configure_logging(LoggingConfig(file=""))
        root = restore_root_logging
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.WARNING

    def test_file_handler(self, restore_root_logging, tmp_path: Path):
        log_file = tmp_path / "logs" / "geo.log"
        configure_logging(LoggingConfig(level="DEBUG", file=str(log_file)))

        logging.getLogger("geo-tutor").debug("stream complete")
        for handler in restore_root_logging.handlers:
            handler.flush()

        file_handlers = [
            h for h in restore_root_logging.handlers if isinstance(h, RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert "stream complete" in log_file.read_text()

    def test_verbose_console(self, restore_root_logging):
        configure_logging(LoggingConfig(file=""), verbose=True)
        assert restore_root_logging.handlers[0].level == logging.DEBUG
        assert restore_root_logging.level == logging.DEBUG
