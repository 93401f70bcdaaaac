"""
Tests for logging setup.
"""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from docstore.config import LoggingSettings
from docstore.logging_setup import setup_logging


@pytest.fixture()
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_rotating_file_handler(tmp_path, restore_root):
    log_file = tmp_path / "logs" / "docstore.log"
    setup_logging(LoggingSettings(file_path=str(log_file), log_level="debug", rolling_file_backups=2))

    rotating = [h for h in restore_root.handlers if isinstance(h, RotatingFileHandler)]
    assert len(rotating) == 1
    assert rotating[0].backupCount == 2
    assert restore_root.level == logging.DEBUG

    logging.getLogger("docstore.test").info("hello")
    rotating[0].flush()
    assert "hello" in log_file.read_text()
    rotating[0].close()


def test_console_only(restore_root):
    setup_logging(LoggingSettings())
    assert len(restore_root.handlers) == 1
    assert restore_root.level == logging.INFO
