# File: tests/test_logger.py
"""Настройка логгера ArmoryScout: уровни, обработчики, дочерние логгеры."""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from armory_scout.logger import LOG_FILE_BACKUPS, LOG_FILE_BYTES, LOGGER_NAME, configure, get_logger


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    configure()


@pytest.mark.parametrize("level,expected", [("debug", logging.DEBUG), ("Warning", logging.WARNING), (40, logging.ERROR)])
def test_level_accepts_any_case(level, expected):
    assert configure(level=level).level == expected


def test_reconfigure_replaces_handlers():
    configure()
    lg = configure()
    assert len(lg.handlers) == 1
    assert lg.propagate is False


def test_log_file_is_rotated(tmp_path):
    log_file = tmp_path / "armory.log"
    lg = configure(log_file=log_file)
    [file_handler] = [h for h in lg.handlers if isinstance(h, RotatingFileHandler)]
    assert file_handler.maxBytes == LOG_FILE_BYTES
    assert file_handler.backupCount == LOG_FILE_BACKUPS

    get_logger("cache").warning("swept %d entries", 3)
    file_handler.flush()
    assert "ArmoryScout.cache | swept 3 entries" in log_file.read_text(encoding="utf-8")


def test_child_logger_name():
    assert get_logger("fetcher").name == f"{LOGGER_NAME}.fetcher"
