# === FILE: armory_scout/logger.py ===
"""Logging for the ArmoryScout service.

Every module writes to the ``ArmoryScout`` logger or one of its children
(``ArmoryScout.fetcher``, ``ArmoryScout.cache``, ``ArmoryScout.browser`` ...).
Only the root ``ArmoryScout`` logger owns handlers: stdout always, plus a
rotating file when ``--log-file`` is given to the CLI.

Typical use::

    from armory_scout.logger import logger            # engine, server
    from armory_scout.logger import get_logger        # everything else
    log = get_logger("fetcher")
    log.debug("%s -> %s", url, state.value)
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "ArmoryScout"

# rotation of --log-file: 5 MiB per file, three old files kept
LOG_FILE_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _normalize_level(level: _LevelT) -> _LevelT:
    # the CLI passes whatever the user typed: "debug", "Info", 10
    return level.upper() if isinstance(level, str) else level


def _build_handlers(log_file: str | Path | None, fmt: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=LOG_FILE_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    formatter = logging.Formatter(fmt)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Настраивает логгер ``ArmoryScout`` и возвращает его.

    Parameters
    ----------
    level
        Уровень логирования, число или имя в любом регистре.
    log_file
        Файл для логов с ротацией; *None* означает только stdout.
    log_format
        Строка формата для :class:`logging.Formatter`.
    replace_handlers
        *True* снимает ранее установленные обработчики (повторный вызов из
        CLI или тестов не дублирует вывод).
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(_normalize_level(level))

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    for handler in _build_handlers(log_file, log_format):
        lg.addHandler(handler)

    # the service does not write into the host application's root logger
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Вызывается группой CLI один раз перед выполнением команды."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def get_logger(suffix: str) -> logging.Logger:
    """Дочерний логгер ``ArmoryScout.<suffix>``; пишет через обработчики ``ArmoryScout``."""
    return logging.getLogger(f"{LOGGER_NAME}.{suffix}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "LOGGER_NAME", "DEFAULT_FORMAT"]
