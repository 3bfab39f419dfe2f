from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

LOG_LEVEL_ENV = "VOLTNET_LOG_LEVEL"
LOG_FILE_NAME = "voltnet.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# libraries whose INFO output is transport chatter
NOISY_LOGGERS = ("aiohttp", "asyncio")


def resolve_level(default: str = "INFO") -> int:
    """Level named by ``VOLTNET_LOG_LEVEL``; unknown names fall back to INFO."""
    name = os.environ.get(LOG_LEVEL_ENV, default).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _file_handler(log_dir: Path) -> logging.Handler:
    log_dir.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )


def configure_logging(log_dir: Path | None = None) -> None:
    """Route SDK logs to the console and, with ``log_dir``, to a rotating file.

    Replaces any handlers already on the root logger, so calling it twice
    does not duplicate output.
    """
    level = resolve_level()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir:
        handlers.append(_file_handler(Path(log_dir)))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    noisy_level = level if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
