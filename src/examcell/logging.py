"""Logging setup for the exam cell backend.

Every component logs through a child of the ``examcell`` logger, so one call to
:func:`setup_logging` routes API, auth, grading and store messages into the same
rotating file.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "examcell"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "examcell.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# JWTs first, so a bearer header holding one is reported as a JWT
_REDACTIONS = [
    (re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+"), "[JWT]"),
    (re.compile(r"Bearer [\w.\[\]-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[\w.-]+"), "token=[REDACTED]"),
    (re.compile(r"password=\S+"), "password=[REDACTED]"),
]


def _from_env(value: str | Path | None, variable: str, default: str) -> str | Path:
    if value is not None:
        return value
    return os.environ.get(variable, default)


def _build_handlers(
    log_path: Path, max_bytes: int, backup_count: int, console: bool
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
    ]
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``examcell`` logger.

    Calling it again replaces the previous handlers, so the CLI and tests can
    reconfigure freely.

    Args:
        log_dir: Directory for the log file. Falls back to ``EXAMCELL_LOG_DIR``,
            then ``logs``.
        log_file: File name inside ``log_dir``.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        level: Level name. Falls back to ``EXAMCELL_LOG_LEVEL``, then ``INFO``.
        console: Also write to stderr.

    Returns:
        The configured ``examcell`` logger.
    """
    directory = Path(_from_env(log_dir, "EXAMCELL_LOG_DIR", DEFAULT_LOG_DIR))
    directory.mkdir(parents=True, exist_ok=True)
    level_name = str(_from_env(level, "EXAMCELL_LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_path = directory / log_file
    for handler in _build_handlers(log_path, max_bytes, backup_count, console):
        logger.addHandler(handler)

    logger.info("Logging to %s at %s", log_path, level_name)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the ``examcell.<name>`` logger for a component such as ``"api"``."""
    if not name.startswith(f"{ROOT_LOGGER}."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def sanitize_for_log(text: str) -> str:
    """Redact bearer tokens, JWTs and password/token parameters from ``text``."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text
