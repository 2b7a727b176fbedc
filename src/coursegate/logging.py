"""Logging setup for coursegate.

All components log under the ``coursegate`` logger into one rotating file.
Seat-changing ledger events are also written to a separate enrollment log,
so the history of who took and released which seat can be kept apart from
server noise.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "coursegate.log"
DEFAULT_LEDGER_LOG_FILE = "enrollments.log"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5
DEFAULT_LOG_LEVEL = "INFO"

ROOT_LOGGER = "coursegate"
LEDGER_LOGGER = "coursegate.ledger"

# Thread name included: concurrent enrollments interleave
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


def _rotating_handler(
    path: Path, max_bytes: int, backup_count: int, level: int, formatter: logging.Formatter
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    ledger_log_file: str | None = DEFAULT_LEDGER_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    level: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """Attach rotating file handlers to the coursegate loggers.

    Args:
        log_dir: Directory for log files. Falls back to COURSEGATE_LOG_DIR,
                 then 'logs' in the current directory.
        log_file: File for every coursegate record.
        ledger_log_file: Extra file that only receives enrollment ledger
                 records (enroll, drop, complete, progress). None disables it.
        max_bytes: Maximum size per log file before rotation.
        backup_count: Number of rotated files to keep.
        level: Log level name. Falls back to COURSEGATE_LOG_LEVEL, then INFO.
        console: Whether to also log to stderr.

    Returns:
        The ``coursegate`` logger.
    """
    if log_dir is None:
        log_dir = os.environ.get("COURSEGATE_LOG_DIR", DEFAULT_LOG_DIR)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        level = os.environ.get("COURSEGATE_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    _reset_handlers(logger)

    log_path = log_dir / log_file
    logger.addHandler(_rotating_handler(log_path, max_bytes, backup_count, log_level, formatter))

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # Ledger records still propagate to the main file
    ledger_logger = logging.getLogger(LEDGER_LOGGER)
    _reset_handlers(ledger_logger)
    if ledger_log_file is not None:
        ledger_logger.addHandler(
            _rotating_handler(
                log_dir / ledger_log_file, max_bytes, backup_count, log_level, formatter
            )
        )

    logger.info(
        "coursegate logging initialized (level=%s, file=%s, enrollments=%s)",
        level,
        log_path,
        ledger_log_file,
    )

    return logger
