from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from . import config

LOGGER = logging.getLogger("casewatch")
_LOGGER_INITIALISED = False
_CURRENT_LOG_FILE: Path = config.LOG_FILE

LOG_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _build_handlers(log_path: Path) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: List[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(log_path, encoding="utf-8"),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _drop_handlers() -> None:
    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue


def _configure_logger(log_path: Path) -> None:
    """Point the shared ``casewatch`` logger at stdout and ``log_path``."""

    global _LOGGER_INITIALISED, _CURRENT_LOG_FILE

    log_path.parent.mkdir(parents=True, exist_ok=True)
    _drop_handlers()
    for handler in _build_handlers(log_path):
        LOGGER.addHandler(handler)
    LOGGER.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)
    LOGGER.propagate = False

    _CURRENT_LOG_FILE = log_path
    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    if not _LOGGER_INITIALISED:
        _configure_logger(config.LOG_FILE)


def setup_run_logger(started_at: Optional[datetime] = None) -> Path:
    """Switch logging to ``poll_<timestamp>.log`` for a new run."""

    started_at = started_at or datetime.now(timezone.utc)
    log_path = config.LOG_DIR / f"poll_{started_at.strftime('%Y%m%d_%H%M%S')}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def get_current_log_path() -> Path:
    _ensure_logger()
    return _CURRENT_LOG_FILE


def ensure_dirs() -> None:
    """Create the data, log and export directories if missing."""

    for directory in (config.DATA_DIR, config.LOG_DIR, config.EXPORTS_DIR):
        Path(directory).mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Write a timestamped line to stdout and the active log file."""

    _ensure_logger()
    LOGGER.info(message)


def log_debug(message: str) -> None:
    """Only emitted when ``CASEWATCH_DEBUG`` is set."""

    _ensure_logger()
    LOGGER.debug(message)


def log_warning(message: str) -> None:
    _ensure_logger()
    LOGGER.warning(message)


def flush_logging() -> None:
    """Push buffered log output to stdout and the log file."""

    for handler in list(LOGGER.handlers):
        try:
            handler.flush()
        except Exception:  # noqa: BLE001
            continue
