# ABOUTME: Logging configuration using loguru, interactive file sinks or production JSON on stdout
# ABOUTME: Mode comes from TOWN_SCRAPER_LOG_MODE or TTY detection; browser libraries are quieted

import logging
import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

LOG_DIR = Path("logs")
MAIN_LOG = "town-scraper.log"
JSON_LOG = "town-scraper.json"
ERROR_LOG = "errors.log"

# Browser automation and event-loop internals are chatty at INFO
QUIET_LOGGERS = ["playwright", "asyncio", "websockets", "urllib3"]

TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
JSON_FORMAT = "{time} | {level} | {name} | {message}"


class LoggingMode:
    """Logging mode constants."""

    INTERACTIVE = "interactive"
    PRODUCTION = "production"


def detect_logging_mode() -> str:
    """Pick the mode from TOWN_SCRAPER_LOG_MODE, else interactive only on a TTY."""
    requested = (os.getenv("TOWN_SCRAPER_LOG_MODE") or "").lower()
    if requested in (LoggingMode.INTERACTIVE, LoggingMode.PRODUCTION):
        return requested
    return LoggingMode.INTERACTIVE if sys.stdout.isatty() else LoggingMode.PRODUCTION


def setup_third_party_logging() -> None:
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    logging.getLogger("py.warnings").setLevel(logging.ERROR)


def _add_file_sinks(log_level: str, log_file: str | None) -> None:
    rotating = {"rotation": "10 MB", "retention": "7 days"}
    logger.add(log_file or LOG_DIR / MAIN_LOG, level=log_level, format=TEXT_FORMAT, **rotating)
    logger.add(LOG_DIR / JSON_LOG, level=log_level, format=JSON_FORMAT, serialize=True, **rotating)
    logger.add(LOG_DIR / ERROR_LOG, level="ERROR", format=TEXT_FORMAT, backtrace=True, diagnose=True)


def configure_logging(mode: str | None = None, log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging using loguru.

    Interactive mode writes a readable log, a JSON log and an errors-only log
    under ``logs/``. Production mode (or an unwritable log directory) emits
    JSON lines on stdout.

    Args:
        mode: Logging mode (interactive/production), auto-detected if None
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Custom path for the readable log, uses logs/town-scraper.log if None
    """
    mode = mode or detect_logging_mode()
    log_level = log_level.upper()
    setup_third_party_logging()
    logging.getLogger().setLevel(getattr(logging, log_level, logging.INFO))

    logger.remove()

    if mode == LoggingMode.INTERACTIVE:
        try:
            LOG_DIR.mkdir(exist_ok=True)
        except OSError:
            mode = LoggingMode.PRODUCTION

    if mode == LoggingMode.PRODUCTION:
        logger.add(sys.stdout, level=log_level, format=JSON_FORMAT, serialize=True)
    else:
        _add_file_sinks(log_level, log_file)


def get_logging_status() -> dict[str, Any]:
    """Describe the active logging setup for the ``logging-status`` command."""
    mode = detect_logging_mode()
    interactive = mode == LoggingMode.INTERACTIVE

    def log_path(name: str) -> str | None:
        return str(LOG_DIR / name) if interactive else None

    return {
        "mode": mode,
        "log_directory": str(LOG_DIR.absolute()) if LOG_DIR.exists() else None,
        "log_files": {"main": log_path(MAIN_LOG), "json": log_path(JSON_LOG), "errors": log_path(ERROR_LOG)},
        "third_party_suppressed": [*QUIET_LOGGERS, "py.warnings"],
    }
