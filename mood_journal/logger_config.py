"""
Logging configuration for mood-journal.

Uses dictConfig so the CLI and the API server can both (re)configure
logging safely.

Environment Variables:
    LOG_LEVEL:              DEBUG, INFO, WARNING, ERROR, CRITICAL
                            (case-insensitive). Defaults to INFO.
    MOOD_JOURNAL_LOG_FILE:  Optional path for a rotating log file.

Usage:
    from mood_journal.logger_config import setup_logging
    setup_logging()

    # Per-package overrides, e.g. silence row-level codec noise:
    setup_logging(level=logging.DEBUG, package_levels={"mood_journal.csvio": "INFO"})
"""

import logging
import logging.config
import os
from typing import Dict, Optional, Union

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_log_level() -> int:
    """
    Get log level from the LOG_LEVEL environment variable.

    Returns:
        Logging level constant; INFO if unset or invalid.
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)

    if level is None or not isinstance(level, int):
        return logging.INFO

    return level


def setup_logging(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
    package_levels: Optional[Dict[str, Union[int, str]]] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Root level. If None, read from LOG_LEVEL (default INFO).
        format_string: Optional custom format string.
        log_file: Optional rotating log file. Falls back to
                  MOOD_JOURNAL_LOG_FILE.
        package_levels: Optional logger name → level overrides.
    """
    if level is None:
        level = get_log_level()

    if log_file is None:
        log_file = os.getenv("MOOD_JOURNAL_LOG_FILE") or None

    config: dict = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": format_string or DEFAULT_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            name: {"level": pkg_level} for name, pkg_level in (package_levels or {}).items()
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }

    if log_file:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 5_242_880,  # 5 MB
            "backupCount": 3,
            "encoding": "utf-8",
        }
        config["root"]["handlers"].append("file")

    logging.config.dictConfig(config)
