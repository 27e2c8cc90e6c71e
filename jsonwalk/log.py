"""Logging setup for the jsonwalk command line."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

LOGGER_NAME = "jsonwalk"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "props"):
            log_record.update(record.props)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


def setup_logging(level: str = "WARNING", json_format: bool = False) -> logging.Logger:
    """
    Configure the package logger with a single stderr handler.

    Calling it again replaces the previous handler, so the CLI can apply a
    level read from a config file after argument parsing.

    Args:
        level: Level name, e.g. "DEBUG" or "info"
        json_format: Emit JSON records instead of plain text

    Returns:
        The configured "jsonwalk" logger
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level}")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(log_level)
    logger.addHandler(console_handler)
    logger.propagate = False

    return logger
