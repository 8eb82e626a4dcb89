"""Shared logging configuration for GridSheet."""

import logging
import os
from pathlib import Path
from datetime import datetime

# Global logger instance
_logger = None

LOGGER_NAME = "gridsheet"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level():
    """Read the log level from GRIDSHEET_LOG_LEVEL, defaulting to WARNING."""
    level_name = os.environ.get("GRIDSHEET_LOG_LEVEL", "WARNING").upper()
    level = logging.getLevelName(level_name)
    if isinstance(level, int):
        return level
    return logging.WARNING


def get_logger():
    """Get or create the logger instance."""
    global _logger

    if _logger is not None:
        return _logger

    level = _resolve_level()

    try:
        # Logs live next to the user settings file
        log_dir = Path.home() / ".gridsheet" / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        # Create log file with timestamp
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"gridsheet_{timestamp}.log"

        _logger = logging.getLogger(LOGGER_NAME)
        _logger.setLevel(level)

        formatter = logging.Formatter(LOG_FORMAT)
        for handler in (
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(),  # Also print to console
        ):
            handler.setFormatter(formatter)
            _logger.addHandler(handler)

        return _logger

    except OSError as e:
        print(f"Failed to setup logging: {e}")

        # Return a basic logger if setup fails
        _logger = logging.getLogger(LOGGER_NAME)
        _logger.setLevel(level)
        return _logger


# Initialize logger on import
logger = get_logger()
