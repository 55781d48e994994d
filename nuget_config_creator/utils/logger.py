"""
Logging configuration for NuGet Config Creator.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime
from typing import Optional, Dict, Any


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset_color = self.COLORS['RESET']

        # Color a copy so file handlers sharing the record stay plain
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{log_color}{record.levelname}{reset_color}"

        return super().format(record)


# Global configuration for logging with thread synchronization
_global_config: Optional[Dict[str, Any]] = None
_log_file_path: Optional[str] = None
_logger_instances: Dict[str, logging.Logger] = {}
_global_state_lock = threading.RLock()

CONSOLE_FORMAT = '%(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _level_from_config() -> int:
    """Resolve the logging level from the global configuration."""
    if not _global_config:
        return logging.WARNING
    if _global_config.get('debug_mode'):
        return logging.DEBUG
    if _global_config.get('quiet'):
        return logging.ERROR
    return logging.WARNING


def set_global_config(config: Dict[str, Any]) -> None:
    """
    Set global configuration for logging with thread safety.

    Recognised keys are ``debug_mode`` (DEBUG level plus a timestamped log
    file), ``quiet`` (ERROR level) and ``log_file`` (explicit log file path).

    Args:
        config: Configuration dictionary
    """
    global _global_config, _log_file_path
    with _global_state_lock:
        _global_config = dict(config)
        _log_file_path = config.get('log_file')

        if not _log_file_path and config.get('debug_mode'):
            from ..constants import get_log_dir
            log_dir = get_log_dir()
            try:
                log_dir.mkdir(parents=True, exist_ok=True)
                timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
                _log_file_path = str(log_dir / f'ncc_{timestamp}.log')
            except OSError:
                # File logging is optional, console logging still works
                _log_file_path = None

        _reconfigure_all_loggers()


def get_current_log_file() -> Optional[str]:
    """Get the current log file path if file logging is active."""
    with _global_state_lock:
        return _log_file_path


def _build_handlers(level: int) -> list[logging.Handler]:
    """Create the console handler and, when enabled, the file handler."""
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [console_handler]

    if _log_file_path:
        try:
            file_handler = logging.FileHandler(_log_file_path, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            handlers.append(file_handler)
        except OSError:
            # Don't log this error to avoid recursion
            pass

    return handlers


def _reconfigure_all_loggers() -> None:
    """Reconfigure all existing loggers with new settings."""
    # Called from set_global_config which already holds the lock
    level = _level_from_config()
    for logger in _logger_instances.values():
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.DEBUG if _log_file_path else level)
        for handler in _build_handlers(level):
            logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger instance with thread safety.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    with _global_state_lock:
        if name in _logger_instances:
            return _logger_instances[name]

        level = _level_from_config()

        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG if _log_file_path else level)
        logger.handlers.clear()
        for handler in _build_handlers(level):
            logger.addHandler(handler)

        logger.propagate = False

        _logger_instances[name] = logger
        return logger
