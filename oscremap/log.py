"""Logging for oscremap.

Every module logs through get_logger(__name__). Lines look like:

    [E 14:23:45.123 routes   ] Wildcard source '/lx/*' cannot fan out to multiple destinations (...) - skipping (remote 'Console')

Tracebacks from logger.exception() follow the line, indented so they stay
visually attached to it. The level comes from the caller, else
OSCREMAP_LOG_LEVEL, else INFO; set_level() changes it for the whole package.
"""
import logging
import sys
import os
import threading
from typing import Optional


LOG_LEVEL_ENV_VAR = "OSCREMAP_LOG_LEVEL"
PACKAGE_LOGGER = "oscremap"
MODULE_WIDTH = 9

_logger_init_lock = threading.Lock()


def _level_number(level: Optional[str]) -> int:
    """Level name to logging constant; unknown names map to INFO."""
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV_VAR, "INFO")
    return getattr(logging, level.upper(), logging.INFO)


class RemapFormatter(logging.Formatter):
    """Formatter producing `[{level[0]} {time} {module[:9]}] {message}`."""

    def format(self, record):
        module = record.name.rsplit('.', 1)[-1][:MODULE_WIDTH].ljust(MODULE_WIDTH)
        timestamp = f"{self.formatTime(record, '%H:%M:%S')}.{record.msecs:03.0f}"
        line = f"[{record.levelname[0]} {timestamp} {module}] {record.getMessage()}"

        if record.exc_info:
            trace = self.formatException(record.exc_info)
            line += "\n" + "\n".join(f"    {row}" for row in trace.splitlines())
        return line


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get the logger for an oscremap module, with a stdout handler attached.

    Args:
        name: Module name (usually __name__)
        level: Optional level name (DEBUG/INFO/WARNING/ERROR)

    Example:
        >>> logger = get_logger("oscremap.config")
        >>> logger.info("Loaded 2 remote configurations")
        [I 14:23:45.123 config   ] Loaded 2 remote configurations
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level_number(level))

    with _logger_init_lock:
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(RemapFormatter())
            logger.addHandler(handler)

    return logger


def set_level(level: str) -> None:
    """Apply a level to every oscremap logger created so far."""
    number = _level_number(level)
    with _logger_init_lock:
        names = [n for n in logging.Logger.manager.loggerDict
                 if n == PACKAGE_LOGGER or n.startswith(PACKAGE_LOGGER + ".")]
    for name in names:
        logging.getLogger(name).setLevel(number)
