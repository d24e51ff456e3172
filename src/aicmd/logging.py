"""Logging for aicmd.

Plain stdlib logging under the "aicmd" logger. The line editor owns the
terminal, so records only ever go to a file, never to stderr:

    logging.debug / AI_CMD_DEBUG   DEBUG and up, appended to logging.file
    logging.level                  that level and up, to the same file
    neither                        nothing is written

The debug trace records every state transition, dispatch, poll outcome and
resolution together with buffer, suggestion and overlay text.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aicmd.config.schema import LoggingConfig

logger = logging.getLogger("aicmd")
logger.addHandler(logging.NullHandler())

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

_initialized = False


class _LowercaseLevelFormatter(logging.Formatter):
    """Formatter that emits lowercase level names."""

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def _resolve_level(config: LoggingConfig | None) -> int | None:
    """Level to log at, or None when logging is off."""
    if config is None:
        return None
    if config.debug:
        return logging.DEBUG
    if config.level:
        level = logging.getLevelName(config.level.upper())
        return level if isinstance(level, int) else logging.WARNING
    return None


def _remove_file_handlers() -> None:
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            continue
        logger.removeHandler(handler)
        handler.close()


def setup_logging(config: LoggingConfig | None = None, *, force: bool = False) -> None:
    """Configure the aicmd logger once at startup.

    Args:
        config: Logging settings. None leaves logging off.
        force: Reconfigure even if already set up (used by tests).
    """
    global _initialized
    if _initialized and not force:
        return
    _initialized = True

    _remove_file_handlers()
    level = _resolve_level(config)
    if level is None or config is None:
        logger.setLevel(logging.WARNING)
        return
    logger.setLevel(level)

    try:
        handler = logging.FileHandler(os.path.expanduser(config.file), mode="a", encoding="utf-8")
    except OSError:
        # Unwritable log file: stay silent rather than draw over the prompt
        return
    handler.setLevel(level)
    handler.setFormatter(_LowercaseLevelFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the aicmd logger, or its child ``name`` (e.g. "controller")."""
    return logger.getChild(name) if name else logger
