"""
Logging setup for the event export service.

Console output is coloured and kept at the configured level; the rotating
file handler writes structured JSON at full verbosity.
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Dict, Optional, TextIO

from pythonjsonlogger import jsonlogger

LOGGER_NAME = "event_export"

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | [%(name)s] %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s %(lineno)d %(funcName)s'


class ExportConsoleFormatter(logging.Formatter):
    """
    Console formatter that tints the level column by severity.

    Only the level name is coloured, so `[EXPORT]` / `[RESOLVER]` tags in
    messages stay greppable in terminal scrollback. Colour is switched off
    when the stream is not a terminal.
    """

    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: '\033[2;36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[1;33m',
        logging.ERROR: '\033[1;31m',
        logging.CRITICAL: '\033[1;37;41m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str = CONSOLE_FORMAT, datefmt: str = '%H:%M:%S', use_color: bool = True):
        super().__init__(fmt, datefmt=datefmt)
        self.use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        color = self.LEVEL_COLORS.get(record.levelno)
        if not self.use_color or color is None:
            return line
        # Padded level name as it appears in the line
        level = f"{record.levelname:<8}"
        return line.replace(level, f"{color}{level}{self.RESET}", 1)


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = "event_export.log",
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Console log level name
        log_file: Path for the daily-rotated JSON log (None disables it)
        stream: Console stream (default: stdout)

    Returns:
        The configured "event_export" logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream = stream or sys.stdout
    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(ExportConsoleFormatter(use_color=_is_terminal(stream)))
    logger.addHandler(console_handler)

    if log_file:
        # Rotates daily, keeps 7 days of logs.
        file_handler = TimedRotatingFileHandler(
            log_file, when="midnight", interval=1, backupCount=7, encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(jsonlogger.JsonFormatter(
            JSON_FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        ))
        logger.addHandler(file_handler)

    return logger
