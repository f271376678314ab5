"""Logging setup: level names and the console and log-file line formats."""

from __future__ import annotations

import logging
import os
import sys
import time

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LOGGER_NAME = "m8mouse"

_LEVEL_NAMES = {
    TRACE: "TRACE",
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "FATAL",
}


def level_name(level):
    """Return the short name used in log lines for a logging level."""
    try:
        return _LEVEL_NAMES[level]
    except KeyError:
        raise ValueError(f"unknown log level: {level!r}") from None


class _LineFormatter(logging.Formatter):
    """Shared layout: ``<time> <LEVEL> <file>:<line>: <message>``."""

    time_format = "%H:%M:%S"

    def _line(self, record):
        stamp = time.strftime(self.time_format, time.localtime(record.created))
        name = _LEVEL_NAMES.get(record.levelno, record.levelname)
        line = f"{stamp} {name:<5} {record.filename}:{record.lineno}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ConsoleFormatter(_LineFormatter):
    """Formatter for the console: time of day only."""

    time_format = "%H:%M:%S"

    def format(self, record):
        return self._line(record)


class FileFormatter(_LineFormatter):
    """Formatter for log files: full date and time."""

    time_format = "%Y-%m-%d %H:%M:%S"

    def format(self, record):
        return self._line(record)


def configure_logging(level, logfile=None):
    """Send package logs to stderr at ``level`` and, if given, everything to ``logfile``.

    Calling it again replaces the handlers installed by an earlier call.
    Returns the package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in [h for h in logger.handlers if getattr(h, "_m8mouse_handler", False)]:
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(ConsoleFormatter())
    console._m8mouse_handler = True
    logger.addHandler(console)

    lowest = level
    if logfile is not None:
        file_handler = logging.FileHandler(os.fspath(logfile), mode="a", encoding="utf-8")
        file_handler.setLevel(TRACE)
        file_handler.setFormatter(FileFormatter())
        file_handler._m8mouse_handler = True
        logger.addHandler(file_handler)
        lowest = min(lowest, TRACE)

    logger.setLevel(lowest)
    return logger