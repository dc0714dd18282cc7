"""
Logging for Modwarden.

Every module asks for its logger through :func:`get_logger`. Each logger
writes DEBUG and up to one rotating file per bot session under ``logs/`` and
INFO and up to the console through prompt_toolkit (coloured on a TTY).

Environment overrides:
    MODWARDEN_LOG_DIR: directory for log files (default ``<project>/logs``)
    MODWARDEN_LOG_LEVEL: console level name (default ``INFO``)
"""

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

LOGS_DIR: Path = Path(os.getenv("MODWARDEN_LOG_DIR") or Path(__file__).parents[3] / "logs").resolve()

LOG_FORMAT: str = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

LOG_MAX_BYTES: int = 5 * 1024 * 1024
LOG_BACKUP_COUNT: int = 3

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
RESET_COLOR = "\033[0m"

# Third-party loggers that only get through at ERROR and above
NOISY_LOGGERS = ("discord", "aiosqlite", "asyncio", "websockets", "aiohttp")

_session_log_file: Path | None = None


class ColorFormatter(logging.Formatter):
    """Formatter that wraps each line in the colour of its level."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{text}{RESET_COLOR}" if color else text


class PromptToolkitHandler(logging.Handler):
    """Console handler that prints through ``print_formatted_text``.

    Output then stays intact when an interactive prompt shares the terminal.
    """

    def __init__(self, formatter: logging.Formatter | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        if formatter is not None:
            self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    """True when stderr is a terminal."""
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


def console_level() -> int:
    """Console level from ``MODWARDEN_LOG_LEVEL``; unknown names fall back to INFO."""
    level = logging.getLevelName(os.getenv("MODWARDEN_LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def get_log_filepath() -> Path:
    """Log file shared by every logger of this process, named after the start time."""
    global _session_log_file

    if _session_log_file is None:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        _session_log_file = LOGS_DIR / f"modwarden-{datetime.now():%Y%m%d-%H%M%S}.log"
    return _session_log_file


def setup_logger(logger_name: str) -> logging.Logger:
    """Attach the console and file handlers to ``logger_name`` once.

    Parameters
    ----------
    logger_name:
        Name of the logger to configure.

    Returns
    -------
    logging.Logger
        The configured, non-propagating logger.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    console_formatter = (
        ColorFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        if should_use_color()
        else logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    )
    logger.addHandler(PromptToolkitHandler(console_formatter, level=console_level()))

    file_handler = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(file_handler)

    return logger


def get_logger(logger_name: str) -> logging.Logger:
    """Return the Modwarden logger called ``logger_name``."""
    return setup_logger(logger_name)


def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """``sys.excepthook`` replacement that logs uncaught exceptions.

    Ctrl+C is passed to the default hook so the process still exits quietly.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return

    get_logger("uncaught").critical(
        "Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback)
    )


for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.ERROR)
