"""
Logging for the Share Ledger.

Every module logs through ``get_logger(__name__)``. Records go to stdout,
colored when stdout is a terminal, and to a rotating log file.

Environment:
    LOG_LEVEL: Initial level (default INFO)
    LEDGER_LOG_FILE: Log file path (default logs/ledger.log)
    NO_COLOR: Disable colored console output when set
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE = "logs/ledger.log"

MAX_LOG_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_BACKUPS = 5

RESET = "\033[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\033[90m",        # gray
    logging.INFO: "\033[92m",         # green
    logging.WARNING: "\033[93m",      # yellow
    logging.ERROR: "\033[91m",        # red
    logging.CRITICAL: "\033[1;91m",   # bold red
}


class ConsoleFormatter(logging.Formatter):
    """Colors each line by level unless color is disabled."""

    def __init__(self, use_color: bool = True):
        super().__init__(LOG_FORMAT, DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_color:
            return message
        return f"{LEVEL_COLORS.get(record.levelno, RESET)}{message}{RESET}"


def _console_supports_color() -> bool:
    if os.getenv("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def _resolve_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ConsoleFormatter(use_color=_console_supports_color()))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logger(
    name: str,
    level: int | str | None = None,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """
    Set up and return a configured logger.

    Args:
        name: Logger name, typically the module name like "src.share_ledger.ledger"
        level: Log level. Defaults to LOG_LEVEL env var or INFO
        log_file: Log file path. Defaults to LEDGER_LOG_FILE env var or logs/ledger.log

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logger("share_ledger.ledger")
        >>> logger.info("Ledger restored")
    """
    logger = logging.getLogger(name)

    # Already configured
    if logger.handlers:
        return logger

    resolved = _resolve_level(level)
    logger.setLevel(resolved)
    logger.addHandler(_console_handler(resolved))
    logger.addHandler(
        _file_handler(Path(log_file or os.getenv("LEDGER_LOG_FILE", DEFAULT_LOG_FILE)), resolved)
    )
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name, configuring it on first use."""
    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name)


def set_log_level(level: int | str) -> None:
    """
    Change the level of every logger created by setup_logger.

    Used by the CLI to apply LedgerConfig.log_level.

    Args:
        level: New log level
    """
    resolved = _resolve_level(level)
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and logger.handlers:
            logger.setLevel(resolved)
            for handler in logger.handlers:
                handler.setLevel(resolved)
