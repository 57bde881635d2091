"""Logging configuration for Pedido FTP.

All modules log under the "pedido_ftp" namespace. Handlers share a
formatter that scrubs FTP passwords from every record, whether they
appear in a PASS command, an ftpConfig body or an ftp:// URL.
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union


APP_LOGGER_NAME = "pedido_ftp"

# Werkzeug request lines go through the same handlers
SERVER_LOGGER_NAME = "werkzeug"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 1_000_000
LOG_BACKUPS = 3

# PII patterns to redact from logs
PII_PATTERNS = [
    # "password": "..." inside JSON bodies, password=... in query strings
    (re.compile(r'(password["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    (re.compile(r'(passwd["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    # PASS command lines echoed from the control channel
    (re.compile(r'(pass["\s:=]+)[^\s,}\]]+', re.IGNORECASE), r'\1[REDACTED]'),
    # FTP URLs with credentials
    (re.compile(r'ftp://[^:/\s]+:[^@\s]+@'), 'ftp://[REDACTED]@'),
    # IP addresses (partial redaction for privacy)
    (re.compile(r'(\d+\.\d+\.)\d+\.\d+'), r'\1*.*'),
]


def redact(message: str) -> str:
    """Apply every PII pattern to a message."""
    for pattern, replacement in PII_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class PIIRedactingFormatter(logging.Formatter):
    """Formatter that redacts passwords and addresses after formatting."""

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record))


def parse_level(level: Union[int, str]) -> int:
    """Turn a level name such as 'debug' into its logging constant."""
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).strip().upper(), logging.INFO)


def _build_handlers(
    level: int,
    log_file: Optional[Path],
    console: bool
) -> List[logging.Handler]:
    formatter = PIIRedactingFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = []

    if console:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding="utf-8"
        ))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True
) -> logging.Logger:
    """
    Configure the application and HTTP server loggers.

    Calling it again replaces the previous handlers.

    Args:
        level: Logging level or level name such as "DEBUG"
        log_file: Optional rotating log file
        console: Whether to log to stdout

    Returns:
        The "pedido_ftp" logger
    """
    level = parse_level(level)
    handlers = _build_handlers(level, log_file, console)

    for name in (APP_LOGGER_NAME, SERVER_LOGGER_NAME):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False

    return logging.getLogger(APP_LOGGER_NAME)
