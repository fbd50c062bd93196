"""
Logging utilities for agentshot.

Library modules obtain loggers through :func:`get_logger` and only emit debug
records. Handlers are installed by the CLI via :func:`setup_logger`, with a
formatter that masks token-like strings so agent credentials never reach a log.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "agentshot"

_TOKEN_PATTERNS = [
    re.compile(r"\bsk-[A-Za-z0-9_-]+"),     # OpenAI / Anthropic style
    re.compile(r"\bghp_[A-Za-z0-9_-]+"),    # GitHub tokens
    re.compile(r"\b[A-Za-z0-9_-]{32,}\b"),  # Generic API keys
]

MAX_LOG_MESSAGE_LENGTH = 2000
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def sanitize_for_logging(message: str) -> str:
    """
    Mask secrets in *message* and truncate it for safe logging.

    Args:
        message: Message to sanitize

    Returns:
        str: Sanitized message
    """
    if not isinstance(message, str):
        return str(message)

    sanitized = message
    for pattern in _TOKEN_PATTERNS:
        sanitized = pattern.sub("[REDACTED]", sanitized)

    if len(sanitized) > MAX_LOG_MESSAGE_LENGTH:
        sanitized = sanitized[:MAX_LOG_MESSAGE_LENGTH] + "..."
    return sanitized


class SecurityFormatter(logging.Formatter):
    """
    Logging formatter that sanitizes the message and its string arguments.
    """

    def format(self, record):
        if isinstance(record.msg, str):
            record.msg = sanitize_for_logging(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                sanitize_for_logging(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return super().format(record)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Set up a logger writing masked records to stderr and, optionally, a file.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = SecurityFormatter(LOG_FORMAT)

    # stderr keeps agent output on stdout clean for piping
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child of the package logger.

    Args:
        name: Logger name

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(ROOT_LOGGER_NAME).getChild(name)


__all__ = [
    "ROOT_LOGGER_NAME",
    "SecurityFormatter",
    "get_logger",
    "sanitize_for_logging",
    "setup_logger",
]
