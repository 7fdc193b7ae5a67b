"""
Secure Logging Module
=====================

Provides security-aware logging with secret filtering.

Security Features:
- Automatic redaction of key-like material (hex/base64 runs, key=... pairs)
- Rotating log files with size limits
- Structured (JSON) output for log aggregation

Crypto components log through child loggers of ``cipherkit``
(``cipherkit.cbc``, ``cipherkit.gcm``, ...). Call ``configure_logging()``
once at application startup to attach filtered handlers to the
``cipherkit`` logger.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, Pattern

from cipherkit.core.config import CipherKitConfig, LoggingConfig

ROOT_LOGGER_NAME: Final[str] = "cipherkit"

_CONSOLE_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FILE_FORMAT: Final[str] = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)

# Patterns for sensitive data detection, each with its replacement
_REDACTED_TEXT: Final[str] = "[REDACTED]"
_LABELLED_REDACTION: Final[str] = rf"\1={_REDACTED_TEXT}"

_SENSITIVE_PATTERNS: Final[list[tuple[Pattern[str], str]]] = [
    (re.compile(r'(?i)\b(key|mac_key|secret|private[_-]?key)\s*[=:]\s*["\']?[^\s"\',)]+["\']?'), _LABELLED_REDACTION),
    (re.compile(r'(?i)\b(iv|nonce|tag)\s*[=:]\s*["\']?[^\s"\',)]+["\']?'), _LABELLED_REDACTION),
    # Base64 blobs
    (re.compile(r'[A-Za-z0-9+/]{40,}={0,2}'), _REDACTED_TEXT),
    # Hex blobs (16 bytes and up)
    (re.compile(r'(?i)(?:0x)?[a-f0-9]{32,}'), _REDACTED_TEXT),
]


class SecureLogFilter(logging.Filter):
    """
    Log filter that removes key-like material from log messages.

    The record is always kept, only its text is sanitized.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact the rendered message; bytes arguments are dropped outright."""
        if record.args:
            if isinstance(record.args, dict):
                record.args = {k: self._sanitize_arg(v) for k, v in record.args.items()}
            elif isinstance(record.args, tuple):
                record.args = tuple(self._sanitize_arg(arg) for arg in record.args)

        # Patterns can span the message template and its arguments
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Broken format call: keep the args so the handler reports it
            record.msg = self._sanitize(str(record.msg))
            return True

        record.msg = self._sanitize(message)
        record.args = ()
        return True

    def _sanitize_arg(self, value: object) -> object:
        # Raw bytes in a log call are treated as secret regardless of content
        if isinstance(value, (bytes, bytearray, memoryview)):
            return _REDACTED_TEXT
        return value

    def _sanitize(self, text: str) -> str:
        """Remove sensitive data from text."""
        result = text
        for pattern, replacement in _SENSITIVE_PATTERNS:
            result = pattern.sub(replacement, result)
        return result


class StructuredLogFormatter(logging.Formatter):
    """Formatter that outputs logs as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class SecureRotatingFileHandler(RotatingFileHandler):
    """
    Rotating file handler that creates its directory and rejects
    path traversal in the log file name.
    """

    def __init__(
        self,
        filename: str | Path,
        mode: str = "a",
        maxBytes: int = 10 * 1024 * 1024,
        backupCount: int = 5,
        encoding: str = "utf-8",
    ) -> None:
        if ".." in Path(filename).parts:
            raise ValueError("Log path cannot contain path traversal sequences")

        log_path = Path(filename).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            str(log_path),
            mode=mode,
            maxBytes=maxBytes,
            backupCount=backupCount,
            encoding=encoding,
        )


def get_secure_logger(
    name: str,
    config: Optional[LoggingConfig] = None,
    enable_json: bool = False,
) -> logging.Logger:
    """
    Create a logger with automatic secret filtering.

    Args:
        name: Logger name (typically __name__ or ROOT_LOGGER_NAME)
        config: Logging settings (defaults to the global CipherKitConfig)
        enable_json: Whether to use JSON format for file output

    Returns:
        Configured logger instance. Calling again with the same name
        returns the existing logger unchanged.
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    if config is None:
        config = CipherKitConfig.get_instance().logging

    logger.setLevel(getattr(logging, config.level.upper()))
    secure_filter = SecureLogFilter()

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        console_handler.addFilter(secure_filter)
        logger.addHandler(console_handler)

    if config.enable_file and config.log_dir is not None:
        file_handler = SecureRotatingFileHandler(
            filename=config.log_dir / f"{name.replace('.', '_')}.log",
            maxBytes=config.max_file_size_bytes,
            backupCount=config.backup_count,
        )
        file_handler.setLevel(logging.DEBUG)

        if enable_json:
            file_handler.setFormatter(StructuredLogFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

        file_handler.addFilter(secure_filter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def configure_logging(
    config: Optional[LoggingConfig] = None,
    enable_json: bool = False,
) -> logging.Logger:
    """
    Attach filtered handlers to the ``cipherkit`` package logger.

    This should be called once at application startup; every crypto
    component logs through a child of this logger.
    """
    return get_secure_logger(ROOT_LOGGER_NAME, config=config, enable_json=enable_json)
