"""Logging configuration with secret redaction."""

import logging
import re
import time
from pathlib import Path
from typing import ClassVar


class SecretRedactingFilter(logging.Filter):
    """Filter that redacts access tokens from log messages."""

    SECRET_PATTERNS: ClassVar[list[tuple[re.Pattern[str], str]]] = [
        # Classic, OAuth, user-to-server and server-to-server tokens
        (re.compile(r"gh[pous]_[a-zA-Z0-9]{20,}"), "[REDACTED_GH_TOKEN]"),
        (re.compile(r"github_pat_[a-zA-Z0-9_]+"), "[REDACTED_GH_PAT]"),
        (re.compile(r"Bearer\s+[a-zA-Z0-9_\-\.]+"), "Bearer [REDACTED]"),
        (
            re.compile(
                r"(Authorization['\"]?:\s*['\"]?(?:(?:token|bearer)\s+)?)(?!\[)[^\s,'\"\]]+",
                re.IGNORECASE,
            ),
            r"\1[REDACTED]",
        ),
        (re.compile(r"(access_token[=:]\s*)[^\s,&\]]+", re.IGNORECASE), r"\1[REDACTED]"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and redact secrets from log record."""
        record.msg = self._redact(str(record.msg))
        if record.args:
            record.args = tuple(
                self._redact(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True

    def _redact(self, text: str) -> str:
        for pattern, replacement in self.SECRET_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


def setup_logging(
    verbose: bool = False,
    json_format: bool = False,
    log_path: Path | None = None,
    log_time_as_utc: bool = False,
) -> None:
    """Configure logging for applications using the library.

    Args:
        verbose: Enable debug level logging.
        json_format: Use JSON format for logs (useful for structured logging).
        log_path: Also append log records to this file.
        log_time_as_utc: Stamp records in UTC instead of local time.
    """
    level = logging.DEBUG if verbose else logging.INFO

    if json_format:
        format_str = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"process": %(process)d, "name": "%(name)s", "message": "%(message)s"}'
        )
    else:
        format_str = "%(asctime)s | %(levelname)-8s | %(process)d | %(name)s | %(message)s"

    formatter = logging.Formatter(format_str, datefmt="%Y-%m-%d %H:%M:%S")
    if log_time_as_utc:
        formatter.converter = time.gmtime

    # Configure root logger; handlers installed by the host application are kept
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)
    root_logger.setLevel(level)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Add secret redaction filter to all handlers
    redaction_filter = SecretRedactingFilter()
    for handler in root_logger.handlers:
        if not any(isinstance(f, SecretRedactingFilter) for f in handler.filters):
            handler.addFilter(redaction_filter)

    # Request-level chatter is already logged by the executor
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)
