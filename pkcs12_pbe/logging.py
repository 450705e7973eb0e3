"""Structured logging with operation correlation.

Provides:
- JSON structured output for log aggregation
- Operation IDs shared by every log line of one encrypt/decrypt call
- Sensitive data masking (passwords, keys, salts and IVs never reach a handler)
- Operation timing

Usage:
    from pkcs12_pbe.logging import get_logger, operation_context

    logger = get_logger(__name__)

    with operation_context("decrypt"):
        logger.info("Decrypting bag", scheme=descriptor.scheme.value)
"""

import json
import logging
import sys
import time
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Generator

operation_id_var: ContextVar[str | None] = ContextVar("operation_id", default=None)
operation_name_var: ContextVar[str | None] = ContextVar("operation_name", default=None)

# Fields that must never be logged verbatim
SENSITIVE_FIELDS = {
    "password", "passphrase", "secret", "key", "iv", "salt",
    "plaintext", "message", "private_key",
}


def mask_sensitive(data: dict[str, Any]) -> dict[str, Any]:
    """Mask sensitive values in a dictionary."""
    masked = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(s in key_lower for s in SENSITIVE_FIELDS):
            masked[key] = "[REDACTED]"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive(value)
        elif isinstance(value, (bytes, bytearray)):
            masked[key] = f"<{len(value)} bytes>"
        else:
            masked[key] = value
    return masked


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if operation_id := operation_id_var.get():
            log_entry["operation_id"] = operation_id
        if operation_name := operation_name_var.get():
            log_entry["operation"] = operation_name

        if hasattr(record, "extra_fields"):
            log_entry.update(mask_sensitive(record.extra_fields))

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.WARNING:
            log_entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_entry, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")

        prefix = ""
        if operation_id := operation_id_var.get():
            prefix = f"[op={operation_id[:8]}] "

        extra_str = ""
        if hasattr(record, "extra_fields") and record.extra_fields:
            masked = mask_sensitive(record.extra_fields)
            extra_str = " | " + " ".join(f"{k}={v}" for k, v in masked.items())

        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        level = record.levelname[:4]

        message = (
            f"{color}{timestamp} {level}{self.RESET} "
            f"[{record.name}] {prefix}{record.getMessage()}{extra_str}"
        )

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


class StructuredLogger(logging.Logger):
    """Logger with structured logging support."""

    def _log_with_extra(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        **kwargs,
    ):
        extra = {"extra_fields": kwargs} if kwargs else {}
        super()._log(level, msg, args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args, **kwargs):
        if self.isEnabledFor(logging.DEBUG):
            self._log_with_extra(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        if self.isEnabledFor(logging.INFO):
            self._log_with_extra(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        if self.isEnabledFor(logging.WARNING):
            self._log_with_extra(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args, exc_info: Any = None, **kwargs):
        if self.isEnabledFor(logging.ERROR):
            self._log_with_extra(logging.ERROR, msg, args, exc_info=exc_info, **kwargs)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module."""
    logging.setLoggerClass(StructuredLogger)
    logger = logging.getLogger(name)
    logging.setLoggerClass(logging.Logger)
    return logger


def setup_logging(json_output: bool | None = None, level: str | None = None):
    """Configure logging for the library's loggers.

    Args:
        json_output: Use JSON format (defaults to settings.log_json)
        level: Logging level (defaults to settings.log_level)
    """
    from pkcs12_pbe.config import get_settings

    settings = get_settings()
    if json_output is None:
        json_output = settings.log_json
    if level is None:
        level = settings.log_level

    package_logger = logging.getLogger("pkcs12_pbe")
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_output:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(HumanFormatter())

    package_logger.addHandler(handler)
    package_logger.propagate = False


@contextmanager
def operation_context(name: str) -> Generator[str, None, None]:
    """Tag every log line emitted inside the block with one operation ID."""
    operation_id = str(uuid.uuid4())
    id_token = operation_id_var.set(operation_id)
    name_token = operation_name_var.set(name)
    try:
        yield operation_id
    finally:
        operation_id_var.reset(id_token)
        operation_name_var.reset(name_token)


def log_operation(operation: str):
    """Decorator to log function execution with timing."""
    def decorator(func: Callable):
        logger = get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.monotonic()
            with operation_context(operation):
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    duration_ms = (time.monotonic() - start) * 1000
                    logger.info(
                        f"{operation} failed",
                        error_type=type(e).__name__,
                        duration_ms=round(duration_ms, 2),
                    )
                    raise
                duration_ms = (time.monotonic() - start) * 1000
                logger.debug(
                    f"{operation} completed",
                    duration_ms=round(duration_ms, 2),
                )
                return result

        return wrapper

    return decorator
