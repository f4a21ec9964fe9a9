"""
Structured logging for service-batch.

Provides context-aware logging that masks credentials in messages and fields.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Iterator

# Context variable for batch-scoped logging context
_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        """Convert to standard logging level."""
        return getattr(logging, self.value)


@dataclass
class LogContext:
    """Batch-scoped logging context.

    Attributes:
        batch_id: Identifier of the batch being executed
        window_id: Identifier of the client-side batch window
        service: Target service name
        method: Service method
        extra: Additional context fields
    """

    batch_id: str | None = None
    window_id: str | None = None
    service: str | None = None
    method: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        if self.batch_id:
            result["batch_id"] = self.batch_id
        if self.window_id:
            result["window_id"] = self.window_id
        if self.service:
            result["service"] = self.service
        if self.method:
            result["method"] = self.method
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> LogContext:
        """Create new context with additional fields."""
        return LogContext(
            batch_id=self.batch_id,
            window_id=self.window_id,
            service=self.service,
            method=self.method,
            extra={**self.extra, **kwargs},
        )


_CONTEXT_FIELDS = ("batch_id", "window_id", "service", "method")


def get_log_context() -> LogContext:
    """Get current logging context."""
    data = _log_context.get()
    if not data:
        return LogContext()
    known = {k: v for k, v in data.items() if k in _CONTEXT_FIELDS}
    extra = {k: v for k, v in data.items() if k not in _CONTEXT_FIELDS}
    return LogContext(**known, extra=extra)


def set_log_context(context: LogContext) -> None:
    """Set logging context for current async context."""
    _log_context.set(context.to_dict())


def clear_log_context() -> None:
    """Clear logging context."""
    _log_context.set(None)


@contextmanager
def log_context(context: LogContext) -> Iterator[LogContext]:
    """Apply a logging context for the duration of a block."""
    token = _log_context.set(context.to_dict())
    try:
        yield context
    finally:
        _log_context.reset(token)


class SecretMasker:
    """Scrubs credentials that can ride along in error text.

    Transport and service errors end up in log fields verbatim; their
    messages may quote a request URL or an auth header.
    """

    # Group 1 is kept, the rest of the match is redacted.
    DEFAULT_PATTERNS: ClassVar[tuple[str, ...]] = (
        r"(://[^/\s:@]+:)[^/\s@]+(?=@)",
        r"([?&](?:access_?token|token|api_?key|password)=)[^&\s\"']+",
        r"(Bearer\s+)[^\s\"',]+",
    )

    def __init__(self, patterns: tuple[str, ...] | None = None) -> None:
        self._patterns = [
            re.compile(p, re.IGNORECASE)
            for p in (self.DEFAULT_PATTERNS if patterns is None else patterns)
        ]

    def mask(self, text: str) -> str:
        """Mask credentials in text."""
        for pattern in self._patterns:
            text = pattern.sub(r"\1***", text)
        return text

    def mask_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Mask string values; counts and ids pass through."""
        return {
            key: self.mask(value) if isinstance(value, str) else value
            for key, value in fields.items()
        }


class _FieldsMixin:
    """Masked keyword fields of a record."""

    _masker: SecretMasker

    def record_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        return self._masker.mask_fields(getattr(record, "extra_fields", {}))


class JsonFormatter(_FieldsMixin, logging.Formatter):
    """One JSON object per record; batch context nests under ``context``."""

    def __init__(
        self,
        masker: SecretMasker | None = None,
        include_timestamp: bool = True,
    ) -> None:
        super().__init__()
        self._masker = masker or SecretMasker()
        self._include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": self._masker.mask(record.getMessage()),
        }
        if self._include_timestamp:
            log_data["timestamp"] = time.strftime(
                "%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)
            ) + f".{int(record.msecs):03d}Z"
        if context := get_log_context().to_dict():
            log_data["context"] = context
        log_data.update(self.record_fields(record))
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class TextFormatter(_FieldsMixin, logging.Formatter):
    """Single-line text: ``time | level | logger | message | k=v ...``."""

    def __init__(
        self,
        masker: SecretMasker | None = None,
        include_context: bool = True,
    ) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._masker = masker or SecretMasker()
        self._include_context = include_context

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = self._masker.mask(super().formatMessage(record))
        fields = get_log_context().to_dict() if self._include_context else {}
        fields.update(self.record_fields(record))
        if not fields:
            return line
        return f"{line} | " + " ".join(f"{k}={v}" for k, v in fields.items())


class ServiceBatchLogger:
    """Logger for service-batch with structured logging support.

    Example:
        >>> logger = ServiceBatchLogger.get_logger("service_batch.batch")
        >>> logger.debug("Batch window closed", entries=3, waiters=4)
    """

    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[LogLevel] = LogLevel.WARNING
    _formatter: ClassVar[logging.Formatter | None] = None
    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "json",
        stream: Any = None,
        masker: SecretMasker | None = None,
    ) -> None:
        """Configure global logging settings.

        Args:
            level: Log level
            format: Output format ('json' or 'text')
            stream: Output stream (default: stderr)
            masker: Credential masker for messages and fields
        """
        cls._level = level

        if format == "json":
            cls._formatter = JsonFormatter(masker=masker)
        else:
            cls._formatter = TextFormatter(masker=masker)

        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(cls._formatter)
        cls._handler.setLevel(level.to_logging_level())

        for logger in cls._loggers.values():
            logger.handlers.clear()
            logger.addHandler(cls._handler)
            logger.setLevel(level.to_logging_level())

    @classmethod
    def get_logger(cls, name: str) -> ServiceBatchLogger:
        """Get or create a logger.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            logger.setLevel(cls._level.to_logging_level())

            if cls._handler:
                logger.handlers.clear()
                logger.addHandler(cls._handler)
            elif not logger.handlers:
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(TextFormatter())
                logger.addHandler(handler)

            logger.propagate = False
            cls._loggers[name] = logger

        return cls(cls._loggers[name])

    def __init__(self, logger: logging.Logger) -> None:
        """Initialize with underlying logger."""
        self._logger = logger

    def _log(
        self, level: int, msg: str, exc_info: bool = False, **kwargs: Any
    ) -> None:
        extra = {"extra_fields": kwargs} if kwargs else {}
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, msg, exc_info=exc_info, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)

    @property
    def underlying(self) -> logging.Logger:
        """Get the wrapped standard library logger."""
        return self._logger


def get_logger(name: str) -> ServiceBatchLogger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return ServiceBatchLogger.get_logger(name)
