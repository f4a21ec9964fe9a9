"""
Telemetry module for service-batch.

Provides structured logging with batch-scoped context.
"""

from service_batch.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    SecretMasker,
    ServiceBatchLogger,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "SecretMasker",
    "ServiceBatchLogger",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_context",
    "set_log_context",
]
