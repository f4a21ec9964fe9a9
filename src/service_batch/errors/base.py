"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for service-batch.

Provides a layered error hierarchy:
- ServiceBatchError: Base class for all library errors
- ConfigurationError: Invalid setup of an integration point
- TransportError: Network errors and batch protocol violations
- ServiceError: Remote service errors (see errors.service)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'calls[0][1]')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'config', 'transport')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class ServiceBatchError(Exception):
    """Base class for all service-batch errors.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> ServiceBatchError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class ConfigurationError(ServiceBatchError):
    """Invalid configuration passed to an integration point.

    Raised synchronously at setup time, never at call time. The message is
    kept verbatim so callers can match on it.
    """

    def __init__(
        self,
        message: str,
        *,
        option: str | None = None,
    ) -> None:
        ctx = ErrorContext()
        if option:
            ctx.details["option"] = option
        super().__init__(message, ctx)
        self.option = option

    def _format_message(self) -> str:
        return self.message


class TransportError(ServiceBatchError):
    """Error while moving a call or a batch across the wire.

    Raised when:
    - Network connection failure
    - Timeout
    - The batch endpoint answers with something that is not an aligned
      settled-result list
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code
        self.__cause__ = cause
