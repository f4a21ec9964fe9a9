"""错误体系：提供结构化的服务错误类型及其跨调用边界的序列化。

Error hierarchy for service-batch.

Provides configuration and transport errors plus the service error taxonomy
that survives serialization across the batch boundary.
"""

from service_batch.errors.base import (
    ConfigurationError,
    ErrorContext,
    ServiceBatchError,
    TransportError,
)
from service_batch.errors.codes import ERROR_KINDS, ErrorKind, from_code, from_name
from service_batch.errors.service import (
    BadGateway,
    BadRequest,
    Conflict,
    ErrorPayload,
    Forbidden,
    GeneralError,
    LengthRequired,
    MethodNotAllowed,
    MethodNotImplemented,
    NotAcceptable,
    NotAuthenticated,
    NotFound,
    PaymentError,
    ServiceError,
    Timeout,
    TooManyRequests,
    Unavailable,
    Unprocessable,
    convert_error,
    error_for_code,
)

__all__ = [
    # Base errors
    "ConfigurationError",
    "ErrorContext",
    "ServiceBatchError",
    "TransportError",
    # Kinds
    "ERROR_KINDS",
    "ErrorKind",
    "from_code",
    "from_name",
    # Service errors
    "BadGateway",
    "BadRequest",
    "Conflict",
    "ErrorPayload",
    "Forbidden",
    "GeneralError",
    "LengthRequired",
    "MethodNotAllowed",
    "MethodNotImplemented",
    "NotAcceptable",
    "NotAuthenticated",
    "NotFound",
    "PaymentError",
    "ServiceError",
    "Timeout",
    "TooManyRequests",
    "Unavailable",
    "Unprocessable",
    "convert_error",
    "error_for_code",
]
