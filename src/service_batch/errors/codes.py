"""错误种类表：定义服务错误的名称、数字码和类别。

Service error kinds.

Defines the closed set of error kinds a service can raise across the call
boundary, with their numeric codes and category slugs, plus lookup helpers.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorKind:
    """One entry of the service error taxonomy."""

    name: str
    """Kind name as it appears on the wire (e.g., 'NotAcceptable')."""

    code: int
    """Numeric code, aligned with the HTTP status."""

    category: str
    """Category slug (e.g., 'not-acceptable')."""

    @property
    def is_client_error(self) -> bool:
        """Whether the kind blames the caller (4xx)."""
        return 400 <= self.code < 500


BAD_REQUEST = ErrorKind("BadRequest", 400, "bad-request")
NOT_AUTHENTICATED = ErrorKind("NotAuthenticated", 401, "not-authenticated")
PAYMENT_ERROR = ErrorKind("PaymentError", 402, "payment-error")
FORBIDDEN = ErrorKind("Forbidden", 403, "forbidden")
NOT_FOUND = ErrorKind("NotFound", 404, "not-found")
METHOD_NOT_ALLOWED = ErrorKind("MethodNotAllowed", 405, "method-not-allowed")
NOT_ACCEPTABLE = ErrorKind("NotAcceptable", 406, "not-acceptable")
TIMEOUT = ErrorKind("Timeout", 408, "timeout")
CONFLICT = ErrorKind("Conflict", 409, "conflict")
LENGTH_REQUIRED = ErrorKind("LengthRequired", 411, "length-required")
UNPROCESSABLE = ErrorKind("Unprocessable", 422, "unprocessable")
TOO_MANY_REQUESTS = ErrorKind("TooManyRequests", 429, "too-many-requests")
GENERAL_ERROR = ErrorKind("GeneralError", 500, "general-error")
NOT_IMPLEMENTED = ErrorKind("NotImplemented", 501, "not-implemented")
BAD_GATEWAY = ErrorKind("BadGateway", 502, "bad-gateway")
UNAVAILABLE = ErrorKind("Unavailable", 503, "unavailable")

ERROR_KINDS: dict[str, ErrorKind] = {
    kind.name: kind
    for kind in (
        BAD_REQUEST,
        NOT_AUTHENTICATED,
        PAYMENT_ERROR,
        FORBIDDEN,
        NOT_FOUND,
        METHOD_NOT_ALLOWED,
        NOT_ACCEPTABLE,
        TIMEOUT,
        CONFLICT,
        LENGTH_REQUIRED,
        UNPROCESSABLE,
        TOO_MANY_REQUESTS,
        GENERAL_ERROR,
        NOT_IMPLEMENTED,
        BAD_GATEWAY,
        UNAVAILABLE,
    )
}

_CODE_TO_KIND: dict[int, ErrorKind] = {kind.code: kind for kind in ERROR_KINDS.values()}


def from_name(name: str) -> ErrorKind:
    """Get the ErrorKind by wire name.

    Args:
        name: Kind name (e.g., 'NotFound').

    Returns:
        The ErrorKind instance.

    Raises:
        KeyError: If the name is not a known kind.
    """
    kind = ERROR_KINDS.get(name)
    if kind is None:
        raise KeyError(f"Unknown error kind: {name!r}")
    return kind


def from_code(code: int) -> ErrorKind:
    """Get the ErrorKind for a numeric code.

    Unknown 4xx codes map to BadRequest, everything else to GeneralError.
    """
    if code in _CODE_TO_KIND:
        return _CODE_TO_KIND[code]
    if 400 <= code < 500:
        return BAD_REQUEST
    return GENERAL_ERROR
