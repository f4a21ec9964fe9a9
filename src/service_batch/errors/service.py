"""服务错误：可跨调用边界序列化并按原种类重建的结构化错误。

Remote service errors.

A ServiceError carries {kind, message, code, category, data, field_errors}.
It is serialized verbatim into an ErrorPayload and rebuilt into the same
subclass on the receiving side, so a caller sees NotAcceptable rather than a
generic wrapper.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from service_batch.errors import codes
from service_batch.errors.base import ServiceBatchError
from service_batch.errors.codes import ErrorKind

_ERROR_CLASSES: dict[str, type[ServiceError]] = {}


class ErrorPayload(BaseModel):
    """Wire form of a ServiceError."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: str = Field(default=codes.GENERAL_ERROR.name, alias="name")
    message: str = ""
    code: int = codes.GENERAL_ERROR.code
    category: str = Field(default=codes.GENERAL_ERROR.category, alias="className")
    data: Any = None
    field_errors: dict[str, Any] | list[Any] = Field(
        default_factory=dict, alias="errors"
    )

    @model_validator(mode="before")
    @classmethod
    def drop_null_fields(cls, data: Any) -> Any:
        """Treat null fields as absent so they take their defaults."""
        if isinstance(data, Mapping):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ServiceError(ServiceBatchError):
    """Error raised by a service method, local or remote.

    Attributes:
        kind: Kind name (e.g., 'NotAcceptable')
        code: Numeric code
        category: Category slug
        data: Arbitrary extra payload
        field_errors: Per-field validation errors
    """

    error_kind: ClassVar[ErrorKind] = codes.GENERAL_ERROR

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _ERROR_CLASSES[cls.error_kind.name] = cls

    def __init__(
        self,
        message: str = "",
        data: Any = None,
        *,
        field_errors: dict[str, Any] | list[Any] | None = None,
        kind: str | None = None,
        code: int | None = None,
        category: str | None = None,
    ) -> None:
        default = type(self).error_kind
        self.kind = kind or default.name
        self.code = code if code is not None else default.code
        self.category = category or default.category
        self.data = data
        self.field_errors = field_errors if field_errors is not None else {}
        super().__init__(message or "Error")

    def _format_message(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire payload."""
        return ErrorPayload(
            kind=self.kind,
            message=self.message,
            code=self.code,
            category=self.category,
            data=self.data,
            field_errors=self.field_errors,
        ).model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, payload: Any) -> ServiceError:
        """Rebuild an error from its wire payload.

        The subclass is chosen by kind name, then by code; the payload's own
        fields always win so unknown kinds survive the round trip.

        Args:
            payload: Parsed error payload

        Returns:
            ServiceError of the matching subclass
        """
        if isinstance(payload, ServiceError):
            return payload
        if not isinstance(payload, Mapping):
            return GeneralError("Unrecognized error payload", data=payload)
        try:
            parsed = ErrorPayload.model_validate(payload)
        except PydanticValidationError:
            return GeneralError(
                str(payload.get("message") or "Unrecognized error payload"),
                data=dict(payload),
            )

        error_cls = _ERROR_CLASSES.get(parsed.kind) or _ERROR_CLASSES.get(
            codes.from_code(parsed.code).name, GeneralError
        )
        # Absent kind or category falls back to the rebuilt class's own.
        given = parsed.model_fields_set
        return error_cls(
            parsed.message,
            parsed.data,
            field_errors=parsed.field_errors,
            kind=parsed.kind if "kind" in given else None,
            code=parsed.code,
            category=parsed.category if "category" in given else None,
        )


class BadRequest(ServiceError):
    error_kind = codes.BAD_REQUEST


class NotAuthenticated(ServiceError):
    error_kind = codes.NOT_AUTHENTICATED


class PaymentError(ServiceError):
    error_kind = codes.PAYMENT_ERROR


class Forbidden(ServiceError):
    error_kind = codes.FORBIDDEN


class NotFound(ServiceError):
    error_kind = codes.NOT_FOUND


class MethodNotAllowed(ServiceError):
    error_kind = codes.METHOD_NOT_ALLOWED


class NotAcceptable(ServiceError):
    error_kind = codes.NOT_ACCEPTABLE


class Timeout(ServiceError):
    error_kind = codes.TIMEOUT


class Conflict(ServiceError):
    error_kind = codes.CONFLICT


class LengthRequired(ServiceError):
    error_kind = codes.LENGTH_REQUIRED


class Unprocessable(ServiceError):
    error_kind = codes.UNPROCESSABLE


class TooManyRequests(ServiceError):
    error_kind = codes.TOO_MANY_REQUESTS


class GeneralError(ServiceError):
    error_kind = codes.GENERAL_ERROR


class MethodNotImplemented(ServiceError):
    """Kind 'NotImplemented'; renamed to keep clear of the builtin."""

    error_kind = codes.NOT_IMPLEMENTED


class BadGateway(ServiceError):
    error_kind = codes.BAD_GATEWAY


class Unavailable(ServiceError):
    error_kind = codes.UNAVAILABLE


def error_for_code(code: int, message: str, data: Any = None) -> ServiceError:
    """Create the ServiceError subclass matching a numeric code."""
    kind = codes.from_code(code)
    return _ERROR_CLASSES.get(kind.name, GeneralError)(message, data)


def convert_error(error: BaseException) -> ServiceError:
    """Turn any exception into a ServiceError.

    ServiceErrors pass through untouched; anything else becomes a
    GeneralError that keeps the original message.
    """
    if isinstance(error, ServiceError):
        return error
    return GeneralError(str(error) or type(error).__name__)
