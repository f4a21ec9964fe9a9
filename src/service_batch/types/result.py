"""
Settled result types.

One SettledResult is reported per dispatched call, mirroring the shape of a
settled promise: fulfilled with a value or rejected with a reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from service_batch.errors import ErrorPayload, GeneralError, ServiceError, convert_error


class SettledStatus(str, Enum):
    """Outcome of one call."""

    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class SettledPayload(BaseModel):
    """Wire form of a SettledResult."""

    model_config = ConfigDict(extra="ignore")

    status: Literal["fulfilled", "rejected"]
    value: Any = None
    reason: ErrorPayload | None = None


class BatchRequest(BaseModel):
    """Body of a batch endpoint create call."""

    calls: list[list[Any]] = Field(default_factory=list)


@dataclass(frozen=True)
class SettledResult:
    """Settled outcome of one call.

    Attributes:
        status: Fulfilled or rejected
        value: Result value when fulfilled
        reason: Error when rejected
    """

    status: SettledStatus
    value: Any = None
    reason: ServiceError | None = None

    @classmethod
    def fulfilled(cls, value: Any) -> SettledResult:
        """Create a fulfilled result."""
        return cls(SettledStatus.FULFILLED, value=value)

    @classmethod
    def rejected(cls, reason: BaseException) -> SettledResult:
        """Create a rejected result; any exception becomes a ServiceError."""
        return cls(SettledStatus.REJECTED, reason=convert_error(reason))

    @property
    def is_fulfilled(self) -> bool:
        return self.status is SettledStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status is SettledStatus.REJECTED

    def unwrap(self) -> Any:
        """Return the value or raise the reason."""
        if self.reason is not None and self.is_rejected:
            raise self.reason
        return self.value

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire payload."""
        if self.is_fulfilled:
            return {"status": self.status.value, "value": self.value}
        reason = self.reason or GeneralError("Call rejected")
        return {"status": self.status.value, "reason": reason.to_dict()}

    @classmethod
    def from_dict(cls, payload: Any) -> SettledResult:
        """Parse a wire payload, rebuilding the reason's error kind.

        Raises:
            pydantic.ValidationError: If the payload is not a settled result
        """
        parsed = SettledPayload.model_validate(payload)
        if parsed.status == SettledStatus.FULFILLED.value:
            return cls.fulfilled(parsed.value)
        if parsed.reason is None:
            return cls.rejected(GeneralError("Call rejected without a reason"))
        return cls.rejected(ServiceError.from_dict(parsed.reason.model_dump(by_alias=True)))
