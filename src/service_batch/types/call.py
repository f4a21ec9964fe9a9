"""
Call descriptor types.

A CallDescriptor is the canonical, immutable form of one remote service call.
Equality and hashing are structural so equivalent calls collapse in a batch.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any

from service_batch.errors import NotAcceptable


class ServiceMethod(str, Enum):
    """The closed set of service operations that can be batched."""

    GET = "get"
    FIND = "find"
    CREATE = "create"
    UPDATE = "update"
    PATCH = "patch"
    REMOVE = "remove"

    @property
    def arity(self) -> int:
        """Number of positional arguments before the params mapping."""
        return _ARITY[self]

    @classmethod
    def parse(cls, value: Any) -> ServiceMethod:
        """Parse a wire method name.

        Raises:
            NotAcceptable: If the name is not a supported method
        """
        try:
            return cls(value)
        except ValueError:
            raise NotAcceptable(
                f"Method {value!r} can not be batched",
                data={"method": value},
            ) from None


_ARITY: dict[ServiceMethod, int] = {
    ServiceMethod.GET: 1,
    ServiceMethod.FIND: 0,
    ServiceMethod.CREATE: 1,
    ServiceMethod.UPDATE: 2,
    ServiceMethod.PATCH: 2,
    ServiceMethod.REMOVE: 1,
}


def _canonical(args: tuple[Any, ...]) -> str:
    """Deep-equality key for call arguments.

    Mapping key order is ignored; True/1 and 1/"1" stay distinct.
    """
    try:
        return json.dumps(list(args), sort_keys=True, separators=(",", ":"), default=repr)
    except TypeError:
        # Mixed-type mapping keys can not be sorted
        return repr(args)


@dataclass(frozen=True, eq=False)
class CallDescriptor:
    """One remote call: method, target service and ordered arguments.

    Attributes:
        method: Service method
        service_name: Target service name
        args: Positional arguments followed by the params mapping
    """

    method: ServiceMethod
    service_name: str
    args: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", ServiceMethod(self.method))
        object.__setattr__(self, "args", copy.deepcopy(tuple(self.args)))

    @classmethod
    def for_call(
        cls,
        method: ServiceMethod | str,
        service_name: str,
        args: Sequence[Any],
        params: Mapping[str, Any] | None = None,
    ) -> CallDescriptor:
        """Build the descriptor for a client-side call.

        Only the query travels with the call; other params are local.

        Args:
            method: Service method
            service_name: Target service name
            args: Positional arguments of the method
            params: Call params

        Returns:
            CallDescriptor
        """
        query = (params or {}).get("query") or {}
        return cls(ServiceMethod(method), service_name, (*args, {"query": query}))

    @classmethod
    def from_tuple(cls, call: Any) -> CallDescriptor:
        """Parse a wire tuple ``[method, service_name, *args]``.

        Raises:
            NotAcceptable: If the tuple is malformed
        """
        if isinstance(call, (str, bytes)) or not isinstance(call, Sequence) or len(call) < 2:
            raise NotAcceptable(
                "Batch call must be a [method, service, ...args] sequence",
                data={"call": call},
            )
        method = ServiceMethod.parse(call[0])
        service_name = call[1]
        if not isinstance(service_name, str) or not service_name:
            raise NotAcceptable(
                "Batch call is missing a service name",
                data={"call": list(call)},
            )
        return cls(method, service_name, tuple(call[2:]))

    @cached_property
    def key(self) -> tuple[str, str, str]:
        """Structural identity of the call."""
        return (self.method.value, self.service_name, _canonical(self.args))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallDescriptor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def to_tuple(self) -> list[Any]:
        """Wire form of the call."""
        return [self.method.value, self.service_name, *self.args]

    def split_arguments(self) -> tuple[tuple[Any, ...], dict[str, Any]]:
        """Split args into the method's positional arguments and its params.

        Raises:
            NotAcceptable: If the argument count does not fit the method
        """
        arity = self.method.arity
        if not arity <= len(self.args) <= arity + 1:
            raise NotAcceptable(
                f"'{self.method.value}' takes {arity} argument(s) and optional params, "
                f"got {len(self.args)}",
                data={"call": self.to_tuple()},
            )
        params = self.args[arity] if len(self.args) > arity else {}
        if not isinstance(params, Mapping):
            raise NotAcceptable(
                f"Params for '{self.method.value}' must be a mapping",
                data={"call": self.to_tuple()},
            )
        return self.args[:arity], dict(params)
