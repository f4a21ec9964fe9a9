"""
Call emitter for explicit batch scopes.

Inside a scope, ``emit("users").get(1)`` records a call instead of running it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from service_batch.types.call import CallDescriptor, ServiceMethod

if TYPE_CHECKING:
    from collections.abc import Callable


class ScopedService:
    """Service handle that records calls into a scope."""

    def __init__(self, emitter: CallEmitter, path: str) -> None:
        self._emitter = emitter
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def get(self, id: Any, params: dict[str, Any] | None = None) -> CallDescriptor:
        return self._emitter.emit(ServiceMethod.GET, self._path, (id,), params)

    def find(self, params: dict[str, Any] | None = None) -> CallDescriptor:
        return self._emitter.emit(ServiceMethod.FIND, self._path, (), params)

    def create(self, data: Any, params: dict[str, Any] | None = None) -> CallDescriptor:
        return self._emitter.emit(ServiceMethod.CREATE, self._path, (data,), params)

    def update(
        self, id: Any, data: Any, params: dict[str, Any] | None = None
    ) -> CallDescriptor:
        return self._emitter.emit(ServiceMethod.UPDATE, self._path, (id, data), params)

    def patch(
        self, id: Any, data: Any, params: dict[str, Any] | None = None
    ) -> CallDescriptor:
        return self._emitter.emit(ServiceMethod.PATCH, self._path, (id, data), params)

    def remove(self, id: Any, params: dict[str, Any] | None = None) -> CallDescriptor:
        return self._emitter.emit(ServiceMethod.REMOVE, self._path, (id,), params)


class CallEmitter:
    """Records the calls made inside one explicit batch scope.

    Calling the emitter with a service name returns a ScopedService. Once the
    scope ends the emitter is closed and rejects further calls.

    Example:
        >>> async def scope(emit):
        ...     emit("users").get(1)
        ...     emit("messages").find({"query": {"read": False}})
    """

    def __init__(self, record: Callable[[CallDescriptor], Any]) -> None:
        self._record = record
        self._count = 0
        self._closed = False

    def __call__(self, name: str) -> ScopedService:
        return ScopedService(self, name.strip("/"))

    @property
    def count(self) -> int:
        """Number of calls recorded so far."""
        return self._count

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(
        self,
        method: ServiceMethod,
        path: str,
        args: tuple[Any, ...],
        params: dict[str, Any] | None = None,
    ) -> CallDescriptor:
        """Record one call.

        Raises:
            RuntimeError: If the scope has already ended
        """
        if self._closed:
            raise RuntimeError("Batch scope has already ended")
        descriptor = CallDescriptor.for_call(method, path, args, params)
        self._record(descriptor)
        self._count += 1
        return descriptor

    def close(self) -> None:
        self._closed = True
