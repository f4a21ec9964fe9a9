"""
Server-side service registry.

Maps service names to service objects. Each registration builds a closed
ServiceMethod -> handler table, so dispatch never resolves methods by
arbitrary attribute name at call time.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from service_batch.errors import ConfigurationError, MethodNotAllowed, NotFound
from service_batch.types.call import CallDescriptor, ServiceMethod

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence


def strip_slashes(name: str) -> str:
    """Normalize a service path ('/users/' -> 'users')."""
    return name.strip("/")


async def invoke(
    handler: Callable[..., Any],
    args: Sequence[Any],
    params: Mapping[str, Any] | None = None,
) -> Any:
    """Call a service handler with positional args followed by params."""
    result = handler(*args, dict(params or {}))
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass
class ServiceEntry:
    """A registered service and its method table.

    Attributes:
        name: Normalized service name
        service: The service object
        handlers: Supported methods mapped to bound handlers
    """

    name: str
    service: Any
    handlers: dict[ServiceMethod, Callable[..., Any]] = field(default_factory=dict)

    def supports(self, method: ServiceMethod) -> bool:
        return method in self.handlers

    def handler(self, method: ServiceMethod) -> Callable[..., Any]:
        """Get the handler for a method.

        Raises:
            MethodNotAllowed: If the service does not implement it
        """
        try:
            return self.handlers[method]
        except KeyError:
            raise MethodNotAllowed(
                f"Method '{method.value}' is not supported by service '{self.name}'"
            ) from None


class Application:
    """Registry of server-side services.

    Example:
        >>> app = Application()
        >>> app.use("messages", MessageService())
        >>> await app.call("get", "messages", (1,), {"query": {}})
    """

    def __init__(self) -> None:
        self._services: dict[str, ServiceEntry] = {}

    def use(self, name: str, service: Any) -> ServiceEntry:
        """Register a service.

        Args:
            name: Service name (slashes are stripped)
            service: Object implementing any of get/find/create/update/patch/remove

        Returns:
            The registered ServiceEntry

        Raises:
            ConfigurationError: If the name is empty or the service implements
                no supported method
        """
        path = strip_slashes(name)
        if not path:
            raise ConfigurationError("Service name must not be empty", option="name")

        handlers: dict[ServiceMethod, Callable[..., Any]] = {}
        for method in ServiceMethod:
            handler = getattr(service, method.value, None)
            if callable(handler):
                handlers[method] = handler

        if not handlers:
            supported = ", ".join(m.value for m in ServiceMethod)
            raise ConfigurationError(
                f"Service '{path}' must implement at least one of: {supported}",
                option="service",
            )

        entry = ServiceEntry(name=path, service=service, handlers=handlers)
        self._services[path] = entry
        return entry

    def lookup(self, name: str) -> ServiceEntry | None:
        """Get a service entry, or None if unknown."""
        return self._services.get(strip_slashes(name))

    def service(self, name: str) -> ServiceEntry:
        """Get a service entry.

        Raises:
            NotFound: If no service is registered under the name
        """
        entry = self.lookup(name)
        if entry is None:
            raise NotFound(f"Service '{strip_slashes(name)}' is not registered")
        return entry

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and strip_slashes(name) in self._services

    @property
    def service_names(self) -> list[str]:
        """Names of all registered services."""
        return list(self._services)

    async def call(
        self,
        method: ServiceMethod | str,
        name: str,
        args: Sequence[Any],
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Invoke one service method.

        Args:
            method: Service method
            name: Service name
            args: Positional arguments of the method
            params: Call params

        Returns:
            Handler result
        """
        handler = self.service(name).handler(ServiceMethod.parse(method))
        return await invoke(handler, args, params)

    async def dispatch(self, descriptor: CallDescriptor) -> Any:
        """Invoke the call a descriptor describes."""
        args, params = descriptor.split_arguments()
        return await self.call(descriptor.method, descriptor.service_name, args, params)
