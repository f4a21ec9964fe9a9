"""核心客户端实现：通过钩子管道和传输层调用远程服务。

Core Client implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from service_batch.client.hooks import HookContext, HookManager, HookType
from service_batch.types.call import ServiceMethod

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from service_batch.client.builder import ClientBuilder
    from service_batch.transport.base import Transport


class RemoteService:
    """Client-side handle for one remote service.

    Every method call builds a HookContext, runs the client-wide and
    service-level hooks around it and, unless a before hook produced a
    result, sends it through the client's transport.

    Example:
        >>> messages = client.service("messages")
        >>> await messages.get(1)
        >>> await messages.find({"query": {"read": False}})
    """

    def __init__(
        self, client: Client, path: str, hook_manager: HookManager | None = None
    ) -> None:
        self._client = client
        self._path = path
        self._hooks = hook_manager or HookManager()

    @property
    def path(self) -> str:
        return self._path

    @property
    def client(self) -> Client:
        return self._client

    @property
    def hook_manager(self) -> HookManager:
        return self._hooks

    def hooks(
        self,
        *,
        before: Iterable[Callable[[HookContext], Any]] | None = None,
        after: Iterable[Callable[[HookContext], Any]] | None = None,
        error: Iterable[Callable[[HookContext], Any]] | None = None,
    ) -> RemoteService:
        """Register service-level hooks.

        Returns:
            Self for chaining
        """
        self._hooks.register_many(before=before, after=after, error=error)
        return self

    async def get(self, id: Any, params: dict[str, Any] | None = None) -> Any:
        return await self._call(ServiceMethod.GET, (id,), params)

    async def find(self, params: dict[str, Any] | None = None) -> Any:
        return await self._call(ServiceMethod.FIND, (), params)

    async def create(self, data: Any, params: dict[str, Any] | None = None) -> Any:
        return await self._call(ServiceMethod.CREATE, (data,), params)

    async def update(
        self, id: Any, data: Any, params: dict[str, Any] | None = None
    ) -> Any:
        return await self._call(ServiceMethod.UPDATE, (id, data), params)

    async def patch(
        self, id: Any, data: Any, params: dict[str, Any] | None = None
    ) -> Any:
        return await self._call(ServiceMethod.PATCH, (id, data), params)

    async def remove(self, id: Any, params: dict[str, Any] | None = None) -> Any:
        return await self._call(ServiceMethod.REMOVE, (id,), params)

    async def _call(
        self,
        method: ServiceMethod,
        args: tuple[Any, ...],
        params: dict[str, Any] | None,
    ) -> Any:
        """Run one call through the hook pipeline.

        Before hooks: client-wide, then service. After and error hooks:
        service, then client-wide.
        """
        app_hooks = self._client.hook_manager
        context = HookContext(
            client=self._client,
            path=self._path,
            method=method,
            args=args,
            params=dict(params or {}),
        )

        try:
            context = await app_hooks.run(HookType.BEFORE, context)
            context = await self._hooks.run(HookType.BEFORE, context)

            if not context.has_result:
                context.result = await self._client.transport.call(
                    context.method, context.path, context.args, context.params
                )

            context = await self._hooks.run(HookType.AFTER, context)
            context = await app_hooks.run(HookType.AFTER, context)
        except Exception as exc:
            context.error = exc
            context = await self._hooks.run(HookType.ERROR, context)
            context = await app_hooks.run(HookType.ERROR, context)
            if context.error is exc:
                raise
            if context.error is not None:
                raise context.error from exc

        return context.result


class Client:
    """Client for remote services.

    Example:
        >>> client = Client(HttpTransport("http://localhost:3030"))
        >>> client.configure(batch_client({"batch_service": "batch"}))
        >>> await asyncio.gather(
        ...     client.service("users").get(1),
        ...     client.service("messages").find(),
        ... )
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._services: dict[str, RemoteService] = {}
        self._hooks = HookManager()

    @classmethod
    def builder(cls) -> ClientBuilder:
        """Get a builder for fluent configuration."""
        from service_batch.client.builder import ClientBuilder

        return ClientBuilder()

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def hook_manager(self) -> HookManager:
        return self._hooks

    def service(self, name: str) -> RemoteService:
        """Get the handle for a service, creating it on first use."""
        path = name.strip("/")
        if path not in self._services:
            self._services[path] = RemoteService(self, path)
        return self._services[path]

    def use(self, name: str, service: RemoteService) -> RemoteService:
        """Install a custom service handle under a name."""
        self._services[name.strip("/")] = service
        return service

    def configure(self, plugin: Callable[[Client], Any]) -> Client:
        """Apply a plugin to this client.

        Returns:
            Self for chaining
        """
        plugin(self)
        return self

    def hooks(
        self,
        *,
        before: Iterable[Callable[[HookContext], Any]] | None = None,
        after: Iterable[Callable[[HookContext], Any]] | None = None,
        error: Iterable[Callable[[HookContext], Any]] | None = None,
    ) -> Client:
        """Register hooks that apply to every service.

        Returns:
            Self for chaining
        """
        self._hooks.register_many(before=before, after=after, error=error)
        return self

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
