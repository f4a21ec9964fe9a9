"""
Client integration points.

Three ways to enable batching on a client:

- ``batch_client``: client plugin, batches every eligible call implicitly
- ``batch_hook``: before hook to register on a client or a single service
- ``batch_methods``: installs ``all``/``all_settled`` on the batch service

Each validates its options when it is created and owns its own aggregator.
"""

from __future__ import annotations

import weakref
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from service_batch.batch.collector import BatchAggregator
from service_batch.batch.config import BatchConfig
from service_batch.batch.dispatcher import BatchDispatcher
from service_batch.batch.filter import should_batch
from service_batch.batch.methods import BatchRemoteService
from service_batch.types.call import CallDescriptor

if TYPE_CHECKING:
    from collections.abc import Callable

    from service_batch.client.core import Client
    from service_batch.client.hooks import HookContext

BatchOptions = BatchConfig | Mapping[str, Any]


def _new_aggregator(client: Client, config: BatchConfig) -> BatchAggregator:
    return BatchAggregator(
        BatchDispatcher(client, config.batch_service),
        timeout=config.timeout,
    )


class BatchHook:
    """Before hook that routes eligible calls through an aggregator.

    The hook resolves the call with the batched outcome by setting
    ``context.result``, which skips the transport. Without a bound
    aggregator, one is created per client on first use.
    """

    def __init__(
        self,
        config: BatchConfig,
        aggregator: BatchAggregator | None = None,
    ) -> None:
        self._config = config
        self._aggregator = aggregator
        self._per_client: weakref.WeakKeyDictionary[Client, BatchAggregator] = (
            weakref.WeakKeyDictionary()
        )

    @property
    def config(self) -> BatchConfig:
        return self._config

    def aggregator_for(self, client: Client) -> BatchAggregator:
        if self._aggregator is not None:
            return self._aggregator
        aggregator = self._per_client.get(client)
        if aggregator is None:
            aggregator = _new_aggregator(client, self._config)
            self._per_client[client] = aggregator
        return aggregator

    async def flush(self, client: Client) -> None:
        """Dispatch the client's open window without waiting for it to close."""
        await self.aggregator_for(client).flush()

    async def __call__(self, context: HookContext) -> HookContext | None:
        if not should_batch(context, self._config):
            return None
        descriptor = CallDescriptor.for_call(
            context.method, context.path, context.args, context.params
        )
        context.result = await self.aggregator_for(context.client).enqueue(descriptor)
        return context


def batch_hook(options: BatchOptions) -> BatchHook:
    """Create a batching before hook.

    Example:
        >>> client.service("users").hooks(before=[batch_hook({"batch_service": "batch"})])

    Raises:
        ConfigurationError: If ``batch_service`` is missing
    """
    return BatchHook(BatchConfig.coerce(options, owner="batch_hook"))


def batch_client(options: BatchOptions) -> Callable[[Client], BatchHook]:
    """Create a client plugin that batches every eligible call.

    Example:
        >>> client.configure(batch_client({"batch_service": "batch", "exclude": ["auth"]}))

    Raises:
        ConfigurationError: If ``batch_service`` is missing
    """
    config = BatchConfig.coerce(options, owner="batch_client")

    def configure(client: Client) -> BatchHook:
        hook = BatchHook(config, _new_aggregator(client, config))
        client.hooks(before=[hook])
        return hook

    return configure


def batch_methods(options: BatchOptions) -> Callable[[Client], BatchRemoteService]:
    """Create a client plugin that adds explicit scopes to the batch service.

    Example:
        >>> client.configure(batch_methods({"batch_service": "batch"}))
        >>> results = await client.service("batch").all_settled(scope)

    Raises:
        ConfigurationError: If ``batch_service`` is missing
    """
    config = BatchConfig.coerce(options, owner="batch_methods")

    def configure(client: Client) -> BatchRemoteService:
        existing = client.service(config.batch_service)
        service = BatchRemoteService(
            client,
            config.batch_service,
            _new_aggregator(client, config),
            hook_manager=existing.hook_manager,
        )
        client.use(config.batch_service, service)
        return service

    return configure
