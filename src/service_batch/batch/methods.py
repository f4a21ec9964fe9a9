"""
Batch service handle with explicit scope methods.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from service_batch.client.core import RemoteService

if TYPE_CHECKING:
    from collections.abc import Callable

    from service_batch.batch.collector import BatchAggregator
    from service_batch.batch.emitter import CallEmitter
    from service_batch.client.core import Client
    from service_batch.client.hooks import HookManager
    from service_batch.types.result import SettledResult


class BatchRemoteService(RemoteService):
    """Handle for the batch service that can run explicit scopes.

    Example:
        >>> batch = client.service("batch")
        >>> user, messages = await batch.all(
        ...     lambda emit: (emit("users").get(1), emit("messages").find())
        ... )
    """

    def __init__(
        self,
        client: Client,
        path: str,
        aggregator: BatchAggregator,
        hook_manager: HookManager | None = None,
    ) -> None:
        super().__init__(client, path, hook_manager)
        self._aggregator = aggregator

    @property
    def aggregator(self) -> BatchAggregator:
        return self._aggregator

    async def all(self, scope: Callable[[CallEmitter], Any]) -> list[Any]:
        """Batch the scope's calls and return their values in call order.

        Raises:
            ServiceError: The first failed call's error, in call order
        """
        results = await self._aggregator.collect(scope)
        return [result.unwrap() for result in results]

    async def all_settled(self, scope: Callable[[CallEmitter], Any]) -> list[SettledResult]:
        """Batch the scope's calls and return every settled result in call order."""
        return await self._aggregator.collect(scope)
