"""
Transport interface.

A transport sends one service call to wherever the services live and returns
its result, raising the call's ServiceError (rebuilt to its original kind) on
failure and TransportError when the call could not be delivered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from service_batch.types.call import ServiceMethod


class Transport(ABC):
    """Base class for transports."""

    @abstractmethod
    async def call(
        self,
        method: ServiceMethod,
        path: str,
        args: Sequence[Any],
        params: Mapping[str, Any],
    ) -> Any:
        """Send one service call.

        Args:
            method: Service method
            path: Service name
            args: Positional arguments of the method
            params: Call params; only ``query`` crosses the wire

        Returns:
            The call's result

        Raises:
            ServiceError: If the service rejected the call
            TransportError: If the call could not be delivered
        """
        raise NotImplementedError

    async def close(self) -> None:
        """Release transport resources."""
        return None

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
