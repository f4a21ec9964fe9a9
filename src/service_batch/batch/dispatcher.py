"""
Batch dispatch.

Sends a closed window to the batch service as one create call and parses the
settled results it answers with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from service_batch.errors import TransportError
from service_batch.telemetry import get_logger
from service_batch.types.result import SettledResult

if TYPE_CHECKING:
    from service_batch.batch.window import BatchWindow
    from service_batch.client.core import Client

logger = get_logger(__name__)


class BatchDispatcher:
    """Dispatches batch windows through a client's batch service.

    Example:
        >>> dispatcher = BatchDispatcher(client, "batch")
        >>> results = await dispatcher.dispatch(window)
    """

    def __init__(self, client: Client, batch_service: str) -> None:
        self._client = client
        self._batch_service = batch_service

    @property
    def batch_service(self) -> str:
        return self._batch_service

    async def dispatch(self, window: BatchWindow) -> list[SettledResult]:
        """Send one window as a single batch call.

        Args:
            window: Closed window

        Returns:
            Settled results, index-aligned with the window's entries

        Raises:
            TransportError: If the response is not an aligned result list
            ServiceError: If the batch service rejected the whole batch
        """
        calls = window.to_calls()
        logger.debug(
            "Dispatching batch",
            window_id=window.id,
            entries=len(calls),
            waiters=window.waiter_count,
        )
        response = await self._client.service(self._batch_service).create({"calls": calls})
        return self._parse(response, len(calls))

    def _parse(self, response: Any, expected: int) -> list[SettledResult]:
        if not isinstance(response, list):
            raise TransportError(
                f"Batch service '{self._batch_service}' returned "
                f"{type(response).__name__}, expected a list"
            )
        if len(response) != expected:
            raise TransportError(
                f"Batch service '{self._batch_service}' returned {len(response)} "
                f"results for {expected} calls"
            )
        try:
            return [SettledResult.from_dict(item) for item in response]
        except ValidationError as e:
            raise TransportError(
                f"Batch service '{self._batch_service}' returned a malformed result",
                cause=e,
            ) from e
