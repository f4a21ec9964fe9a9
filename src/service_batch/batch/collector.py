"""
Batch aggregation.

The BatchAggregator gathers calls made in the same event loop iteration (or
within a configured timeout) into one window and dispatches it as a single
batch call.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from service_batch.batch.dedupe import merge
from service_batch.batch.distributor import cancel_all, distribute, reject_all
from service_batch.batch.emitter import CallEmitter
from service_batch.batch.window import BatchWindow, Waiter
from service_batch.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from service_batch.batch.dispatcher import BatchDispatcher
    from service_batch.types.call import CallDescriptor
    from service_batch.types.result import SettledResult

logger = get_logger(__name__)


class BatchAggregator:
    """Aggregates calls into batch windows.

    The first enqueued call opens a window. The window closes at the end of
    the current loop iteration, or after ``timeout`` seconds when set, and is
    then dispatched while later calls open a new one.

    Example:
        >>> aggregator = BatchAggregator(BatchDispatcher(client, "batch"))
        >>> results = await asyncio.gather(
        ...     aggregator.enqueue(CallDescriptor.for_call("get", "users", (1,))),
        ...     aggregator.enqueue(CallDescriptor.for_call("get", "users", (2,))),
        ... )
    """

    def __init__(self, dispatcher: BatchDispatcher, *, timeout: float = 0.0) -> None:
        """Initialize the aggregator.

        Args:
            dispatcher: Sends closed windows to the batch service
            timeout: Seconds to keep a window open; 0 for one loop iteration
        """
        self._dispatcher = dispatcher
        self._timeout = timeout
        self._window: BatchWindow | None = None
        self._close_handle: asyncio.Handle | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def dispatcher(self) -> BatchDispatcher:
        return self._dispatcher

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def is_open(self) -> bool:
        """Whether a window is currently accepting calls."""
        return self._window is not None

    @property
    def pending_count(self) -> int:
        """Number of calls waiting in the open window."""
        return self._window.waiter_count if self._window else 0

    def enqueue(self, descriptor: CallDescriptor) -> asyncio.Future[Any]:
        """Add a call to the open window, opening one if needed.

        Args:
            descriptor: Call to batch

        Returns:
            Future settled with the call's own outcome
        """
        loop = asyncio.get_running_loop()
        if self._window is None:
            self._window = BatchWindow()
            if self._timeout > 0:
                self._close_handle = loop.call_later(self._timeout, self._close_window)
            else:
                self._close_handle = loop.call_soon(self._close_window)
            logger.debug("Batch window opened", window_id=self._window.id)

        entry = merge(self._window, descriptor, loop)
        return entry.waiters[-1].future

    def _close_window(self) -> None:
        window, self._window = self._window, None
        self._close_handle = None
        if window is None:
            return

        window.close()
        logger.debug(
            "Batch window closed",
            window_id=window.id,
            entries=len(window),
            waiters=window.waiter_count,
        )
        task = asyncio.get_running_loop().create_task(self.settle(window))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def settle(self, window: BatchWindow) -> None:
        """Dispatch a window and settle all of its waiters.

        A batch-level failure rejects every waiter with the same error.
        """
        if window.is_open:
            window.close()
        try:
            results = await self._dispatcher.dispatch(window)
        except asyncio.CancelledError:
            cancel_all(window)
            raise
        except Exception as e:
            logger.warning(
                "Batch dispatch failed",
                window_id=window.id,
                entries=len(window),
                error=str(e),
            )
            reject_all(window, e)
        else:
            distribute(window, results)

    async def flush(self) -> None:
        """Close the open window now and wait for all in-flight dispatches."""
        if self._close_handle is not None:
            self._close_handle.cancel()
        self._close_window()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def collect(self, scope: Callable[[CallEmitter], Any]) -> list[SettledResult]:
        """Run an explicit batch scope and dispatch its calls together.

        Calls recorded by the scope go into a fresh window of their own,
        independent of any implicit window.

        Args:
            scope: Function (sync or async) that records calls on an emitter

        Returns:
            One settled result per recorded call, in call order

        Raises:
            Exception: The batch-level error if the dispatch itself failed
        """
        loop = asyncio.get_running_loop()
        window = BatchWindow()
        waiters: list[Waiter] = []

        def record(descriptor: CallDescriptor) -> None:
            entry = merge(window, descriptor, loop)
            waiters.append(entry.waiters[-1])

        emitter = CallEmitter(record)
        try:
            outcome = scope(emitter)
            if inspect.isawaitable(outcome):
                await outcome
        finally:
            emitter.close()

        if window.is_empty:
            window.close()
            window.settle()
            return []

        await self.settle(window)
        if window.failure is not None:
            for waiter in waiters:
                waiter.consume()
            raise window.failure
        return [waiter.outcome() for waiter in waiters]
