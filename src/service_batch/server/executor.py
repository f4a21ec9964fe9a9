"""
Batch executor for isolated, concurrent call execution.

Runs every call of a batch against the registered services at the same time
and reports one settled result per call, in input order. A failing call is
captured into its own result and never affects its siblings.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from service_batch.errors import NotAcceptable, ServiceError
from service_batch.server.app import invoke
from service_batch.telemetry import LogContext, get_logger, log_context
from service_batch.types.call import CallDescriptor
from service_batch.types.result import SettledResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from service_batch.server.app import Application

logger = get_logger(__name__)


@dataclass
class Invocation:
    """A resolved call, ready to run.

    Attributes:
        descriptor: The parsed call
        handler: Bound service handler
        args: Positional arguments
        params: Params mapping
    """

    descriptor: CallDescriptor
    handler: Callable[..., Any]
    args: tuple[Any, ...]
    params: dict[str, Any]

    async def run(self) -> Any:
        return await invoke(self.handler, self.args, self.params)


class BatchExecutor:
    """Executes the calls of one batch concurrently.

    Example:
        >>> executor = BatchExecutor(app)
        >>> results = await executor.execute([["get", "messages", 1]])
        >>> results[0].is_fulfilled
        True
    """

    def __init__(
        self,
        app: Application,
        max_concurrent: int | None = None,
    ) -> None:
        """Initialize batch executor.

        Args:
            app: Registry the call targets are resolved against
            max_concurrent: Maximum calls in flight per batch (unbounded if None)
        """
        self._app = app
        self._max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None

    def prepare(self, calls: Sequence[Any]) -> list[Invocation]:
        """Parse and resolve every call before anything runs.

        Args:
            calls: Wire tuples ``[method, service, *args]``

        Returns:
            One Invocation per call, in order

        Raises:
            NotAcceptable: On a malformed tuple, unknown service, unsupported
                method or wrong argument count
        """
        invocations = []
        for index, call in enumerate(calls):
            try:
                descriptor = CallDescriptor.from_tuple(call)
                entry = self._app.lookup(descriptor.service_name)
                if entry is None:
                    raise NotAcceptable(
                        f"Service '{descriptor.service_name}' does not exist"
                    )
                if not entry.supports(descriptor.method):
                    raise NotAcceptable(
                        f"Method '{descriptor.method.value}' is not supported by "
                        f"service '{entry.name}'"
                    )
                args, params = descriptor.split_arguments()
            except ServiceError as exc:
                exc.data = {**(exc.data or {}), "index": index}
                raise
            invocations.append(
                Invocation(
                    descriptor=descriptor,
                    handler=entry.handler(descriptor.method),
                    args=args,
                    params=params,
                )
            )
        return invocations

    async def execute(self, calls: Sequence[Any]) -> list[SettledResult]:
        """Execute all calls of a batch.

        Args:
            calls: Wire tuples ``[method, service, *args]``

        Returns:
            Settled results, index-aligned with ``calls``
        """
        invocations = self.prepare(calls)
        results: list[SettledResult | None] = [None] * len(invocations)

        with log_context(LogContext(batch_id=uuid.uuid4().hex[:12])):
            start_time = time.time()
            logger.debug("Executing batch", calls=len(invocations))

            await asyncio.gather(
                *(
                    self._execute_one(invocation, idx, results)
                    for idx, invocation in enumerate(invocations)
                )
            )

            settled = [r for r in results if r is not None]
            logger.debug(
                "Batch settled",
                fulfilled=sum(1 for r in settled if r.is_fulfilled),
                rejected=sum(1 for r in settled if r.is_rejected),
                total_time_ms=round((time.time() - start_time) * 1000, 2),
            )

        return settled

    async def _execute_one(
        self,
        invocation: Invocation,
        index: int,
        results: list[SettledResult | None],
    ) -> None:
        """Execute one call, capturing its outcome into its slot."""
        guard = self._semaphore or contextlib.nullcontext()
        async with guard:
            try:
                value = await invocation.run()
            except Exception as e:
                results[index] = SettledResult.rejected(e)
            else:
                results[index] = SettledResult.fulfilled(value)

    @property
    def max_concurrent(self) -> int | None:
        """Get maximum concurrent calls per batch."""
        return self._max_concurrent
