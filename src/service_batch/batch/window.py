"""
Batch window state.

A BatchWindow holds the pending entries of one aggregation cycle. Each entry
owns one canonical CallDescriptor and the waiters of every call that produced
an equivalent descriptor.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from service_batch.types.result import SettledResult

if TYPE_CHECKING:
    from collections.abc import Iterator

    from service_batch.types.call import CallDescriptor


class WindowState(str, Enum):
    """Lifecycle of a batch window."""

    OPEN = "open"
    FLUSHING = "flushing"
    SETTLED = "settled"


@dataclass
class Waiter:
    """One caller waiting on a batch entry.

    Settling is idempotent: only the first resolve/reject/cancel counts.
    """

    future: asyncio.Future[Any]

    @property
    def settled(self) -> bool:
        return self.future.done()

    def resolve(self, value: Any) -> bool:
        if self.future.done():
            return False
        self.future.set_result(value)
        return True

    def reject(self, error: BaseException) -> bool:
        if self.future.done():
            return False
        self.future.set_exception(error)
        return True

    def cancel(self) -> bool:
        return self.future.cancel()

    def outcome(self) -> SettledResult:
        """Settled result of a done waiter."""
        error = self.future.exception()
        if error is not None:
            return SettledResult.rejected(error)
        return SettledResult.fulfilled(self.future.result())

    def consume(self) -> None:
        """Mark a failed future's exception as retrieved."""
        if self.future.done() and not self.future.cancelled():
            self.future.exception()


@dataclass
class PendingBatchEntry:
    """A canonical call and everyone waiting on it.

    Attributes:
        descriptor: The call sent on the wire
        waiters: One waiter per original invocation, in arrival order
    """

    descriptor: CallDescriptor
    waiters: list[Waiter] = field(default_factory=list)

    def add_waiter(self, loop: asyncio.AbstractEventLoop) -> Waiter:
        waiter = Waiter(loop.create_future())
        self.waiters.append(waiter)
        return waiter


class BatchWindow:
    """Ordered entries of one aggregation cycle.

    State moves OPEN -> FLUSHING -> SETTLED. Entries can only be added while
    OPEN.
    """

    def __init__(self) -> None:
        self.id = uuid.uuid4().hex[:8]
        self.state = WindowState.OPEN
        self.failure: BaseException | None = None
        self._entries: list[PendingBatchEntry] = []
        self._index: dict[CallDescriptor, PendingBatchEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BatchWindow(id={self.id!r}, state={self.state.value}, entries={len(self)})"

    @property
    def entries(self) -> tuple[PendingBatchEntry, ...]:
        return tuple(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def is_open(self) -> bool:
        return self.state is WindowState.OPEN

    @property
    def waiter_count(self) -> int:
        return sum(len(entry.waiters) for entry in self._entries)

    def waiters(self) -> Iterator[Waiter]:
        """All waiters, entry by entry in insertion order."""
        for entry in self._entries:
            yield from entry.waiters

    def ensure_open(self) -> None:
        if self.state is not WindowState.OPEN:
            raise RuntimeError(f"Batch window {self.id} is {self.state.value}, not accepting calls")

    def find(self, descriptor: CallDescriptor) -> PendingBatchEntry | None:
        """Entry holding an equivalent descriptor, if any."""
        return self._index.get(descriptor)

    def append(self, descriptor: CallDescriptor) -> PendingBatchEntry:
        """Add a new entry at the end of the window."""
        self.ensure_open()
        entry = PendingBatchEntry(descriptor)
        self._entries.append(entry)
        self._index[descriptor] = entry
        return entry

    def close(self) -> None:
        """Freeze the entries for dispatch."""
        self.ensure_open()
        self.state = WindowState.FLUSHING

    def settle(self) -> None:
        self.state = WindowState.SETTLED

    def to_calls(self) -> list[list[Any]]:
        """Wire tuples, one per entry."""
        return [entry.descriptor.to_tuple() for entry in self._entries]
