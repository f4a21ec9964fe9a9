"""
Result distribution.

Fans the settled results of a dispatched window back out to every waiter.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from service_batch.errors import GeneralError, ServiceError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from service_batch.batch.window import BatchWindow
    from service_batch.types.result import SettledResult


def distribute(window: BatchWindow, results: Sequence[SettledResult]) -> None:
    """Settle every waiter from the index-aligned results.

    All waiters of an entry get the same outcome. The first waiter receives
    the value or error itself; later ones get a deep copy of the value or a
    fresh error of the same kind.

    Raises:
        ValueError: If results are not aligned with the window's entries
    """
    if len(results) != len(window):
        raise ValueError(f"Expected {len(window)} results, got {len(results)}")

    for entry, result in zip(window.entries, results, strict=True):
        for position, waiter in enumerate(entry.waiters):
            if result.is_fulfilled:
                value = result.value if position == 0 else copy.deepcopy(result.value)
                waiter.resolve(value)
            else:
                reason = result.reason or GeneralError("Call rejected")
                if position > 0:
                    reason = ServiceError.from_dict(reason.to_dict())
                waiter.reject(reason)
    window.settle()


def reject_all(window: BatchWindow, error: BaseException) -> None:
    """Reject every waiter with a batch-level error."""
    window.failure = error
    for waiter in window.waiters():
        waiter.reject(error)
    window.settle()


def cancel_all(window: BatchWindow) -> None:
    """Cancel every waiter of a window whose dispatch was cancelled."""
    for waiter in window.waiters():
        waiter.cancel()
    window.settle()
