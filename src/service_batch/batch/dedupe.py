"""
Deduplication of equivalent calls within a window.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from service_batch.batch.window import BatchWindow, PendingBatchEntry
    from service_batch.types.call import CallDescriptor


def merge(
    window: BatchWindow,
    descriptor: CallDescriptor,
    loop: asyncio.AbstractEventLoop | None = None,
) -> PendingBatchEntry:
    """Add a call to a window, collapsing it into an equivalent entry.

    A new waiter is appended to the matching entry, or to a fresh entry at
    the end of the window. The caller's waiter is ``entry.waiters[-1]``.

    Args:
        window: Open batch window
        descriptor: Call to add
        loop: Loop the waiter's future belongs to (running loop if None)

    Returns:
        The entry now holding the call
    """
    window.ensure_open()
    entry = window.find(descriptor)
    if entry is None:
        entry = window.append(descriptor)
    entry.add_waiter(loop or asyncio.get_running_loop())
    return entry
