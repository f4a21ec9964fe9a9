"""
Opt-out filter.

Decides, before any descriptor exists, whether a call joins a batch window.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

    from service_batch.batch.config import BatchConfig
    from service_batch.client.hooks import HookContext

BATCH_PARAM = "batch"


def is_opted_out(params: Mapping[str, Any]) -> bool:
    """True when the call carries an explicit falsy ``batch`` param."""
    return BATCH_PARAM in params and not params[BATCH_PARAM]


def should_batch(context: HookContext, config: BatchConfig) -> bool:
    """Whether a call should go through the aggregator.

    Calls opted out with ``batch=False``, calls to the batch service itself
    and calls to excluded services go straight to the transport.
    """
    if is_opted_out(context.params):
        return False
    if context.path == config.batch_service:
        return False
    return context.path not in config.exclude
