"""
Type definitions for service-batch.
"""

from service_batch.types.call import CallDescriptor, ServiceMethod
from service_batch.types.result import (
    BatchRequest,
    SettledPayload,
    SettledResult,
    SettledStatus,
)

__all__ = [
    "BatchRequest",
    "CallDescriptor",
    "ServiceMethod",
    "SettledPayload",
    "SettledResult",
    "SettledStatus",
]
