"""
Server side of the batch protocol.

Provides the service registry, the batch executor and the batch endpoint.
"""

from service_batch.server.app import Application, ServiceEntry
from service_batch.server.executor import BatchExecutor, Invocation
from service_batch.server.service import BatchService

__all__ = [
    "Application",
    "BatchExecutor",
    "BatchService",
    "Invocation",
    "ServiceEntry",
]
