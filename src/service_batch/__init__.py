"""服务批处理：将多个远程服务调用合并为一次批量请求，并在服务端隔离执行。

service-batch: Batched remote service calls.

Calls made in the same event loop iteration are collected into one request
to a batch endpoint, which runs them concurrently and reports one settled
result per call.
"""
from __future__ import annotations

from service_batch.batch import (
    BatchAggregator,
    BatchConfig,
    BatchHook,
    BatchRemoteService,
    CallEmitter,
    batch_client,
    batch_hook,
    batch_methods,
)
from service_batch.client import Client, ClientBuilder, HookContext, RemoteService
from service_batch.errors import (
    ConfigurationError,
    GeneralError,
    NotAcceptable,
    ServiceBatchError,
    ServiceError,
    TransportError,
)
from service_batch.server import Application, BatchExecutor, BatchService
from service_batch.transport import HttpTransport, LocalTransport, Transport
from service_batch.types import CallDescriptor, ServiceMethod, SettledResult, SettledStatus

__version__ = "0.1.0"

__all__ = [
    # Client
    "Client",
    "ClientBuilder",
    "HookContext",
    "RemoteService",
    # Batching
    "BatchAggregator",
    "BatchConfig",
    "BatchHook",
    "BatchRemoteService",
    "CallEmitter",
    "batch_client",
    "batch_hook",
    "batch_methods",
    # Server
    "Application",
    "BatchExecutor",
    "BatchService",
    # Transport
    "HttpTransport",
    "LocalTransport",
    "Transport",
    # Types
    "CallDescriptor",
    "ServiceMethod",
    "SettledResult",
    "SettledStatus",
    # Errors
    "ConfigurationError",
    "GeneralError",
    "NotAcceptable",
    "ServiceBatchError",
    "ServiceError",
    "TransportError",
    # Version
    "__version__",
]
