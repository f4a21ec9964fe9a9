"""
批处理模块：将同一事件循环周期内的服务调用聚合为一次批量请求。

Batch module: aggregates service calls into single batch requests.
"""

from service_batch.batch.collector import BatchAggregator
from service_batch.batch.config import BatchConfig
from service_batch.batch.dedupe import merge
from service_batch.batch.dispatcher import BatchDispatcher
from service_batch.batch.distributor import cancel_all, distribute, reject_all
from service_batch.batch.emitter import CallEmitter, ScopedService
from service_batch.batch.filter import BATCH_PARAM, is_opted_out, should_batch
from service_batch.batch.integration import (
    BatchHook,
    batch_client,
    batch_hook,
    batch_methods,
)
from service_batch.batch.methods import BatchRemoteService
from service_batch.batch.window import BatchWindow, PendingBatchEntry, Waiter, WindowState

__all__ = [
    "BATCH_PARAM",
    "BatchAggregator",
    "BatchConfig",
    "BatchDispatcher",
    "BatchHook",
    "BatchRemoteService",
    "BatchWindow",
    "CallEmitter",
    "PendingBatchEntry",
    "ScopedService",
    "Waiter",
    "WindowState",
    "batch_client",
    "batch_hook",
    "batch_methods",
    "cancel_all",
    "distribute",
    "is_opted_out",
    "merge",
    "reject_all",
    "should_batch",
]
