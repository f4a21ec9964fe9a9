"""
Client layer - User-facing API.

This module provides:
- Client: Entry point for calling remote services
- RemoteService: Per-service handle running the hook pipeline
- ClientBuilder: Fluent client construction
- Hooks: Before/after/error hook pipeline
"""

from service_batch.client.builder import ClientBuilder
from service_batch.client.core import Client, RemoteService
from service_batch.client.hooks import UNSET, Hook, HookContext, HookManager, HookType

__all__ = [
    "UNSET",
    "Client",
    "ClientBuilder",
    "Hook",
    "HookContext",
    "HookManager",
    "HookType",
    "RemoteService",
]
