"""
Transport layer - moves individual service calls.

Provides:
- The Transport interface
- httpx-based REST transport
- In-process transport for an Application
"""

from service_batch.transport.base import Transport
from service_batch.transport.http import HttpTransport, build_route, encode_query
from service_batch.transport.local import LocalTransport

__all__ = [
    "HttpTransport",
    "LocalTransport",
    "Transport",
    "build_route",
    "encode_query",
]
