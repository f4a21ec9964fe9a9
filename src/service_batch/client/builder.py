"""
Builder for fluent client construction.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from service_batch.errors import ConfigurationError

if TYPE_CHECKING:
    from service_batch.client.core import Client
    from service_batch.transport.base import Transport


class ClientBuilder:
    """Builder for creating Client instances.

    Example:
        >>> client = (
        ...     Client.builder()
        ...     .base_url("http://localhost:3030")
        ...     .timeout(10)
        ...     .batch("batch", exclude=["authentication"])
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._base_url: str | None = None
        self._timeout: float | None = None
        self._headers: dict[str, str] = {}
        self._transport: Transport | None = None
        self._batch: dict[str, Any] | None = None
        self._batch_methods = False

    def base_url(self, url: str) -> ClientBuilder:
        """Set the server base URL for the HTTP transport.

        Returns:
            Self for chaining
        """
        self._base_url = url
        return self

    def timeout(self, seconds: float) -> ClientBuilder:
        """Set the HTTP request timeout.

        Returns:
            Self for chaining
        """
        self._timeout = seconds
        return self

    def headers(self, headers: Mapping[str, str]) -> ClientBuilder:
        """Add headers sent with every HTTP request.

        Returns:
            Self for chaining
        """
        self._headers.update(headers)
        return self

    def transport(self, transport: Transport) -> ClientBuilder:
        """Use an explicit transport instead of HTTP.

        Returns:
            Self for chaining
        """
        self._transport = transport
        return self

    def batch(
        self,
        batch_service: str,
        *,
        exclude: Iterable[str] = (),
        timeout: float = 0.0,
        methods: bool = True,
    ) -> ClientBuilder:
        """Enable implicit batching.

        Args:
            batch_service: Name of the batch endpoint service
            exclude: Services that are never batched
            timeout: Seconds to hold each window open
            methods: Also install ``all``/``all_settled`` on the batch service

        Returns:
            Self for chaining
        """
        self._batch = {
            "batch_service": batch_service,
            "exclude": tuple(exclude),
            "timeout": timeout,
        }
        self._batch_methods = methods
        return self

    def build(self) -> Client:
        """Build the Client.

        Raises:
            ConfigurationError: If neither a transport nor a base URL is set,
                or the batch options are invalid
        """
        from service_batch.batch.integration import batch_client, batch_methods
        from service_batch.client.core import Client
        from service_batch.transport.http import HttpTransport

        transport = self._transport
        if transport is None:
            if not self._base_url:
                raise ConfigurationError(
                    "A transport or base URL must be set before building",
                    option="base_url",
                )
            transport = HttpTransport(
                self._base_url,
                timeout=self._timeout,
                headers=self._headers or None,
            )

        client = Client(transport)
        if self._batch is not None:
            client.configure(batch_client(self._batch))
            if self._batch_methods:
                client.configure(batch_methods(self._batch))
        return client
