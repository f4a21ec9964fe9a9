"""HTTP 传输层：基于 httpx 的异步 REST 客户端，将服务方法映射为 HTTP 请求。

HTTP transport using httpx for async requests.

Provides:
- REST mapping of service methods (find/get/create/update/patch/remove)
- Bracket-style query encoding
- Configurable timeouts and proxy support
- Reconstruction of remote service errors
"""

from __future__ import annotations

import importlib.util
import os
from collections.abc import Mapping
from contextlib import suppress
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from service_batch.errors import BadRequest, ServiceError, TransportError, error_for_code
from service_batch.transport.base import Transport
from service_batch.types.call import ServiceMethod

if TYPE_CHECKING:
    from collections.abc import Sequence


# Default timeouts
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0

_UA_VERSION: str | None = None

_HTTP_METHODS: dict[ServiceMethod, str] = {
    ServiceMethod.FIND: "GET",
    ServiceMethod.GET: "GET",
    ServiceMethod.CREATE: "POST",
    ServiceMethod.UPDATE: "PUT",
    ServiceMethod.PATCH: "PATCH",
    ServiceMethod.REMOVE: "DELETE",
}

# Methods whose id may be omitted to target several records
_MULTI_METHODS = frozenset({ServiceMethod.PATCH, ServiceMethod.REMOVE})


def _http2_enabled() -> bool:
    """Enable HTTP/2 only when optional dependency is present."""
    return importlib.util.find_spec("h2") is not None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("SERVICE_BATCH_HTTP_TRUST_ENV", "0") == "1"


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            from importlib.metadata import version

            _UA_VERSION = version("service-batch")
        except Exception:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


def _query_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query(query: Mapping[str, Any], prefix: str = "") -> list[tuple[str, str]]:
    """Flatten a nested query into bracket-style pairs.

    Example:
        >>> encode_query({"age": {"$gt": 18}, "tags": ["a", "b"]})
        [('age[$gt]', '18'), ('tags[0]', 'a'), ('tags[1]', 'b')]
    """
    pairs: list[tuple[str, str]] = []
    for key, value in query.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if isinstance(value, Mapping):
            pairs.extend(encode_query(value, name))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_name = f"{name}[{index}]"
                if isinstance(item, Mapping):
                    pairs.extend(encode_query(item, item_name))
                else:
                    pairs.append((item_name, _query_scalar(item)))
        else:
            pairs.append((name, _query_scalar(value)))
    return pairs


def build_route(
    method: ServiceMethod,
    path: str,
    args: Sequence[Any],
) -> tuple[str, str, Any]:
    """Map a service call to (HTTP method, URL path, JSON body).

    Raises:
        BadRequest: If a required id is missing
    """
    service_path = "/" + path.strip("/")
    arity = method.arity
    if len(args) != arity:
        raise BadRequest(
            f"'{method.value}' takes {arity} positional argument(s), got {len(args)}"
        )

    if method is ServiceMethod.FIND:
        return _HTTP_METHODS[method], service_path, None
    if method is ServiceMethod.CREATE:
        return _HTTP_METHODS[method], service_path, args[0]

    record_id = args[0]
    if record_id is None and method not in _MULTI_METHODS:
        raise BadRequest(f"id for '{method.value}' can not be None")
    url = service_path if record_id is None else f"{service_path}/{quote(str(record_id), safe='')}"
    body = args[1] if arity == 2 else None
    return _HTTP_METHODS[method], url, body


class HttpTransport(Transport):
    """HTTP transport for REST service APIs.

    Uses httpx for async HTTP requests.

    Example:
        >>> transport = HttpTransport("http://localhost:3030")
        >>> await transport.call(ServiceMethod.GET, "messages", (1,), {})
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        proxy: str | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            base_url: Server base URL
            timeout: Request timeout in seconds
            headers: Headers sent with every request
            proxy: Proxy URL
        """
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})

        self._timeout = timeout
        if self._timeout is None:
            env_timeout = os.getenv("SERVICE_BATCH_HTTP_TIMEOUT_SECS")
            if env_timeout:
                with suppress(ValueError):
                    self._timeout = float(env_timeout)
        if self._timeout is None:
            self._timeout = _DEFAULT_TIMEOUT

        # Resolve proxy: default to direct connection unless trust_env is enabled.
        if proxy is not None:
            self._proxy = proxy
        elif _trust_env_enabled():
            self._proxy = os.getenv("SERVICE_BATCH_PROXY_URL")
        else:
            self._proxy = None

        # Client instance (lazy initialization)
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float | None:
        return self._timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(
                self._timeout,
                connect=_DEFAULT_CONNECT_TIMEOUT,
            )

            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=timeout,
                proxy=self._proxy,
                http2=_http2_enabled(),
                trust_env=_trust_env_enabled(),
            )

        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"service-batch/{_get_ua_version()}",
        }
        headers.update(self._headers)
        if extra_headers:
            headers.update(extra_headers)
        return headers

    async def call(
        self,
        method: ServiceMethod,
        path: str,
        args: Sequence[Any],
        params: Mapping[str, Any],
    ) -> Any:
        http_method, url, body = build_route(ServiceMethod(method), path, args)
        query = encode_query(params.get("query") or {})
        response = await self.request(http_method, url, json=body, params=query or None)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON response: {e}",
                url=f"{self._base_url}{url}",
                status_code=response.status_code,
                cause=e,
            ) from e

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: dict[str, str] | None = None,
        params: list[tuple[str, str]] | None = None,
    ) -> httpx.Response:
        """Make an HTTP request.

        Args:
            method: HTTP method
            path: Request path (relative to base URL)
            json: JSON body
            headers: Additional headers
            params: Query parameters

        Returns:
            HTTP response

        Raises:
            TransportError: On network/connection errors
            ServiceError: On error responses (4xx, 5xx)
        """
        client = self._get_client()
        request_headers = self._build_headers(headers)

        try:
            response = await client.request(
                method=method,
                url=path,
                json=json,
                headers=request_headers,
                params=params,
            )
        except httpx.ConnectError as e:
            raise TransportError(
                f"Connection failed: {e}",
                url=f"{self._base_url}{path}",
                cause=e,
            ) from e
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request timed out: {e}",
                url=f"{self._base_url}{path}",
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"HTTP error: {e}",
                url=f"{self._base_url}{path}",
                cause=e,
            ) from e

        if response.status_code >= 400:
            raise self._error_from_response(response)

        return response

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ServiceError:
        """Rebuild the service error carried by an error response."""
        body = None
        with suppress(Exception):
            body = response.json()

        if isinstance(body, Mapping) and ("name" in body or "className" in body):
            return ServiceError.from_dict(body)

        message = (
            str(body.get("message"))
            if isinstance(body, Mapping) and body.get("message")
            else response.text or f"HTTP {response.status_code}"
        )
        return error_for_code(response.status_code, message)
