"""
In-process transport.

Calls an Application directly while still crossing a serialization boundary:
arguments, results and errors are JSON round-tripped, so callers observe the
same values and rebuilt error kinds they would over the network.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from service_batch.errors import ServiceError, TransportError, convert_error
from service_batch.transport.base import Transport

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from service_batch.server.app import Application
    from service_batch.types.call import ServiceMethod


def _roundtrip(value: Any) -> Any:
    return json.loads(json.dumps(value))


class LocalTransport(Transport):
    """Transport bound to an in-process Application.

    Example:
        >>> app = Application()
        >>> app.use("messages", MessageService())
        >>> client = Client(LocalTransport(app))
    """

    def __init__(self, app: Application) -> None:
        self._app = app

    @property
    def app(self) -> Application:
        return self._app

    async def call(
        self,
        method: ServiceMethod,
        path: str,
        args: Sequence[Any],
        params: Mapping[str, Any],
    ) -> Any:
        try:
            wire_args = _roundtrip(list(args))
            wire_params = {"query": _roundtrip(params.get("query") or {})}
        except (TypeError, ValueError) as e:
            raise TransportError(
                f"Could not serialize arguments for '{path}.{method}': {e}",
                cause=e,
            ) from e

        try:
            result = await self._app.call(method, path, wire_args, wire_params)
            return _roundtrip(result)
        except Exception as e:
            payload = json.loads(json.dumps(convert_error(e).to_dict(), default=str))
            raise ServiceError.from_dict(payload) from None
