"""
The batch endpoint.

Registered under the batch service name; accepts ``{"calls": [...]}`` on
create and answers with the wire form of every call's settled result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from service_batch.errors import NotAcceptable
from service_batch.server.executor import BatchExecutor
from service_batch.telemetry import get_logger
from service_batch.types.result import BatchRequest

if TYPE_CHECKING:
    from service_batch.server.app import Application

logger = get_logger(__name__)


class BatchService:
    """Service that runs a batch of calls against an Application.

    Example:
        >>> app = Application()
        >>> app.use("batch", BatchService(app))
    """

    def __init__(self, app: Application, *, max_concurrent: int | None = None) -> None:
        self._executor = BatchExecutor(app, max_concurrent=max_concurrent)

    @property
    def executor(self) -> BatchExecutor:
        return self._executor

    async def create(
        self,
        data: Any,
        params: dict[str, Any] | None = None,  # noqa: ARG002
    ) -> list[dict[str, Any]]:
        """Execute a batch.

        Args:
            data: ``{"calls": [[method, service, *args], ...]}``
            params: Call params (unused)

        Returns:
            Settled result payloads, index-aligned with ``calls``

        Raises:
            NotAcceptable: If the payload or any call in it is malformed
        """
        try:
            request = BatchRequest.model_validate(data)
        except ValidationError as exc:
            logger.warning("Rejected malformed batch payload", errors=exc.error_count())
            raise NotAcceptable(
                "Batch payload must be {'calls': [[method, service, ...args], ...]}",
                field_errors={
                    ".".join(str(part) for part in err["loc"]): err["msg"]
                    for err in exc.errors()
                },
            ) from exc

        results = await self._executor.execute(request.calls)
        return [result.to_dict() for result in results]
