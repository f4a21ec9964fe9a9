"""Root pytest fixtures for service-batch tests."""

from __future__ import annotations

from typing import Any

import pytest

from service_batch import Application, BatchService, Client, LocalTransport
from service_batch.errors import NotAcceptable


class DummyService:
    """Service answering every method, with two failing ids for get."""

    async def get(self, id: Any, params: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        if id == "feathers-error":
            raise NotAcceptable("No!")
        if id == "error":
            raise RuntimeError("This did not work")
        return {"id": id}

    async def find(self, params: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return {"method": "find"}

    async def create(self, data: Any, params: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return {"method": "create"}

    async def update(self, id: Any, data: Any, params: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return {"method": "update"}

    async def patch(self, id: Any, data: Any, params: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return {"method": "patch"}

    async def remove(self, id: Any, params: dict[str, Any]) -> dict[str, Any]:  # noqa: ARG002
        return {"method": "remove"}


class RecordingBatchService(BatchService):
    """Batch endpoint that keeps every request and response it handled."""

    def __init__(self, app: Application) -> None:
        super().__init__(app)
        self.requests: list[Any] = []
        self.responses: list[list[dict[str, Any]]] = []

    async def create(
        self, data: Any, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        self.requests.append(data)
        results = await super().create(data, params)
        self.responses.append(results)
        return results

    @property
    def dispatch_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def dummy_service() -> DummyService:
    return DummyService()


@pytest.fixture
def app(dummy_service: DummyService) -> Application:
    """Application with the dummy service and a recording batch endpoint."""
    application = Application()
    application.use("dummy", dummy_service)
    application.use("batch", RecordingBatchService(application))
    return application


@pytest.fixture
def batch_record(app: Application) -> RecordingBatchService:
    return app.service("batch").service


@pytest.fixture
def client(app: Application) -> Client:
    """Plain client talking to the application in-process."""
    return Client(LocalTransport(app))
