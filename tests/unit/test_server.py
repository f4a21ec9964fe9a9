"""Tests for the service registry, batch executor and batch endpoint."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from service_batch.errors import (
    ConfigurationError,
    GeneralError,
    MethodNotAllowed,
    NotAcceptable,
    NotFound,
)
from service_batch.server import Application, BatchExecutor, BatchService
from service_batch.types import CallDescriptor


class ReadOnlyService:
    """Service with a synchronous get only."""

    def get(self, id: Any, params: dict[str, Any]) -> dict[str, Any]:
        return {"id": id, "query": params.get("query", {})}


class TestApplication:
    """Tests for Application."""

    def test_use_builds_method_table(self) -> None:
        app = Application()
        entry = app.use("/readonly/", ReadOnlyService())

        assert entry.name == "readonly"
        assert "readonly" in app
        assert [m.value for m in entry.handlers] == ["get"]

    def test_use_rejects_empty_name(self) -> None:
        with pytest.raises(ConfigurationError):
            Application().use("/", ReadOnlyService())

    def test_use_rejects_service_without_methods(self) -> None:
        with pytest.raises(ConfigurationError):
            Application().use("nothing", object())

    @pytest.mark.asyncio
    async def test_call_sync_handler(self) -> None:
        app = Application()
        app.use("readonly", ReadOnlyService())

        result = await app.call("get", "readonly", (1,), {"query": {"a": 1}})
        assert result == {"id": 1, "query": {"a": 1}}

    @pytest.mark.asyncio
    async def test_call_errors(self) -> None:
        app = Application()
        app.use("readonly", ReadOnlyService())

        with pytest.raises(NotFound):
            await app.call("get", "missing", (1,))
        with pytest.raises(MethodNotAllowed):
            await app.call("remove", "readonly", (1,))
        with pytest.raises(NotAcceptable):
            await app.call("upsert", "readonly", (1,))

    @pytest.mark.asyncio
    async def test_dispatch_descriptor(self, app: Application) -> None:
        descriptor = CallDescriptor.for_call("patch", "dummy", (1, {}))
        assert await app.dispatch(descriptor) == {"method": "patch"}


class TestBatchExecutor:
    """Tests for BatchExecutor."""

    @pytest.mark.asyncio
    async def test_results_are_index_aligned(self, app: Application) -> None:
        executor = BatchExecutor(app)

        results = await executor.execute(
            [
                ["get", "dummy", "testing"],
                ["get", "dummy", "error"],
                ["find", "dummy", {"query": {}}],
            ]
        )

        assert [r.is_fulfilled for r in results] == [True, False, True]
        assert results[0].value == {"id": "testing"}
        assert isinstance(results[1].reason, GeneralError)
        assert results[1].reason.message == "This did not work"
        assert results[2].value == {"method": "find"}

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self) -> None:
        running = 0
        peak = 0

        class SlowService:
            async def get(self, id: Any, params: dict[str, Any]) -> Any:
                nonlocal running, peak
                running += 1
                peak = max(peak, running)
                await asyncio.sleep(0.01)
                running -= 1
                return id

        app = Application()
        app.use("slow", SlowService())

        results = await BatchExecutor(app).execute([["get", "slow", i] for i in range(5)])

        assert [r.value for r in results] == [0, 1, 2, 3, 4]
        assert peak == 5

    @pytest.mark.asyncio
    async def test_max_concurrent(self) -> None:
        running = 0
        peak = 0

        class SlowService:
            async def get(self, id: Any, params: dict[str, Any]) -> Any:
                nonlocal running, peak
                running += 1
                peak = max(peak, running)
                await asyncio.sleep(0.01)
                running -= 1
                return id

        app = Application()
        app.use("slow", SlowService())

        executor = BatchExecutor(app, max_concurrent=2)
        await executor.execute([["get", "slow", i] for i in range(5)])

        assert executor.max_concurrent == 2
        assert peak == 2

    @pytest.mark.asyncio
    async def test_unknown_service_fails_whole_batch(self, app: Application) -> None:
        executor = BatchExecutor(app)

        with pytest.raises(NotAcceptable) as exc_info:
            await executor.execute([["get", "dummy", 1], ["get", "nowhere", 1]])

        assert exc_info.value.data["index"] == 1

    @pytest.mark.asyncio
    async def test_structural_errors_run_nothing(self) -> None:
        calls = []

        class CountingService:
            async def get(self, id: Any, params: dict[str, Any]) -> Any:
                calls.append(id)
                return id

        app = Application()
        app.use("counting", CountingService())

        with pytest.raises(NotAcceptable):
            await BatchExecutor(app).execute([["get", "counting", 1], ["remove", "counting", 1]])
        assert calls == []

    @pytest.mark.asyncio
    async def test_empty_batch(self, app: Application) -> None:
        assert await BatchExecutor(app).execute([]) == []


class TestBatchService:
    """Tests for the batch endpoint."""

    @pytest.mark.asyncio
    async def test_create_returns_wire_payloads(self, app: Application) -> None:
        service = BatchService(app)

        result = await service.create(
            {"calls": [["get", "dummy", "testing"], ["get", "dummy", "feathers-error"]]}
        )

        assert result == [
            {"status": "fulfilled", "value": {"id": "testing"}},
            {
                "status": "rejected",
                "reason": {
                    "name": "NotAcceptable",
                    "message": "No!",
                    "code": 406,
                    "className": "not-acceptable",
                    "data": None,
                    "errors": {},
                },
            },
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [None, [], {"calls": "get"}, {"calls": ["get"]}])
    async def test_create_rejects_malformed_payload(
        self, app: Application, payload: Any
    ) -> None:
        with pytest.raises(NotAcceptable) as exc_info:
            await BatchService(app).create(payload)
        assert exc_info.value.field_errors
