"""Tests for the client, remote services and the hook pipeline."""

from __future__ import annotations

from typing import Any

import pytest

from service_batch import Client, LocalTransport
from service_batch.client import UNSET, HookContext, HookManager, HookType
from service_batch.errors import ConfigurationError, GeneralError, NotAcceptable, NotFound
from service_batch.transport import Transport


class RecordingTransport(Transport):
    """Transport answering every call with its own arguments."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple[Any, ...], dict[str, Any]]] = []
        self.closed = False

    async def call(self, method, path, args, params) -> Any:
        self.calls.append((method.value, path, tuple(args), dict(params)))
        return {"method": method.value, "path": path}

    async def close(self) -> None:
        self.closed = True


class TestHookManager:
    """Tests for HookManager."""

    @pytest.mark.asyncio
    async def test_priority_order(self) -> None:
        manager = HookManager()
        order = []
        manager.register(HookType.BEFORE, lambda ctx: order.append("late"), priority=90)
        manager.register(HookType.BEFORE, lambda ctx: order.append("early"), priority=10)

        await manager.run(HookType.BEFORE, HookContext(client=None, path="x", method=None))

        assert order == ["early", "late"]

    @pytest.mark.asyncio
    async def test_async_hook_can_replace_context(self) -> None:
        manager = HookManager()

        async def replace(ctx: HookContext) -> HookContext:
            return HookContext(client=None, path="replaced", method=None)

        manager.register_many(after=[replace])

        result = await manager.run(HookType.AFTER, HookContext(client=None, path="x", method=None))
        assert result.path == "replaced"

    @pytest.mark.asyncio
    async def test_register_many_keeps_types_apart(self) -> None:
        manager = HookManager()
        seen = []
        manager.register_many(
            before=[lambda ctx: seen.append("before")],
            error=[lambda ctx: seen.append("error")],
        )

        await manager.run(HookType.ERROR, HookContext(client=None, path="x", method=None))
        await manager.run(HookType.AFTER, HookContext(client=None, path="x", method=None))

        assert seen == ["error"]

    def test_register_names_hook_after_callback(self) -> None:
        def audit(ctx: HookContext) -> None:
            return None

        assert HookManager().register(HookType.ERROR, audit).name == "audit"

    def test_unset_is_falsy(self) -> None:
        assert not UNSET
        assert not HookContext(client=None, path="x", method=None).has_result


class TestRemoteService:
    """Tests for RemoteService calls."""

    @pytest.mark.asyncio
    async def test_methods_reach_transport(self) -> None:
        transport = RecordingTransport()
        service = Client(transport).service("/users/")

        await service.get(1)
        await service.find({"query": {"a": 1}})
        await service.create({"x": 1})
        await service.update(1, {"x": 2})
        await service.patch(1, {"x": 3})
        await service.remove(1)

        assert [call[0] for call in transport.calls] == [
            "get", "find", "create", "update", "patch", "remove",
        ]
        assert transport.calls[1] == ("find", "users", (), {"query": {"a": 1}})

    @pytest.mark.asyncio
    async def test_hook_order(self) -> None:
        client = Client(RecordingTransport())
        order = []
        client.hooks(
            before=[lambda ctx: order.append("app before")],
            after=[lambda ctx: order.append("app after")],
        )
        client.service("users").hooks(
            before=[lambda ctx: order.append("service before")],
            after=[lambda ctx: order.append("service after")],
        )

        await client.service("users").get(1)

        assert order == ["app before", "service before", "service after", "app after"]

    @pytest.mark.asyncio
    async def test_before_hook_result_skips_transport(self) -> None:
        transport = RecordingTransport()
        client = Client(transport)

        def short_circuit(ctx: HookContext) -> None:
            ctx.result = {"cached": True}

        client.hooks(before=[short_circuit])

        assert await client.service("users").get(1) == {"cached": True}
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_error_hooks_can_replace_error(self, client: Client) -> None:
        def translate(ctx: HookContext) -> None:
            ctx.error = NotFound("translated")

        client.service("dummy").hooks(error=[translate])

        with pytest.raises(NotFound, match="translated"):
            await client.service("dummy").get("error")

    @pytest.mark.asyncio
    async def test_error_hooks_can_recover(self, client: Client) -> None:
        def recover(ctx: HookContext) -> None:
            ctx.error = None
            ctx.result = {"recovered": True}

        client.hooks(error=[recover])

        assert await client.service("dummy").get("error") == {"recovered": True}

    @pytest.mark.asyncio
    async def test_service_handles_are_cached(self) -> None:
        client = Client(RecordingTransport())
        assert client.service("users") is client.service("/users")

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        transport = RecordingTransport()
        async with Client(transport):
            pass
        assert transport.closed


class TestLocalTransport:
    """Tests for calls through the in-process transport."""

    @pytest.mark.asyncio
    async def test_errors_keep_their_kind(self, client: Client) -> None:
        with pytest.raises(NotAcceptable) as exc_info:
            await client.service("dummy").get("feathers-error")
        assert exc_info.value.to_dict()["className"] == "not-acceptable"

    @pytest.mark.asyncio
    async def test_plain_exceptions_become_general_errors(self, client: Client) -> None:
        with pytest.raises(GeneralError, match="This did not work"):
            await client.service("dummy").get("error")

    @pytest.mark.asyncio
    async def test_unknown_service(self, client: Client) -> None:
        with pytest.raises(NotFound):
            await client.service("nowhere").find()

    @pytest.mark.asyncio
    async def test_results_are_copies(self, app: Any) -> None:
        shared = {"id": 1}

        class SharedService:
            async def get(self, id: Any, params: dict[str, Any]) -> Any:
                return shared

        app.use("shared", SharedService())
        result = await Client(LocalTransport(app)).service("shared").get(1)

        assert result == shared
        assert result is not shared


class TestClientBuilder:
    """Tests for ClientBuilder."""

    def test_build_requires_transport_or_url(self) -> None:
        with pytest.raises(ConfigurationError):
            Client.builder().build()

    def test_build_with_transport(self) -> None:
        transport = RecordingTransport()
        client = Client.builder().transport(transport).build()
        assert client.transport is transport

    def test_build_http_transport(self) -> None:
        client = (
            Client.builder()
            .base_url("http://localhost:3030")
            .timeout(5)
            .headers({"X-Test": "1"})
            .build()
        )
        assert client.transport.base_url == "http://localhost:3030"
