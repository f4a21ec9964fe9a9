#!/usr/bin/env python3
"""
Basic batching example.

This example runs a client and a batch endpoint in one process: calls made
together are sent as one batch request, the server runs them concurrently
and every caller gets its own result or error back.

Usage:
    python examples/basic_batching.py
"""

import asyncio
from typing import Any

from service_batch import Application, BatchService, Client, LocalTransport
from service_batch.errors import NotFound

USERS = {1: {"id": 1, "name": "Ada"}, 2: {"id": 2, "name": "Grace"}}


class UserService:
    """In-memory user service."""

    async def get(self, id: Any, params: dict[str, Any]) -> dict[str, Any]:
        if id not in USERS:
            raise NotFound(f"No user with id {id}")
        return USERS[id]

    async def find(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        name = params.get("query", {}).get("name")
        return [user for user in USERS.values() if name in (None, user["name"])]


async def main() -> None:
    """Run batching example."""
    app = Application()
    app.use("users", UserService())
    app.use("batch", BatchService(app))

    client = (
        Client.builder()
        .transport(LocalTransport(app))
        .batch("batch")
        .build()
    )

    # Method 1: implicit batching, three calls in one round trip
    results = await asyncio.gather(
        client.service("users").get(1),
        client.service("users").get(2),
        client.service("users").get(3),
        return_exceptions=True,
    )
    for result in results:
        print(f"Implicit: {result!r}")
    print()

    # Method 2: opting a single call out of batching
    user = await client.service("users").get(1, {"batch": False})
    print(f"Unbatched: {user}")
    print()

    # Method 3: explicit scope with settled results
    settled = await client.service("batch").all_settled(
        lambda service: (
            service("users").find({"query": {"name": "Ada"}}),
            service("users").get(42),
        )
    )
    for result in settled:
        print(f"Settled: {result.to_dict()}")


if __name__ == "__main__":
    asyncio.run(main())
