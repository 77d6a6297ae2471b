"""Fixtures that run the mock posts API on a free local port."""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import pytest_asyncio

from benchmarks.mock_server import MockServer, MockServerConfig

StartServer = Callable[..., Awaitable[MockServer]]


@pytest_asyncio.fixture()
async def start_mock_server() -> AsyncIterator[StartServer]:
    """Factory that starts mock servers and stops them after the test."""
    servers: list[MockServer] = []

    async def _start(**overrides: Any) -> MockServer:
        options: dict[str, Any] = {"port": 0, "base_latency_ms": 1.0, "jitter_seed": 42}
        options.update(overrides)
        server = MockServer(MockServerConfig(**options))
        await server.start()
        servers.append(server)
        return server

    yield _start

    for server in servers:
        if server.is_running:
            await server.stop()


@pytest_asyncio.fixture()
async def mock_server(start_mock_server: StartServer) -> MockServer:
    """A mock posts API with default behavior."""
    return await start_mock_server()
