#!/usr/bin/env python3
"""Mock posts API for deterministic runs and benchmarks.

This module provides a configurable stand-in for the remote posts API so that
the sequential and concurrent runners can be compared without external
dependencies. It supports:
- Configurable fixed latency with optional seeded jitter
- A health endpoint
- ``/posts/{id}`` returning ``{id, userId, title, body}``
- Fault injection per id: HTTP 500 for failing ids, a non-JSON body for
  malformed ids, 404 for ids beyond ``post_count``

Usage:
    config = MockServerConfig(port=0, base_latency_ms=20.0, failing_ids=frozenset({2}))
    async with MockServer(config) as server:
        print(server.base_url)
"""

from __future__ import annotations

import argparse
import asyncio
import random
from dataclasses import dataclass, field
from typing import Any

from aiohttp import web


@dataclass(frozen=True, slots=True)
class MockServerConfig:
    """Configuration for the mock posts API.

    Attributes:
        host: Host address to bind to (default: 127.0.0.1)
        port: Port number to listen on; 0 picks a free port (default: 8765)
        base_latency_ms: Fixed latency in milliseconds added to post responses
        jitter_seed: Optional seed for reproducible random jitter
        post_count: Number of existing posts; higher ids return 404
        failing_ids: Ids that answer with HTTP 500
        malformed_ids: Ids that answer 200 with a body that is not JSON
    """

    host: str = "127.0.0.1"
    port: int = 8765
    base_latency_ms: float = 10.0
    jitter_seed: int | None = None
    post_count: int = 100
    failing_ids: frozenset[int] = frozenset()
    malformed_ids: frozenset[int] = frozenset()


def make_post(post_id: int) -> dict[str, Any]:
    """Build the wire form of a post."""
    return {
        "userId": (post_id - 1) // 10 + 1,
        "id": post_id,
        "title": f"post {post_id}",
        "body": f"body of post {post_id}",
    }


@dataclass
class MockServer:
    """Async HTTP mock of the posts API.

    Example:
        ```python
        import asyncio
        from benchmarks.mock_server import MockServer, MockServerConfig

        async def main():
            async with MockServer(MockServerConfig(port=0)) as server:
                print(f"Server running at {server.base_url}")

        asyncio.run(main())
        ```
    """

    config: MockServerConfig
    _request_count: int = field(default=0, init=False)
    _random: random.Random = field(default_factory=random.Random, init=False)
    _runner: web.AppRunner | None = field(default=None, init=False)
    _site: web.TCPSite | None = field(default=None, init=False)
    _bound_port: int | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        """Initialize random number generator for jitter."""
        self._random = random.Random(self.config.jitter_seed)

    @property
    def base_url(self) -> str:
        """Get the base URL of the server."""
        port = self._bound_port or self.config.port
        return f"http://{self.config.host}:{port}"

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    @property
    def request_count(self) -> int:
        """Number of post requests handled so far."""
        return self._request_count

    def _calculate_delay(self) -> float:
        """Calculate response delay in seconds, with 0-20% jitter when seeded."""
        base_delay = self.config.base_latency_ms / 1000.0
        if self.config.jitter_seed is not None:
            return base_delay + self._random.uniform(0, 0.2) * base_delay
        return base_delay

    async def handle_health(self, request: web.Request) -> web.Response:
        """Handle health check requests (no delay)."""
        return web.json_response({"status": "healthy", "server": "mock"})

    async def handle_post(self, request: web.Request) -> web.Response:
        """Handle ``GET /posts/{id}``.

        Returns:
            The post as JSON after the configured delay, or an injected fault.
        """
        self._request_count += 1
        await asyncio.sleep(self._calculate_delay())

        try:
            post_id = int(request.match_info["post_id"])
        except ValueError:
            return web.json_response({"error": "Invalid post id"}, status=400)

        if post_id in self.config.failing_ids:
            return web.json_response({"error": "simulated error"}, status=500)
        if post_id in self.config.malformed_ids:
            return web.Response(text="<html>not json</html>", content_type="text/html")
        if not 1 <= post_id <= self.config.post_count:
            return web.json_response({}, status=404)

        return web.json_response(make_post(post_id))

    def _create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/health", self.handle_health)
        app.router.add_get("/posts/{post_id}", self.handle_post)
        return app

    async def start(self) -> None:
        """Start the mock server.

        Raises:
            RuntimeError: If the server is already running.
        """
        if self._runner is not None:
            raise RuntimeError("Server is already running")

        self._runner = web.AppRunner(self._create_app())
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        self._bound_port = self.config.port
        if self._runner.addresses:
            address = self._runner.addresses[0]
            if isinstance(address, tuple) and len(address) >= 2:
                self._bound_port = address[1]

        self._request_count = 0

    async def stop(self) -> None:
        """Stop the mock server.

        Raises:
            RuntimeError: If the server is not running.
        """
        if self._runner is None:
            raise RuntimeError("Server is not running")

        await self._runner.cleanup()
        self._runner = None
        self._site = None
        self._bound_port = None

    async def __aenter__(self) -> MockServer:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()


async def _serve_forever(config: MockServerConfig) -> None:
    async with MockServer(config) as server:
        print(f"Mock posts API running at {server.base_url} (Ctrl+C to stop)")
        await asyncio.Event().wait()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the mock posts API")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--latency-ms", type=float, default=10.0)
    parser.add_argument(
        "--jitter-seed", type=int, default=None, help="Seed for 0-20%% latency jitter"
    )
    parser.add_argument("--post-count", type=int, default=100, help="Ids above this return 404")
    parser.add_argument("--fail", type=int, nargs="*", default=[], help="Ids answering 500")
    parser.add_argument(
        "--malformed", type=int, nargs="*", default=[], help="Ids answering a non-JSON body"
    )
    return parser


def config_from_args(argv: list[str] | None = None) -> MockServerConfig:
    """Parse command-line arguments into a MockServerConfig."""
    args = build_parser().parse_args(argv)
    return MockServerConfig(
        port=args.port,
        base_latency_ms=args.latency_ms,
        jitter_seed=args.jitter_seed,
        post_count=args.post_count,
        failing_ids=frozenset(args.fail),
        malformed_ids=frozenset(args.malformed),
    )


if __name__ == "__main__":
    try:
        asyncio.run(_serve_forever(config_from_args()))
    except KeyboardInterrupt:
        pass
