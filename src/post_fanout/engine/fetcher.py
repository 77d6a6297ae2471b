"""Resource fetchers for the post API.

Two implementations of the same contract, ``fetch(post_id) -> FetchOutcome``:

- PostFetcher: blocking, built on a shared ``requests.Session``
- AsyncPostFetcher: non-blocking, built on a shared ``httpx.AsyncClient``

Each call performs exactly one GET to ``{base_url}/posts/{id}``. There are no
retries. Transport errors, non-2xx statuses and undecodable bodies are all
reported as a FetchFailure carrying the underlying exception.
"""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Self

import httpx
import requests

from post_fanout.engine.models import FetchConfig, FetchFailure, FetchOutcome, FetchSuccess, Post

logger = logging.getLogger(__name__)


def _log_failure(failure: FetchFailure, url: str) -> None:
    log_entry = {
        "event": "fetch_failed",
        "post_id": failure.post_id,
        "url": url,
        "reason": failure.reason,
    }
    logger.debug(json.dumps(log_entry))


class PostFetcher:
    """Blocking fetcher using the `requests` library.

    Owns its Session unless one is passed in.

    Example:
        >>> with PostFetcher(FetchConfig()) as fetcher:
        ...     outcome = fetcher.fetch(1)
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._owns_session = session is None
        self._session = requests.Session() if session is None else session

    @property
    def config(self) -> FetchConfig:
        return self._config

    def fetch(self, post_id: int) -> FetchOutcome:
        """Fetch and decode a single post.

        Args:
            post_id: Identifier of the post.

        Returns:
            FetchSuccess on a 2xx response with a valid body, FetchFailure otherwise.
        """
        url = self._config.post_url(post_id)

        try:
            response = self._session.get(url, timeout=self._config.timeout)
            response.raise_for_status()
            post = Post.from_json(response.json())
        except requests.HTTPError as e:
            failure = FetchFailure(post_id, f"HTTP Error: {e}", e)
        except requests.Timeout as e:
            failure = FetchFailure(post_id, f"Timeout: {e}", e)
        except requests.ConnectionError as e:
            failure = FetchFailure(post_id, f"Connection Error: {e}", e)
        except requests.JSONDecodeError as e:
            failure = FetchFailure(post_id, f"Decode Error: {e}", e)
        except requests.RequestException as e:
            failure = FetchFailure(post_id, f"Request Error: {e}", e)
        except ValueError as e:
            failure = FetchFailure(post_id, f"Decode Error: {e}", e)
        else:
            return FetchSuccess(post_id, post)

        _log_failure(failure, url)
        return failure

    def close(self) -> None:
        """Close the underlying session if this fetcher created it."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()


class AsyncPostFetcher:
    """Async fetcher using a shared ``httpx.AsyncClient``.

    Connection limits follow ``config.max_concurrent``; with no bound the pool
    is unbounded too, so every request can be in flight at once.

    Example:
        ```python
        async with AsyncPostFetcher(FetchConfig()) as fetcher:
            outcome = await fetcher.fetch(1)
        ```
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._owns_client = client is None
        self._client = self._build_client(self._config) if client is None else client

    @staticmethod
    def _build_client(config: FetchConfig) -> httpx.AsyncClient:
        limits = httpx.Limits(
            max_connections=config.max_concurrent,
            max_keepalive_connections=config.max_concurrent,
        )
        return httpx.AsyncClient(limits=limits, timeout=httpx.Timeout(config.timeout))

    @property
    def config(self) -> FetchConfig:
        return self._config

    async def fetch(self, post_id: int) -> FetchOutcome:
        """Fetch and decode a single post.

        Args:
            post_id: Identifier of the post.

        Returns:
            FetchSuccess on a 2xx response with a valid body, FetchFailure otherwise.
        """
        url = self._config.post_url(post_id)

        try:
            response = await self._client.get(url)
            response.raise_for_status()
            post = Post.from_json(response.json())
        except httpx.HTTPStatusError as e:
            failure = FetchFailure(post_id, f"HTTP Error: {e}", e)
        except httpx.TimeoutException as e:
            failure = FetchFailure(post_id, f"Timeout: {e}", e)
        except httpx.TransportError as e:
            failure = FetchFailure(post_id, f"Connection Error: {e}", e)
        except httpx.HTTPError as e:
            failure = FetchFailure(post_id, f"Request Error: {e}", e)
        except ValueError as e:
            failure = FetchFailure(post_id, f"Decode Error: {e}", e)
        else:
            return FetchSuccess(post_id, post)

        _log_failure(failure, url)
        return failure

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
