"""Bounded-retry HTTP client shared by every outbound query."""

import asyncio
import json as jsonlib
import ssl
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp
import certifi
from aiohttp import ClientTimeout

from ..config import EngineConfig
from ..errors import NetworkError
from ..utils.logging import get_logger


@dataclass(frozen=True)
class FetchResponse:
    """A fully read HTTP response."""

    url: str
    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return jsonlib.loads(self.text)


class FetchClient:
    """Async HTTP client with a fixed per-attempt timeout and linear backoff.

    Only transport failures (connection errors, timeouts) are retried. Any
    HTTP status, including 4xx/5xx, is handed back to the caller. When every
    attempt fails a NetworkError is raised; callers are expected to catch it.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        session: Optional[aiohttp.ClientSession] = None
    ) -> None:
        """Initialize the fetch client.

        Args:
            config: Engine configuration (timeouts, retries, user agent)
            session: Optional aiohttp session for connection reuse
        """
        self.config = config or EngineConfig()
        self.logger = get_logger("FetchClient")
        self._session = session
        self._owns_session = session is None
        self._timeout = ClientTimeout(total=self.config.request_timeout)

    async def __aenter__(self) -> "FetchClient":
        """Async context manager entry."""
        self._get_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            aiohttp ClientSession
        """
        if self._session is None or self._session.closed:
            ssl_context = ssl.create_default_context(cafile=certifi.where())
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            self._session = aiohttp.ClientSession(timeout=self._timeout, connector=connector)
            self._owns_session = True
        return self._session

    async def request(
        self,
        url: str,
        method: str = "GET",
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> FetchResponse:
        """Perform a request, retrying transport failures.

        Args:
            url: Absolute URL
            method: HTTP method
            json: Optional JSON body
            headers: Extra request headers

        Returns:
            The response, whatever its status

        Raises:
            NetworkError: If every attempt failed at the transport level
        """
        request_headers = {"User-Agent": self.config.user_agent}
        if headers:
            request_headers.update(headers)

        attempts = self.config.max_retries + 1
        last_error: BaseException = RuntimeError("no attempt made")

        for attempt in range(1, attempts + 1):
            try:
                session = self._get_session()
                async with session.request(
                    method,
                    url,
                    json=json,
                    headers=request_headers,
                    timeout=self._timeout,
                ) as response:
                    body = await response.read()
                    return FetchResponse(
                        url=url,
                        status=response.status,
                        text=body.decode("utf-8", errors="replace"),
                    )
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = e
                self.logger.debug(f"{method} {url} failed (attempt {attempt}/{attempts}): {e!r}")
                if attempt < attempts:
                    await asyncio.sleep(attempt * self.config.backoff_seconds)

        self.logger.warning(f"{method} {url} failed after {attempts} attempts: {last_error!r}")
        raise NetworkError(url, attempts, last_error)
