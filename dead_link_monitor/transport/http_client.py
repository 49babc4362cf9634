"""
Asynchronous HTTP client used to probe links.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional

import aiohttp

from dead_link_monitor.utils.logging import get_business_logger
from dead_link_monitor.utils.errors import TransportError


DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 dead-link-monitor'
)


@dataclass
class FetchResponse:
    """Status line and headers of a completed exchange."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


class HTTPClient:
    """
    Thin aiohttp wrapper with a per-request timeout.

    Redirects are not followed so 3xx statuses and their Location header
    reach the caller. The client places no limit on outstanding requests;
    concurrency is bounded by the dispatcher.
    """

    def __init__(self, timeout: float = 30.0, user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize HTTP client.

        Args:
            timeout: Total per-request timeout in seconds
            user_agent: User-Agent header sent with each request
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = get_business_logger('dispatcher')

    async def open(self) -> None:
        if self.session is None or self.session.closed:
            # limit=0 lifts aiohttp's own connection pool cap
            connector = aiohttp.TCPConnector(limit=0)
            self.session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent},
            )

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()
        self.session = None

    async def get(self, url: str) -> FetchResponse:
        """
        Perform a GET request and return its status and headers.

        The response body is not read.

        Raises:
            TransportError: On connection, TLS, timeout or protocol failures
        """
        if self.session is None or self.session.closed:
            raise TransportError("HTTP client is not open", {"url": url})

        try:
            async with self.session.get(url, allow_redirects=False) as response:
                return FetchResponse(
                    status=response.status,
                    headers={key: value for key, value in response.headers.items()},
                )
        except asyncio.TimeoutError as e:
            raise TransportError(f"Timed out after {self.timeout}s", {"url": url}) from e
        except (aiohttp.ClientError, ValueError) as e:
            self.logger.debug(f"GET {url} failed: {type(e).__name__}: {e}")
            raise TransportError(f"{type(e).__name__}: {e}", {"url": url}) from e

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
