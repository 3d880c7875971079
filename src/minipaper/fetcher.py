"""
Fetcher - Single-attempt HTTP transport for article pages and images.

Uses httpx with a desktop browser user agent. Non-2xx responses are returned
as data; only network failures and timeouts raise ``TransportError``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .config import ARTICLE_TIMEOUT, USER_AGENT
from .exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResponse:
    """Status and body of a fetched resource."""

    url: str
    status_code: int
    content: bytes
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, invalid bytes replaced."""
        return self.content.decode("utf-8", errors="replace")


class Fetcher:
    """Fetch pages and images with one timed attempt each."""

    def __init__(
        self,
        timeout: float = ARTICLE_TIMEOUT,
        user_agent: str = USER_AGENT,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Default timeout in seconds for each request
            user_agent: User-Agent header sent with every request
            transport: Optional httpx transport (used to stub the network)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialize HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/*,*/*;q=0.8",
                    "Accept-Language": "en-US,en;q=0.9",
                },
            )
        return self._client

    def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResponse:
        """
        Fetch a URL once.

        Args:
            url: Absolute URL to fetch
            timeout: Per-request timeout overriding the default

        Returns:
            FetchResponse with the status code and raw body

        Raises:
            TransportError: On network failure, timeout or an invalid URL
        """
        try:
            response = self.client.get(
                url, timeout=timeout if timeout is not None else self.timeout
            )
        except httpx.TimeoutException as e:
            raise TransportError(url, f"timed out ({e})") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

        logger.debug("GET %s -> %s", url, response.status_code)
        return FetchResponse(
            url=str(response.url),
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", ""),
        )
