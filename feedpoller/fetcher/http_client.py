"""
HTTP fetcher for the feed poller.

This module retrieves feed documents with a bounded wait and classifies the
outcome. It uses httpx for making HTTP requests. No retries happen here;
retry timing belongs to the scheduler and its checkpoints.
"""
from typing import Dict, Optional

import httpx
import structlog

from feedpoller.errors import FetchFailedError, RateLimitedError

# Set up structured logger
logger = structlog.get_logger()

# Constants
DEFAULT_USER_AGENT = "feed-poller/0.1.0"
DEFAULT_TIMEOUT = 10.0  # seconds
DEFAULT_HEADERS = {
    "Accept": "application/atom+xml,application/rss+xml,application/xml;q=0.9,*/*;q=0.1",
}


class FeedFetcher:
    """
    Async fetcher for raw feed bytes.

    This class wraps an httpx client and maps every HTTP outcome onto the
    poller's error taxonomy: 2xx returns the body, 429 raises
    RateLimitedError, and everything else raises FetchFailedError.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: Optional[str] = None,
        default_headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds
            user_agent: User agent string to use for requests
            default_headers: Default headers to include in all requests
            transport: Optional httpx transport, used to stub the network in tests
        """
        self.timeout = timeout
        self.default_headers = {**DEFAULT_HEADERS, **(default_headers or {})}
        self.default_headers.setdefault("User-Agent", user_agent or DEFAULT_USER_AGENT)

        self.client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=self.default_headers,
            transport=transport,
        )

    async def __aenter__(self) -> "FeedFetcher":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def fetch(self, url: str) -> bytes:
        """
        Fetch a feed document.

        Args:
            url: Feed URL

        Returns:
            bytes: Response body

        Raises:
            RateLimitedError: If the server answered 429
            FetchFailedError: On any other non-2xx status or transport error
        """
        logger.debug("Fetching feed", url=url)

        try:
            response = await self.client.get(url)
        except httpx.TimeoutException as e:
            raise FetchFailedError(url, f"request timed out after {self.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchFailedError(url, f"request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitedError(url, retry_after=response.headers.get("Retry-After"))

        if not response.is_success:
            raise FetchFailedError(url, f"request failed with status {response.status_code}")

        logger.debug(
            "Feed fetched successfully",
            url=url,
            status_code=response.status_code,
            content_length=len(response.content),
        )
        return response.content
