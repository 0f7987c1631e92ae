"""Shared fixtures for the feed poller test suite."""
from datetime import datetime, timezone
from typing import Callable, Dict, List

import httpx
import pytest

from feedpoller.clock import ManualClock
from feedpoller.config import PollerConfig
from feedpoller.fetcher.http_client import FeedFetcher
from feedpoller.models.feed import Feed
from feedpoller.storage.memory import MemoryFeedStore

START = datetime(2024, 1, 3, 12, 0, 0, tzinfo=timezone.utc)

ATOM_TWO_ENTRIES = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <id>urn:example:feed</id>
  <updated>2024-01-02T10:00:00Z</updated>
  <entry>
    <title>Second post</title>
    <link href="https://example.com/posts/2"/>
    <id>urn:example:post:2</id>
    <published>2024-01-02T10:00:00Z</published>
    <updated>2024-01-02T10:00:00Z</updated>
  </entry>
  <entry>
    <title>First post</title>
    <link href="https://example.com/posts/1"/>
    <id>urn:example:post:1</id>
    <published>2024-01-01T10:00:00Z</published>
    <updated>2024-01-01T10:00:00Z</updated>
  </entry>
</feed>
"""

RSS_TWO_ITEMS = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0">
  <channel>
    <title>Example RSS</title>
    <link>https://example.com/</link>
    <description>Example</description>
    <item>
      <title>Second post</title>
      <link>https://example.com/posts/2</link>
      <guid isPermaLink="false">urn:example:post:2</guid>
      <pubDate>Tue, 02 Jan 2024 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>First post</title>
      <link>https://example.com/posts/1</link>
      <guid isPermaLink="false">urn:example:post:1</guid>
      <pubDate>Mon, 01 Jan 2024 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>
"""

RSS_NO_ITEMS = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0">
  <channel>
    <title>Quiet RSS</title>
    <link>https://example.com/</link>
    <description>Nothing here yet</description>
  </channel>
</rss>
"""

UNKNOWN_ROOT = b"""<?xml version="1.0" encoding="utf-8"?>
<foo><bar>baz</bar></foo>
"""


def make_feed(feed_id: int = 1, url: str = "https://example.com/feed.xml", last_checked=None) -> Feed:
    return Feed(id=feed_id, url=url, last_checked=last_checked, created_at=START)


class FakeFeedServer:
    """Routes requests by URL to canned httpx responses and records them."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[str] = []
        self.request_times: List[datetime] = []

    def add(self, url: str, status_code: int = 200, content: bytes = b"", headers=None) -> None:
        self.routes[url] = lambda request: httpx.Response(
            status_code, content=content, headers=headers or {}
        )

    def add_error(self, url: str, error: Exception) -> None:
        def raise_error(request):
            raise error
        self.routes[url] = raise_error

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        self.request_times.append(self.clock.now())
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404)
        return route(request)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture
def store(clock) -> MemoryFeedStore:
    return MemoryFeedStore(now=clock.now)


@pytest.fixture
def server(clock) -> FakeFeedServer:
    return FakeFeedServer(clock)


@pytest.fixture
def fetcher(server) -> FeedFetcher:
    return FeedFetcher(transport=httpx.MockTransport(server.handler))


@pytest.fixture
def poller_config() -> PollerConfig:
    return PollerConfig()
