"""
Memory-based store implementation for the feed poller.

This module provides an in-memory store for testing and simple deployments.
Nothing survives a process restart.
"""
import asyncio
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

import structlog

from feedpoller.errors import DuplicatePostError, StorageError
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost, Post
from feedpoller.models.timestamps import ensure_utc
from feedpoller.storage import BaseFeedStore

# Set up structured logger
logger = structlog.get_logger()


class MemoryFeedStore(BaseFeedStore):
    """
    In-memory store implementation.

    Feeds and posts live in dictionaries keyed by identifier, guarded by a
    single lock. Timestamps are truncated to whole seconds to match what the
    PostgreSQL backend persists.
    """

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        """
        Initialize the memory store.

        Args:
            now: Optional source of creation timestamps
        """
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._feeds: Dict[int, Feed] = {}
        self._posts: Dict[int, Post] = {}
        self._uids: Dict[str, int] = {}
        self._next_feed_id = 1
        self._next_post_id = 1
        self._lock = asyncio.Lock()
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise StorageError("store is closed")

    @staticmethod
    def _truncate(value: datetime) -> datetime:
        return ensure_utc(value).replace(microsecond=0)

    async def list_feeds(self) -> List[Feed]:
        async with self._lock:
            self._check_open()
            return [self._feeds[feed_id] for feed_id in sorted(self._feeds)]

    async def create_feed(self, url: str) -> int:
        url = url.strip()
        if not url:
            raise StorageError("feed url must not be empty")

        async with self._lock:
            self._check_open()
            feed_id = self._next_feed_id
            self._next_feed_id += 1
            self._feeds[feed_id] = Feed(
                id=feed_id,
                url=url,
                created_at=self._truncate(self._now()),
            )

        logger.debug("Created feed", feed_id=feed_id, url=url)
        return feed_id

    async def update_last_checked(self, feed_id: int, when: datetime) -> None:
        async with self._lock:
            self._check_open()
            feed = self._feeds.get(feed_id)
            if feed is None:
                raise StorageError(f"unknown feed: {feed_id}")
            self._feeds[feed_id] = feed.model_copy(
                update={"last_checked": self._truncate(when)}
            )

    async def insert_post(self, post: NewPost) -> int:
        async with self._lock:
            self._check_open()
            if post.uid in self._uids:
                raise DuplicatePostError(post.uid)

            post_id = self._next_post_id
            self._next_post_id += 1
            self._posts[post_id] = Post(
                title=post.title,
                url=post.url,
                date=self._truncate(post.date),
                feed_id=post.feed_id,
                uid=post.uid,
                id=post_id,
                created_at=self._truncate(self._now()),
            )
            self._uids[post.uid] = post_id
            return post_id

    async def has_post(self, uid: str) -> bool:
        async with self._lock:
            self._check_open()
            return uid in self._uids

    async def list_posts(self, limit: int, offset: int) -> List[Post]:
        async with self._lock:
            self._check_open()
            ids = sorted(self._posts)[offset:offset + limit]
            return [self._posts[post_id] for post_id in ids]

    async def close(self) -> None:
        self._closed = True
