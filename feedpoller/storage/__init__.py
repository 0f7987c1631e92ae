"""
Storage package for the feed poller.

This package persists feeds, their checkpoints and the posts discovered in
them. It provides a consistent interface over the supported backends
(Memory, PostgreSQL). Every backend raises StorageError on failure so callers
never see driver-specific exceptions.
"""
import abc
from datetime import datetime
from typing import List

import structlog

from feedpoller.config import StorageBackend, StorageConfig
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost, Post

# Set up structured logger
logger = structlog.get_logger()


class BaseFeedStore(abc.ABC):
    """
    Abstract base class for feed stores.

    Each method is a single independent operation; no multi-statement
    transactions are exposed.
    """

    @abc.abstractmethod
    async def list_feeds(self) -> List[Feed]:
        """
        Return all registered feeds with their current checkpoint.

        Raises:
            StorageError: If the feeds cannot be read
        """

    @abc.abstractmethod
    async def create_feed(self, url: str) -> int:
        """
        Register a feed with an empty checkpoint.

        Args:
            url: Feed URL

        Returns:
            int: Store-assigned feed identifier
        """

    @abc.abstractmethod
    async def update_last_checked(self, feed_id: int, when: datetime) -> None:
        """
        Write a feed's checkpoint. Writing the same value twice is harmless.

        Args:
            feed_id: Feed identifier
            when: Instant of the poll attempt
        """

    @abc.abstractmethod
    async def insert_post(self, post: NewPost) -> int:
        """
        Persist a canonical post.

        Args:
            post: Post to store

        Returns:
            int: Store-assigned post identifier

        Raises:
            DuplicatePostError: If a post with the same uid exists
            StorageError: If the write fails
        """

    @abc.abstractmethod
    async def has_post(self, uid: str) -> bool:
        """Check whether a post with this dedup key is stored."""

    @abc.abstractmethod
    async def list_posts(self, limit: int, offset: int) -> List[Post]:
        """
        Return a page of stored posts ordered by identifier.

        Args:
            limit: Maximum number of posts
            offset: Number of posts to skip
        """

    async def close(self) -> None:
        """Release any resources held by the store."""

    async def __aenter__(self) -> "BaseFeedStore":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()


async def get_feed_store(config: StorageConfig) -> BaseFeedStore:
    """
    Get a feed store based on configuration.

    Args:
        config: Storage configuration

    Returns:
        BaseFeedStore: Configured store

    Raises:
        ValueError: If the storage configuration is invalid
    """
    if config.backend == StorageBackend.POSTGRES:
        from feedpoller.storage.postgres import PostgresFeedStore, safe_dsn

        if not config.postgres_dsn:
            raise ValueError("PostgreSQL storage backend requires postgres_dsn")

        dsn = config.postgres_dsn.get_secret_value()
        logger.info("Using PostgreSQL store", dsn=safe_dsn(dsn))
        return await PostgresFeedStore.create(config, dsn=dsn)

    from feedpoller.storage.memory import MemoryFeedStore
    logger.info("Using memory store")
    return MemoryFeedStore()


__all__ = [
    "BaseFeedStore",
    "get_feed_store",
]
