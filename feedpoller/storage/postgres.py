"""
PostgreSQL-based store implementation for the feed poller.

Timestamps are kept in TEXT columns in the ``YYYY-MM-DD HH:MM:SS`` UTC format
so that stored values read back identically from every client.
"""
import asyncio
from datetime import datetime, timezone
from typing import List, Optional

import asyncpg
import structlog

from feedpoller.config import StorageConfig
from feedpoller.errors import DuplicatePostError, StorageError
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost, Post
from feedpoller.models.timestamps import format_db_time, parse_db_time
from feedpoller.storage import BaseFeedStore

logger = structlog.get_logger()

# Connection loss, pool shutdown and command timeouts surface as these
DRIVER_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
)

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS feeds (
        id            BIGSERIAL PRIMARY KEY,
        url           TEXT NOT NULL,
        last_checked  TEXT NULL,
        created_at    TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id          BIGSERIAL PRIMARY KEY,
        title       TEXT NOT NULL,
        url         TEXT NOT NULL,
        feed_id     BIGINT NOT NULL REFERENCES feeds (id),
        uid         TEXT NOT NULL UNIQUE,
        date        TEXT NOT NULL,
        created_at  TEXT NOT NULL
    )
    """,
]


def _utcnow() -> str:
    return format_db_time(datetime.now(timezone.utc))


def safe_dsn(dsn: str) -> str:
    """Strip credentials from a DSN before logging it."""
    return dsn.split("@")[-1] if "@" in dsn else dsn


class PostgresFeedStore(BaseFeedStore):
    """
    PostgreSQL store implementation.

    Every method runs a single statement on a pooled connection; driver
    errors are wrapped in StorageError.
    """

    def __init__(self, config: StorageConfig, dsn: str):
        """
        Initialize the PostgreSQL store.

        Args:
            config: Storage configuration
            dsn: PostgreSQL connection string
        """
        self.config = config
        self.dsn = dsn
        self.pool: Optional[asyncpg.Pool] = None

    @classmethod
    async def create(cls, config: StorageConfig, dsn: str) -> "PostgresFeedStore":
        """
        Create a new PostgreSQL store.

        This factory method opens the store's connection pool and ensures the
        tables exist. The pool is closed again if the schema cannot be created.

        Args:
            config: Storage configuration
            dsn: PostgreSQL connection string

        Returns:
            PostgresFeedStore: Ready-to-use store

        Raises:
            StorageError: If the database is unreachable or the schema fails
        """
        store = cls(config, dsn)
        logger.info(
            "Creating PostgreSQL connection pool",
            dsn=safe_dsn(dsn),
            min_size=config.pool_min_size,
            max_size=config.pool_max_size,
        )
        try:
            store.pool = await asyncpg.create_pool(
                dsn,
                min_size=config.pool_min_size,
                max_size=config.pool_max_size,
                command_timeout=config.command_timeout,
            )
            async with store.pool.acquire() as conn:
                for statement in SCHEMA:
                    await conn.execute(statement)
        except DRIVER_ERRORS as e:
            await store.close()
            raise StorageError(f"failed to initialize PostgreSQL store: {e}") from e

        logger.info("PostgreSQL store initialized", dsn=safe_dsn(dsn))
        return store

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise StorageError("store is not connected")
        return self.pool

    async def list_feeds(self) -> List[Feed]:
        try:
            async with self._require_pool().acquire() as conn:
                rows = await conn.fetch(
                    "SELECT id, url, last_checked, created_at FROM feeds ORDER BY id"
                )
        except DRIVER_ERRORS as e:
            raise StorageError(f"failed to list feeds: {e}") from e

        return [
            Feed(
                id=row["id"],
                url=row["url"],
                last_checked=parse_db_time(row["last_checked"]) if row["last_checked"] else None,
                created_at=parse_db_time(row["created_at"]),
            )
            for row in rows
        ]

    async def create_feed(self, url: str) -> int:
        url = url.strip()
        if not url:
            raise StorageError("feed url must not be empty")

        try:
            async with self._require_pool().acquire() as conn:
                feed_id = await conn.fetchval(
                    "INSERT INTO feeds (url, created_at) VALUES ($1, $2) RETURNING id",
                    url,
                    _utcnow(),
                )
        except DRIVER_ERRORS as e:
            raise StorageError(f"failed to create feed: {e}") from e

        logger.debug("Created feed", feed_id=feed_id, url=url)
        return feed_id

    async def update_last_checked(self, feed_id: int, when: datetime) -> None:
        try:
            async with self._require_pool().acquire() as conn:
                await conn.execute(
                    "UPDATE feeds SET last_checked = $1 WHERE id = $2",
                    format_db_time(when),
                    feed_id,
                )
        except DRIVER_ERRORS as e:
            raise StorageError(f"failed to update checkpoint for feed {feed_id}: {e}") from e

    async def insert_post(self, post: NewPost) -> int:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.fetchval(
                    """
                    INSERT INTO posts (title, url, feed_id, uid, date, created_at)
                    VALUES ($1, $2, $3, $4, $5, $6)
                    RETURNING id
                    """,
                    post.title,
                    post.url,
                    post.feed_id,
                    post.uid,
                    format_db_time(post.date),
                    _utcnow(),
                )
        except asyncpg.UniqueViolationError as e:
            raise DuplicatePostError(post.uid) from e
        except DRIVER_ERRORS as e:
            raise StorageError(f"failed to insert post {post.uid}: {e}") from e

    async def has_post(self, uid: str) -> bool:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.fetchval(
                    "SELECT EXISTS (SELECT 1 FROM posts WHERE uid = $1)",
                    uid,
                )
        except DRIVER_ERRORS as e:
            raise StorageError(f"failed to look up post {uid}: {e}") from e

    async def list_posts(self, limit: int, offset: int) -> List[Post]:
        try:
            async with self._require_pool().acquire() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, title, url, feed_id, uid, date, created_at
                    FROM posts
                    ORDER BY id
                    LIMIT $1 OFFSET $2
                    """,
                    limit,
                    offset,
                )
        except DRIVER_ERRORS as e:
            raise StorageError(f"failed to list posts: {e}") from e

        return [
            Post(
                id=row["id"],
                title=row["title"],
                url=row["url"],
                feed_id=row["feed_id"],
                uid=row["uid"],
                date=parse_db_time(row["date"]),
                created_at=parse_db_time(row["created_at"]),
            )
            for row in rows
        ]

    async def close(self) -> None:
        """Close the connection pool."""
        if self.pool is not None:
            pool, self.pool = self.pool, None
            logger.info("Closing PostgreSQL connection pool", dsn=safe_dsn(self.dsn))
            await pool.close()
