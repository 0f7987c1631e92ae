"""
Scheduler module for the feed poller.

This module runs the polling loop: one long-lived task walks the registered
feeds in order, polls every feed whose checkpoint is due, and persists what
the selection policy picks from the parsed posts.

All waiting happens through explicit gates on an injected clock:
- pacing: after every attempted feed, whatever the outcome
- rate_limit: a loop-wide cooldown after an HTTP 429
- feed_list_retry: after the feed list could not be loaded
- idle: after a pass in which no feed was due
"""
from datetime import timedelta
from enum import Enum
from typing import List, Optional

import structlog

from feedpoller.checkpoint import advance_checkpoint, is_due
from feedpoller.clock import Clock, SystemClock
from feedpoller.config import PollerConfig
from feedpoller.errors import (
    FeedFormatError,
    FetchFailedError,
    PersistFailedError,
    RateLimitedError,
    StorageError,
)
from feedpoller.feeds import parse_feed
from feedpoller.fetcher.http_client import FeedFetcher
from feedpoller.metrics import FEED_LIST_ERRORS_TOTAL, FEED_POLLS_TOTAL, POSTS_SAVED_TOTAL
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost
from feedpoller.selection import SelectionPolicy, get_selection_policy
from feedpoller.storage import BaseFeedStore

# Set up structured logger
logger = structlog.get_logger()


class PollOutcome(str, Enum):
    """Result of evaluating a single feed."""
    NOT_DUE = "not_due"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"
    EMPTY = "empty"
    SAVED = "saved"
    PERSIST_FAILED = "persist_failed"


class FeedScheduler:
    """
    Sequential polling loop over all registered feeds.

    There are no concurrent fetches: while one feed is fetched, parsed or
    paced, no other feed makes progress.
    """

    def __init__(
        self,
        store: BaseFeedStore,
        fetcher: FeedFetcher,
        config: Optional[PollerConfig] = None,
        clock: Optional[Clock] = None,
        selection_policy: Optional[SelectionPolicy] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            store: Source of feeds and sink for checkpoints and posts
            fetcher: HTTP fetcher for feed documents
            config: Polling configuration
            clock: Time source, defaults to the system clock
            selection_policy: Overrides the policy named in the configuration
        """
        self.store = store
        self.fetcher = fetcher
        self.config = config or PollerConfig()
        self.clock = clock or SystemClock()
        self.selection_policy = selection_policy or get_selection_policy(
            self.config.selection_policy
        )
        self.min_interval = timedelta(minutes=self.config.min_interval_minutes)

    async def run_forever(self) -> None:
        """Run polling passes until the task is cancelled."""
        logger.info(
            "Starting polling loop",
            min_interval_minutes=self.config.min_interval_minutes,
            pacing_delay_seconds=self.config.pacing_delay_seconds,
            selection_policy=self.selection_policy.name,
        )
        while True:
            await self.run_pass()

    async def run_pass(self) -> List[PollOutcome]:
        """
        Evaluate every registered feed once, in the order the store returns them.

        Returns:
            List[PollOutcome]: One outcome per feed, empty if the list failed to load
        """
        try:
            feeds = await self.store.list_feeds()
        except StorageError as e:
            logger.error("Feed list unavailable, skipping pass", error=str(e))
            FEED_LIST_ERRORS_TOTAL.inc()
            await self._wait("feed_list_retry", self.config.feed_list_retry_seconds)
            return []

        outcomes = []
        for feed in feeds:
            outcome = await self.poll_feed(feed)
            outcomes.append(outcome)
            FEED_POLLS_TOTAL.labels(outcome=outcome.value).inc()

            if outcome is not PollOutcome.NOT_DUE or self.config.pace_skipped_feeds:
                await self._wait("pacing", self.config.pacing_delay_seconds)

        if all(outcome is PollOutcome.NOT_DUE for outcome in outcomes):
            await self._wait("idle", self.config.idle_pass_delay_seconds)

        return outcomes

    async def poll_feed(self, feed: Feed) -> PollOutcome:
        """
        Poll a single feed and apply the checkpoint and persistence policy.

        Nothing raised while polling escapes this method.

        Args:
            feed: Feed to evaluate

        Returns:
            PollOutcome: What happened
        """
        log = logger.bind(feed_id=feed.id, url=feed.url)

        if not is_due(feed.last_checked, self.clock.now(), self.min_interval):
            log.debug("Feed not due yet", last_checked=feed.last_checked.isoformat())
            return PollOutcome.NOT_DUE

        try:
            content = await self.fetcher.fetch(feed.url)
            posts = parse_feed(content, feed)
        except RateLimitedError as e:
            log.warning(
                "Feed rate limited, cooling down",
                retry_after=e.retry_after,
                cooldown_seconds=self.config.rate_limit_cooldown_seconds,
            )
            await self._wait("rate_limit", self.config.rate_limit_cooldown_seconds)
            return PollOutcome.RATE_LIMITED
        except (FetchFailedError, FeedFormatError) as e:
            log.error("Error fetching posts for feed", error=str(e), error_type=type(e).__name__)
            await advance_checkpoint(self.store, feed, self.clock.now())
            return PollOutcome.FAILED
        except Exception as e:
            log.exception("Unexpected error polling feed", error=str(e))
            await advance_checkpoint(self.store, feed, self.clock.now())
            return PollOutcome.FAILED

        if not posts:
            log.info("Feed returned no posts")
            if self.config.advance_checkpoint_on_empty:
                await advance_checkpoint(self.store, feed, self.clock.now())
            return PollOutcome.EMPTY

        await advance_checkpoint(self.store, feed, self.clock.now())

        try:
            selected = await self.selection_policy.select(posts, self.store)
        except StorageError as e:
            log.error("Failed to select posts to persist", error=str(e))
            return PollOutcome.PERSIST_FAILED

        outcome = PollOutcome.SAVED
        for post in selected:
            try:
                await self._persist(post)
            except PersistFailedError as e:
                log.error("Error saving post", uid=e.uid, error=str(e.cause))
                outcome = PollOutcome.PERSIST_FAILED
        return outcome

    async def _persist(self, post: NewPost) -> int:
        try:
            post_id = await self.store.insert_post(post)
        except StorageError as e:
            raise PersistFailedError(post.uid, e) from e

        POSTS_SAVED_TOTAL.inc()
        logger.info(
            "Saved post",
            post_id=post_id,
            feed_id=post.feed_id,
            uid=post.uid,
            title=post.title,
        )
        return post_id

    async def _wait(self, gate: str, seconds: float) -> None:
        """Block the loop on a named gate."""
        logger.debug("Waiting on gate", gate=gate, seconds=seconds)
        await self.clock.sleep(seconds)
