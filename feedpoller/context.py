"""
Application context management.
"""
import asyncio
from contextlib import AsyncExitStack
from typing import Optional, Set

import structlog

from feedpoller.config import Settings
from feedpoller.fetcher.http_client import FeedFetcher
from feedpoller.scheduler import FeedScheduler
from feedpoller.storage import BaseFeedStore, get_feed_store

logger = structlog.get_logger()


class AppContext:
    """
    Application context that holds all initialized components and resources.

    This class manages the lifecycle of the store, the fetcher and the
    polling task, and provides access to them throughout the application.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.exit_stack = AsyncExitStack()
        self.store: Optional[BaseFeedStore] = None
        self.fetcher: Optional[FeedFetcher] = None
        self.scheduler: Optional[FeedScheduler] = None
        self.shutdown_event = asyncio.Event()
        self.active_tasks: Set[asyncio.Task] = set()

    async def initialize(self) -> None:
        """Initialize all components and resources."""
        logger.info("Initializing application context")

        await self._init_store()
        await self._init_fetcher()

        self.scheduler = FeedScheduler(
            self.store,
            self.fetcher,
            config=self.settings.poller,
        )

        logger.info("Application context initialized")

    async def _init_store(self) -> None:
        """Initialize the feed store."""
        logger.info("Initializing feed store", backend=self.settings.storage.backend.value)
        self.store = await get_feed_store(self.settings.storage)
        await self.exit_stack.enter_async_context(self.store)

    async def _init_fetcher(self) -> None:
        """Initialize the HTTP fetcher."""
        self.fetcher = FeedFetcher(
            timeout=self.settings.poller.request_timeout_seconds,
            user_agent=self.settings.poller.user_agent,
        )
        await self.exit_stack.enter_async_context(self.fetcher)
        logger.info("Fetcher initialized", timeout=self.settings.poller.request_timeout_seconds)

    def start_polling(self) -> asyncio.Task:
        """Start the polling loop as a tracked background task."""
        return self.create_task(self.scheduler.run_forever())

    async def shutdown(self) -> None:
        """Gracefully shut down all components and resources."""
        logger.info("Shutting down application")

        # Signal shutdown to all tasks
        self.shutdown_event.set()

        # Cancel all active tasks
        if self.active_tasks:
            logger.info("Cancelling active tasks", count=len(self.active_tasks))
            for task in self.active_tasks:
                if not task.done():
                    task.cancel()

            # Wait for tasks to complete cancellation
            await asyncio.gather(*self.active_tasks, return_exceptions=True)

        # Close all components using the exit stack
        logger.info("Closing all components")
        await self.exit_stack.aclose()

        logger.info("Application shutdown complete")

    def create_task(self, coro) -> asyncio.Task:
        """Create a tracked asyncio task."""
        task = asyncio.create_task(coro)
        self.active_tasks.add(task)
        task.add_done_callback(self.active_tasks.discard)
        return task
