"""
Checkpoint handling for the polling loop.

A feed's checkpoint is its ``last_checked`` timestamp. It gates how often a
feed is polled and is the only field the scheduler ever writes on a feed.
"""
from datetime import datetime, timedelta
from typing import Optional

import structlog

from feedpoller.errors import StorageError
from feedpoller.models.feed import Feed
from feedpoller.storage import BaseFeedStore

# Set up structured logger
logger = structlog.get_logger()


def is_due(last_checked: Optional[datetime], now: datetime, interval: timedelta) -> bool:
    """
    Decide whether a feed should be polled.

    A feed that has never been polled is always due; otherwise it is due once
    ``interval`` has elapsed since its checkpoint.
    """
    if last_checked is None:
        return True
    return now - last_checked >= interval


async def advance_checkpoint(store: BaseFeedStore, feed: Feed, when: datetime) -> bool:
    """
    Move a feed's checkpoint to ``when``.

    Failures are logged rather than raised so the polling loop keeps going.

    Returns:
        bool: True if the checkpoint was written
    """
    try:
        await store.update_last_checked(feed.id, when)
    except StorageError as e:
        logger.error(
            "Failed to update feed checkpoint",
            feed_id=feed.id,
            url=feed.url,
            error=str(e),
        )
        return False

    logger.debug("Advanced feed checkpoint", feed_id=feed.id, last_checked=when.isoformat())
    return True
