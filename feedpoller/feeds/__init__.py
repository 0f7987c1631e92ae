"""
Feed parsing package for the feed poller.

This package turns raw feed bytes into canonical posts. The detector reads
the document's root element and returns a FeedFormat tag; the tag selects
one of two pure parsers (Atom or RSS), each producing posts in document
order.

The main entry point is the `parse_feed` function.
"""
from typing import Callable, Dict, List

import structlog

from feedpoller.feeds.atom import parse_atom
from feedpoller.feeds.detect import FeedFormat, detect_format
from feedpoller.feeds.identity import generate_post_uid
from feedpoller.feeds.rss import parse_rss
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost

logger = structlog.get_logger()

PARSERS: Dict[FeedFormat, Callable[[bytes, Feed], List[NewPost]]] = {
    FeedFormat.ATOM: parse_atom,
    FeedFormat.RSS: parse_rss,
}


def parse_feed(content: bytes, feed: Feed) -> List[NewPost]:
    """
    Detect the dialect of a feed document and parse it.

    Args:
        content: Raw feed bytes
        feed: Feed the document was fetched from

    Returns:
        List[NewPost]: Canonical posts in document order

    Raises:
        UnsupportedFormatError: If the root element is not recognised
        FeedParseError: If the document is not valid XML
    """
    feed_format = detect_format(content)
    posts = PARSERS[feed_format](content, feed)
    logger.debug(
        "Parsed feed document",
        feed_id=feed.id,
        format=feed_format.value,
        post_count=len(posts),
    )
    return posts


__all__ = [
    "FeedFormat",
    "PARSERS",
    "detect_format",
    "generate_post_uid",
    "parse_atom",
    "parse_feed",
    "parse_rss",
]
