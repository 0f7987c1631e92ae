"""
RSS feed parser for the feed poller.

RSS items carry their publication time in ``<pubDate>`` using the RFC 822
date grammar (as revised by RFC 1123 and RFC 2822), e.g.
``Tue, 02 Jan 2024 10:00:00 GMT``. This is a different grammar from the one
Atom uses; an ISO 8601 value in an RSS feed is rejected.
"""
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import List, Optional

from feedpoller.errors import EntryDateUnparseableError
from feedpoller.feeds.base import build_posts, decode_entries
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost


def parse_rfc1123(value: Optional[str]) -> datetime:
    """
    Parse an RFC 1123 style timestamp.

    Raises:
        EntryDateUnparseableError: If the value is missing or unparseable
    """
    if not value:
        raise EntryDateUnparseableError(value, "missing pubDate")
    try:
        return parsedate_to_datetime(value.strip())
    except (TypeError, ValueError) as e:
        raise EntryDateUnparseableError(value, f"not an RFC 1123 date: {e}") from e


def parse_rss(content: bytes, feed: Feed) -> List[NewPost]:
    """
    Parse an RSS document into canonical posts, in document order.

    Args:
        content: Raw RSS bytes
        feed: Feed the document belongs to

    Returns:
        List[NewPost]: Posts for every item with a valid pubDate

    Raises:
        FeedParseError: If the document is malformed
    """
    return build_posts(decode_entries(content), feed, parse_rfc1123, "rss")
