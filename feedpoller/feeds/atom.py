"""
Atom feed parser for the feed poller.

Atom entries carry their publication time in ``<published>`` using the
RFC 3339 internet date-time format.
"""
import re
from datetime import datetime
from typing import List, Optional

from dateutil import parser as date_parser

from feedpoller.errors import EntryDateUnparseableError
from feedpoller.feeds.base import build_posts, decode_entries
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost

RFC3339_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$",
    re.IGNORECASE,
)


def parse_rfc3339(value: Optional[str]) -> datetime:
    """
    Parse an RFC 3339 timestamp such as ``2024-01-02T10:00:00Z``.

    Raises:
        EntryDateUnparseableError: If the value is missing or not RFC 3339
    """
    if not value:
        raise EntryDateUnparseableError(value, "missing published date")
    value = value.strip()
    if not RFC3339_PATTERN.match(value):
        raise EntryDateUnparseableError(value, "not an RFC 3339 date-time")
    try:
        return date_parser.isoparse(value)
    except ValueError as e:
        raise EntryDateUnparseableError(value, str(e)) from e


def parse_atom(content: bytes, feed: Feed) -> List[NewPost]:
    """
    Parse an Atom document into canonical posts, in document order.

    Args:
        content: Raw Atom bytes
        feed: Feed the document belongs to

    Returns:
        List[NewPost]: Posts for every entry with a valid published date

    Raises:
        FeedParseError: If the document is malformed
    """
    return build_posts(decode_entries(content), feed, parse_rfc3339, "atom")
