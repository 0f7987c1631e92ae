"""
Shared helpers for the Atom and RSS parsers.

Both dialects are decoded with feedparser, which exposes the Atom ``id`` and
the RSS ``guid`` under the same ``id`` key; each parser supplies its own date
grammar. Entries whose date does not match the grammar are dropped one at a
time without aborting the rest of the document.
"""
import xml.sax
from typing import Any, Callable, Dict, List, Optional

import feedparser
import structlog

from feedpoller.errors import EntryDateUnparseableError, FeedParseError
from feedpoller.feeds.identity import generate_post_uid
from feedpoller.models.feed import Feed
from feedpoller.models.post import NewPost

# Set up structured logger
logger = structlog.get_logger()

DateParser = Callable[[Optional[str]], Any]


def decode_entries(content: bytes) -> List[Dict[str, Any]]:
    """
    Decode a feed document into feedparser entries, in document order.

    Raises:
        FeedParseError: If the document is not well-formed XML
    """
    parsed = feedparser.parse(content)

    # feedparser falls back to a lenient parser on broken XML; treat that as fatal
    if parsed.get("bozo") and isinstance(parsed.get("bozo_exception"), xml.sax.SAXException):
        raise FeedParseError(f"malformed feed document: {parsed.bozo_exception}")

    return list(parsed.get("entries", []))


def build_posts(
    entries: List[Dict[str, Any]],
    feed: Feed,
    parse_date: DateParser,
    dialect: str,
) -> List[NewPost]:
    """
    Convert decoded entries into canonical posts.

    Args:
        entries: Entries as returned by ``decode_entries``
        feed: Feed the document was fetched from
        parse_date: Dialect-specific date parser, raising EntryDateUnparseableError
        dialect: Dialect name used in log events

    Returns:
        List[NewPost]: One post per entry with a parseable date
    """
    posts = []
    for entry in entries:
        raw_date = entry.get("published")
        try:
            date = parse_date(raw_date)
        except EntryDateUnparseableError as e:
            logger.warning(
                "Skipping entry with unparseable published date",
                dialect=dialect,
                feed_id=feed.id,
                url=feed.url,
                error=str(e),
            )
            continue

        posts.append(
            NewPost(
                title=entry.get("title", ""),
                url=entry.get("link", ""),
                date=date,
                feed_id=feed.id,
                uid=generate_post_uid(feed.id, entry.get("id", "")),
            )
        )

    return posts
