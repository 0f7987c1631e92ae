"""
Format detection for raw feed documents.

Only the name of the top-level XML element is inspected; the document body
is left to the parser selected by the returned tag.
"""
import io
import xml.etree.ElementTree as ET
from enum import Enum

import structlog

from feedpoller.errors import FeedParseError, UnsupportedFormatError

# Set up structured logger
logger = structlog.get_logger()


class FeedFormat(str, Enum):
    """Feed dialects the poller knows how to parse."""
    ATOM = "atom"
    RSS = "rss"


ROOT_ELEMENTS = {
    "feed": FeedFormat.ATOM,
    "rss": FeedFormat.RSS,
}


def root_element_name(content: bytes) -> str:
    """
    Return the local name of the document's root element.

    Raises:
        FeedParseError: If no root element can be read
    """
    try:
        for _, element in ET.iterparse(io.BytesIO(content), events=("start",)):
            tag = element.tag
            # Drop the "{namespace}" prefix ElementTree adds to qualified names
            if tag.startswith("{"):
                tag = tag.split("}", 1)[1]
            return tag
    except ET.ParseError as e:
        raise FeedParseError(f"document is not valid XML: {e}") from e

    raise FeedParseError("document has no root element")


def detect_format(content: bytes) -> FeedFormat:
    """
    Choose the feed dialect from the root element name.

    Args:
        content: Raw feed bytes

    Returns:
        FeedFormat: Tag naming the parser to use

    Raises:
        UnsupportedFormatError: If the root is neither ``feed`` nor ``rss``
        FeedParseError: If the content is not XML
    """
    name = root_element_name(content)
    feed_format = ROOT_ELEMENTS.get(name)
    if feed_format is None:
        raise UnsupportedFormatError(name)

    logger.debug("Detected feed format", format=feed_format.value)
    return feed_format
