"""
Exception hierarchy for the feed poller.

Every failure the ingestion pipeline can hit is represented here. The
scheduler handles all of them inside its per-feed step, so none of these
should ever escape the polling loop.
"""
from typing import Optional


class FeedPollerError(Exception):
    """Base class for all feed poller errors."""


class FeedListUnavailableError(FeedPollerError):
    """The feed list could not be loaded for a polling pass."""


class FetchError(FeedPollerError):
    """Base class for errors raised while retrieving feed bytes."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class RateLimitedError(FetchError):
    """The upstream server answered with HTTP 429."""

    def __init__(self, url: str, retry_after: Optional[str] = None):
        super().__init__(url, f"rate limited by {url}")
        self.retry_after = retry_after


class FetchFailedError(FetchError):
    """Any other non-2xx status, transport failure or body read failure."""

    def __init__(self, url: str, reason: str):
        super().__init__(url, reason)
        self.reason = reason


class FeedFormatError(FeedPollerError):
    """Base class for errors about the shape of the fetched document."""


class UnsupportedFormatError(FeedFormatError):
    """The document root is neither an Atom ``feed`` nor an RSS ``rss`` element."""

    def __init__(self, root_name: str):
        super().__init__(f"unsupported feed format: <{root_name}>")
        self.root_name = root_name


class FeedParseError(FeedFormatError):
    """The document could not be decoded as XML."""


class EntryDateUnparseableError(FeedPollerError):
    """A single entry carries a publication date in the wrong grammar."""

    def __init__(self, value: Optional[str], reason: str):
        super().__init__(f"cannot parse date {value!r}: {reason}")
        self.value = value


class StorageError(FeedPollerError):
    """A store operation failed."""


class DuplicatePostError(StorageError):
    """A post with the same dedup key is already stored."""

    def __init__(self, uid: str):
        super().__init__(f"post already stored: {uid}")
        self.uid = uid


class PersistFailedError(FeedPollerError):
    """A selected post could not be written to the store."""

    def __init__(self, uid: str, cause: Exception):
        super().__init__(f"failed to persist post {uid}: {cause}")
        self.uid = uid
        self.cause = cause
