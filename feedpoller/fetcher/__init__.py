"""
Fetcher package for the feed poller.

This package provides the bounded-time HTTP retrieval of feed documents.
"""
from feedpoller.fetcher.http_client import DEFAULT_TIMEOUT, FeedFetcher

__all__ = [
    "DEFAULT_TIMEOUT",
    "FeedFetcher",
]
