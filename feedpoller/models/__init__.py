"""
Central re-exports for the feed poller data models.
"""
from .feed import Feed
from .post import NewPost, Post
from .timestamps import format_db_time, parse_db_time

__all__ = [
    "Feed",
    "NewPost",
    "Post",
    "format_db_time",
    "parse_db_time",
]
