"""
Post models for items extracted from feeds.

A ``NewPost`` is the canonical, format-independent record produced by the
Atom and RSS parsers. A ``Post`` is a ``NewPost`` after the store has
accepted it and assigned an identifier.
"""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from feedpoller.models.timestamps import ensure_utc, format_db_time


class NewPost(BaseModel):
    """
    Canonical post produced by a parser, before persistence.

    Instances are frozen: a parse produces them fresh and nothing mutates them
    afterwards.
    """
    title: str
    url: str
    date: datetime
    feed_id: int
    uid: str

    model_config = ConfigDict(frozen=True)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_serializer("date")
    def serialize_date(self, v: datetime) -> str:
        return format_db_time(v)


class Post(NewPost):
    """A post that has been written to the store."""
    id: int
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @field_serializer("created_at")
    def serialize_created_at(self, v: datetime) -> str:
        return format_db_time(v)
