"""
Feed model for representing subscribed polling targets.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator

from feedpoller.models.timestamps import ensure_utc, format_db_time


class Feed(BaseModel):
    """
    A subscribed feed as seen by the scheduler.

    ``last_checked`` is the feed's checkpoint: the instant of its last
    completed poll attempt, or None if it has never been polled.
    """
    id: int
    url: str
    last_checked: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("url")
    @classmethod
    def url_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("feed url must not be empty")
        return v

    @field_validator("last_checked", "created_at")
    @classmethod
    def normalize_timezone(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store every timestamp as aware UTC."""
        return ensure_utc(v) if v is not None else None

    @field_serializer("last_checked", "created_at")
    def serialize_time(self, v: Optional[datetime]) -> Optional[str]:
        return format_db_time(v) if v is not None else None
