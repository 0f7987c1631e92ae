"""
FastAPI-based read-side API for the feed poller.

This module lets clients register feeds and page through stored posts. It
shares nothing with the polling loop except the store.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog
from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, field_validator

from feedpoller import __version__
from feedpoller.config import ApiConfig, Settings
from feedpoller.errors import StorageError
from feedpoller.storage import BaseFeedStore

# Set up structured logger
logger = structlog.get_logger()


class FeedRegistration(BaseModel):
    """Request body for registering a feed."""
    url: str

    @field_validator("url")
    @classmethod
    def url_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("url must not be empty")
        return v


class FeedCreated(BaseModel):
    """Response body for a registered feed."""
    id: int


def create_app(store: BaseFeedStore, settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    api_config = settings.api if settings else ApiConfig()

    app = FastAPI(
        title="Feed Poller",
        description="Registered feeds and the posts discovered in them",
        version=__version__,
    )

    # Store shared resources in app state
    app.state.store = store
    app.state.settings = settings

    def get_store(request: Request) -> BaseFeedStore:
        return request.app.state.store

    @app.get("/feeds")
    async def list_feeds(request: Request) -> List[Dict[str, Any]]:
        """List all registered feeds."""
        try:
            feeds = await get_store(request).list_feeds()
        except StorageError as e:
            logger.error("Error listing feeds", error=str(e))
            raise HTTPException(status_code=500, detail=str(e))
        return [feed.model_dump(mode="json") for feed in feeds]

    @app.post("/feeds")
    async def register_feed(body: FeedRegistration, request: Request) -> FeedCreated:
        """Register a new feed with an empty checkpoint."""
        try:
            feed_id = await get_store(request).create_feed(body.url)
        except StorageError as e:
            logger.error("Error registering feed", url=body.url, error=str(e))
            raise HTTPException(status_code=500, detail=str(e))

        logger.info("Registered feed", feed_id=feed_id, url=body.url)
        return FeedCreated(id=feed_id)

    @app.get("/posts")
    async def list_posts(
        request: Request,
        limit: int = Query(api_config.default_page_size, ge=1, le=api_config.max_page_size),
        page: int = Query(1, ge=1),
    ) -> List[Dict[str, Any]]:
        """Page through stored posts."""
        offset = (page - 1) * limit
        try:
            posts = await get_store(request).list_posts(limit, offset)
        except StorageError as e:
            logger.error("Error listing posts", error=str(e))
            raise HTTPException(status_code=500, detail=str(e))
        return [post.model_dump(mode="json") for post in posts]

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
