"""
Web package for the feed poller.

This package provides the FastAPI application for registering feeds and
reading stored posts.
"""
from feedpoller.web.app import create_app

__all__ = ["create_app"]
