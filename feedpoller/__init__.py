"""
Feed Poller

A daemon that polls subscribed Atom and RSS feeds and stores newly published posts.
"""

__version__ = "0.1.0"
__description__ = "A polling ingester for Atom and RSS feeds"
__license__ = "MIT"
