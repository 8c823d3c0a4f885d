"""
Error types for the ingestion pipeline and HTTP helpers for the API layer.

Pipeline errors never escape a refresh: the orchestrator records them on the
feed. The require_* helpers turn missing resources into 404 responses.
"""

from typing import TypeVar

from fastapi import HTTPException

T = TypeVar("T")


class FeedError(Exception):
    """A feed could not be loaded: fetch failure, bad XML or unknown format."""


class MalformedFeed(FeedError):
    """The body is not well-formed XML."""


class UnrecognizedFormat(FeedError):
    """The XML root element is neither an RSS nor an Atom document."""


class SubscriptionError(Exception):
    """A new feed could not be fetched or parsed, so it was not created."""


def require_resource(resource: T | None, detail: str = "Resource not found") -> T:
    """
    Raise 404 if resource is None, otherwise return the resource.

    Usage:
        article = require_resource(db.get_article(id), "Article not found")
    """
    if resource is None:
        raise HTTPException(status_code=404, detail=detail)
    return resource


def require_article(article: T | None) -> T:
    """Raise 404 if article is None."""
    return require_resource(article, "Article not found")


def require_feed(feed: T | None) -> T:
    """Raise 404 if feed is None."""
    return require_resource(feed, "Feed not found")


def require_folder(folder: T | None) -> T:
    """Raise 404 if folder is None."""
    return require_resource(folder, "Folder not found")
