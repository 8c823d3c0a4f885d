"""
Pydantic models for API request/response validation.

Article bodies are stored as the feed published them and only pass
through the sanitizer here, on the way out.
"""

from pydantic import BaseModel

from .database import DBArticle, DBFeed, DBFolder
from .sanitizer import render_safe, sanitize_text


def _base_url(article: DBArticle) -> str | None:
    return article.link or None


# ─────────────────────────────────────────────────────────────
# Article Schemas
# ─────────────────────────────────────────────────────────────

class ArticleResponse(BaseModel):
    """Article for list view."""
    id: int
    feed_id: int
    title: str
    link: str
    author: str
    summary: str
    is_read: bool
    is_starred: bool
    published_at: str
    fetched_at: str

    @classmethod
    def from_db(cls, article: DBArticle) -> "ArticleResponse":
        return cls(
            id=article.id,
            feed_id=article.feed_id,
            title=sanitize_text(article.title),
            link=article.link,
            author=sanitize_text(article.author),
            summary=render_safe(article.summary, base_url=_base_url(article)),
            is_read=article.is_read,
            is_starred=article.is_starred,
            published_at=article.published_at.isoformat(),
            fetched_at=article.fetched_at.isoformat(),
        )


class ArticleDetailResponse(ArticleResponse):
    """Article with its full content for detail view."""
    content: str

    @classmethod
    def from_db(cls, article: DBArticle) -> "ArticleDetailResponse":
        base = ArticleResponse.from_db(article)
        return cls(
            **base.model_dump(),
            content=render_safe(article.content or article.summary, base_url=_base_url(article)),
        )


class MarkReadRequest(BaseModel):
    """Request to mark an article as read/unread."""
    is_read: bool = True


class MarkAllReadRequest(BaseModel):
    """Request to mark every article (or one feed's) as read."""
    feed_id: int | None = None


# ─────────────────────────────────────────────────────────────
# Feed Schemas
# ─────────────────────────────────────────────────────────────

class FeedResponse(BaseModel):
    """Feed for list view."""
    id: int
    url: str
    title: str
    description: str
    site_url: str
    folder_id: int | None
    unread_count: int
    last_fetched: str | None
    fetch_error: str | None = None

    @classmethod
    def from_db(cls, feed: DBFeed) -> "FeedResponse":
        return cls(
            id=feed.id,
            url=feed.url,
            title=sanitize_text(feed.display_title),
            description=sanitize_text(feed.description),
            site_url=feed.site_url,
            folder_id=feed.folder_id,
            unread_count=feed.unread_count,
            last_fetched=feed.last_fetched_at.isoformat() if feed.last_fetched_at else None,
            fetch_error=feed.error_message,
        )


class AddFeedRequest(BaseModel):
    """Request to add a new feed."""
    url: str
    folder_id: int | None = None


class UpdateFeedRequest(BaseModel):
    """Request to rename a feed or move it to another folder."""
    title: str | None = None
    folder_id: int | None = None
    clear_folder: bool = False


# ─────────────────────────────────────────────────────────────
# Folder Schemas
# ─────────────────────────────────────────────────────────────

class FolderResponse(BaseModel):
    id: int
    name: str
    position: int

    @classmethod
    def from_db(cls, folder: DBFolder) -> "FolderResponse":
        return cls(id=folder.id, name=folder.name, position=folder.position)


class FolderRequest(BaseModel):
    """Request to create or rename a folder."""
    name: str
