"""
Article service: business logic for article operations.

Handles article listing and read/starred state.
"""

from fastapi import HTTPException

from ..database import Database
from ..database.models import DBArticle
from ..exceptions import require_article, require_feed, require_folder


class ArticleService:
    """Service for article-related business logic."""

    def __init__(self, db: Database):
        self.db = db

    # ─────────────────────────────────────────────────────────────
    # Listing
    # ─────────────────────────────────────────────────────────────

    def list_articles(
        self,
        feed_id: int | None = None,
        folder_id: int | None = None,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[DBArticle]:
        """
        Get articles, newest first.

        Args:
            feed_id: Only this feed's articles
            folder_id: Only articles of feeds in this folder
            unread_only: Only unread articles
            limit: Maximum articles to return
            offset: Pagination offset

        Raises:
            HTTPException: If both filters are given, or the feed/folder does not exist
        """
        if feed_id is not None and folder_id is not None:
            raise HTTPException(status_code=400, detail="Filter by feed or by folder, not both")
        if feed_id is not None:
            require_feed(self.db.get_feed(feed_id))
        if folder_id is not None:
            require_folder(self.db.get_folder(folder_id))

        return self.db.get_articles(
            feed_id=feed_id,
            folder_id=folder_id,
            unread_only=unread_only,
            limit=limit,
            offset=offset,
        )

    def list_starred(self, limit: int = 50) -> list[DBArticle]:
        return self.db.get_starred_articles(limit=limit)

    def get_article(self, article_id: int) -> DBArticle:
        """Get a single article (404 if missing)."""
        return require_article(self.db.get_article(article_id))

    # ─────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────

    def mark_read(self, article_id: int, is_read: bool = True) -> None:
        if not self.db.mark_read(article_id, is_read):
            require_article(None)

    def mark_all_read(self, feed_id: int | None = None) -> int:
        """Mark every article (or one feed's) as read. Returns count updated."""
        if feed_id is not None:
            require_feed(self.db.get_feed(feed_id))
        return self.db.mark_all_read(feed_id)

    def toggle_star(self, article_id: int) -> bool:
        """Toggle starred status. Returns the new status."""
        return require_article(self.db.toggle_star(article_id))
