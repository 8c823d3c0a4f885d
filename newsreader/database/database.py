"""
Database facade - provides unified access to all repositories.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from .connection import DatabaseConnection
from .article_repository import ArticleRepository
from .feed_repository import FeedRepository
from .folder_repository import FolderRepository
from .models import DBArticle, DBFeed, DBFolder

if TYPE_CHECKING:
    from ..normalizer import CanonicalItem


class Database:
    """
    Unified database access facade.

    Repositories are exposed as attributes; the common operations are
    also available as flat methods.
    """

    def __init__(self, db_path: Path | str):
        self._connection = DatabaseConnection(db_path)

        self.articles = ArticleRepository(self._connection)
        self.feeds = FeedRepository(self._connection)
        self.folders = FolderRepository(self._connection)

    def close(self):
        self._connection.close()

    # ─────────────────────────────────────────────────────────────
    # Folder operations (delegated to FolderRepository)
    # ─────────────────────────────────────────────────────────────

    def add_folder(self, name: str) -> int:
        return self.folders.add(name)

    def get_folder(self, folder_id: int) -> DBFolder | None:
        return self.folders.get(folder_id)

    def get_folders(self) -> list[DBFolder]:
        return self.folders.get_all()

    def rename_folder(self, folder_id: int, name: str):
        return self.folders.rename(folder_id, name)

    def delete_folder(self, folder_id: int) -> bool:
        return self.folders.delete(folder_id)

    # ─────────────────────────────────────────────────────────────
    # Feed operations (delegated to FeedRepository)
    # ─────────────────────────────────────────────────────────────

    def add_feed(
        self,
        url: str,
        title: str,
        description: str = "",
        site_url: str = "",
        folder_id: int | None = None,
    ) -> int:
        return self.feeds.add(url, title, description, site_url, folder_id)

    def get_feed(self, feed_id: int) -> DBFeed | None:
        return self.feeds.get(feed_id)

    def get_feed_by_url(self, url: str) -> DBFeed | None:
        return self.feeds.get_by_url(url)

    def get_feeds(self, folder_id: int | None = None) -> list[DBFeed]:
        return self.feeds.get_all(folder_id)

    def update_feed_success(self, feed_id: int, title: str, description: str, site_url: str):
        return self.feeds.update_fetch_success(feed_id, title, description, site_url)

    def update_feed_error(self, feed_id: int, error: str):
        return self.feeds.update_fetch_error(feed_id, error)

    def rename_feed(self, feed_id: int, title: str | None):
        return self.feeds.rename(feed_id, title)

    def move_feed(self, feed_id: int, folder_id: int | None):
        return self.feeds.move(feed_id, folder_id)

    def delete_feed(self, feed_id: int) -> bool:
        return self.feeds.delete(feed_id)

    # ─────────────────────────────────────────────────────────────
    # Article operations (delegated to ArticleRepository)
    # ─────────────────────────────────────────────────────────────

    def insert_many_if_absent(self, feed_id: int, items: list["CanonicalItem"]) -> int:
        return self.articles.insert_many_if_absent(feed_id, items)

    def get_article(self, article_id: int) -> DBArticle | None:
        return self.articles.get(article_id)

    def get_articles(
        self,
        feed_id: int | None = None,
        folder_id: int | None = None,
        unread_only: bool = False,
        limit: int | None = None,
        offset: int = 0
    ) -> list[DBArticle]:
        return self.articles.get_many(
            feed_id=feed_id,
            folder_id=folder_id,
            unread_only=unread_only,
            limit=limit,
            offset=offset,
        )

    def get_starred_articles(self, limit: int | None = None) -> list[DBArticle]:
        return self.articles.get_many(starred_only=True, limit=limit)

    def mark_read(self, article_id: int, is_read: bool = True) -> bool:
        return self.articles.mark_read(article_id, is_read)

    def mark_all_read(self, feed_id: int | None = None) -> int:
        return self.articles.mark_all_read(feed_id)

    def toggle_star(self, article_id: int) -> bool | None:
        return self.articles.toggle_star(article_id)

    def count_articles(self, feed_id: int | None = None) -> int:
        return self.articles.count(feed_id)
