"""
Article repository - idempotent ingestion and the article surface.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .connection import DatabaseConnection
from .converters import row_to_article
from .models import DBArticle

if TYPE_CHECKING:
    from ..normalizer import CanonicalItem


class ArticleRepository:
    """Repository for article operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def insert_many_if_absent(self, feed_id: int, items: list["CanonicalItem"]) -> int:
        """
        Insert items that are not stored yet for this feed.

        Keyed by (feed_id, identity). An existing row is never touched, so
        read/starred flags and the first fetched_at survive every refresh.
        All items go in one transaction. Returns the number of new rows.
        """
        if not items:
            return 0

        fetched_at = datetime.now(timezone.utc).isoformat()
        rows = [
            (
                feed_id,
                item.identity,
                item.title,
                item.link,
                item.author,
                item.snippet,
                item.raw_content,
                item.published_at.astimezone(timezone.utc).isoformat(),
                fetched_at,
            )
            for item in items
        ]

        with self._db.conn() as conn:
            cursor = conn.executemany(
                """INSERT INTO articles
                   (feed_id, guid, title, link, author, summary, content, published_at, fetched_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(feed_id, guid) DO NOTHING""",
                rows
            )
            return max(cursor.rowcount, 0)

    def get(self, article_id: int) -> DBArticle | None:
        """Get single article by ID."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE id = ?", (article_id,)
            ).fetchone()
            return row_to_article(row) if row else None

    def get_many(
        self,
        feed_id: int | None = None,
        folder_id: int | None = None,
        unread_only: bool = False,
        starred_only: bool = False,
        limit: int | None = None,
        offset: int = 0
    ) -> list[DBArticle]:
        """Get articles, newest first, optionally for one feed or one folder."""
        query = "SELECT a.* FROM articles a"
        params: list = []

        if folder_id is not None:
            query += " JOIN feeds f ON a.feed_id = f.id WHERE f.folder_id = ?"
            params.append(folder_id)
        else:
            query += " WHERE 1=1"
        if feed_id is not None:
            query += " AND a.feed_id = ?"
            params.append(feed_id)
        if unread_only:
            query += " AND a.is_read = 0"
        if starred_only:
            query += " AND a.is_starred = 1"

        query += " ORDER BY a.published_at DESC, a.id DESC"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])

        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [row_to_article(row) for row in rows]

    def mark_read(self, article_id: int, is_read: bool = True) -> bool:
        """Mark article as read/unread. Returns False if it does not exist."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                "UPDATE articles SET is_read = ? WHERE id = ?",
                (is_read, article_id)
            )
            return cursor.rowcount > 0

    def mark_all_read(self, feed_id: int | None = None) -> int:
        """Mark all articles (of one feed, or everywhere) as read. Returns count updated."""
        with self._db.conn() as conn:
            if feed_id is not None:
                cursor = conn.execute(
                    "UPDATE articles SET is_read = 1 WHERE feed_id = ? AND is_read = 0",
                    (feed_id,)
                )
            else:
                cursor = conn.execute("UPDATE articles SET is_read = 1 WHERE is_read = 0")
            return cursor.rowcount

    def toggle_star(self, article_id: int) -> bool | None:
        """Toggle starred status. Returns the new status, or None if not found."""
        with self._db.conn() as conn:
            row = conn.execute(
                "SELECT is_starred FROM articles WHERE id = ?", (article_id,)
            ).fetchone()
            if not row:
                return None
            new_status = not row["is_starred"]
            conn.execute(
                "UPDATE articles SET is_starred = ? WHERE id = ?",
                (new_status, article_id)
            )
            return new_status

    def count(self, feed_id: int | None = None) -> int:
        """Count articles, optionally for one feed."""
        with self._db.conn() as conn:
            if feed_id is not None:
                row = conn.execute(
                    "SELECT COUNT(*) as cnt FROM articles WHERE feed_id = ?", (feed_id,)
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) as cnt FROM articles").fetchone()
            return row["cnt"]
