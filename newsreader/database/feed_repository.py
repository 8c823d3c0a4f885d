"""
Feed repository - the source registry.
"""

from datetime import datetime, timezone

from .connection import DatabaseConnection
from .converters import row_to_feed
from .models import DBFeed

_SELECT_WITH_UNREAD = """
    SELECT f.*,
           COUNT(CASE WHEN a.is_read = 0 THEN 1 END) as unread_count
    FROM feeds f
    LEFT JOIN articles a ON f.id = a.feed_id
"""


class FeedRepository:
    """Repository for feed operations."""

    def __init__(self, db: DatabaseConnection):
        self._db = db

    def add(
        self,
        url: str,
        title: str,
        description: str = "",
        site_url: str = "",
        folder_id: int | None = None,
    ) -> int:
        """Add a new feed. Returns feed ID."""
        with self._db.conn() as conn:
            cursor = conn.execute(
                """INSERT INTO feeds (url, title, description, site_url, folder_id)
                   VALUES (?, ?, ?, ?, ?)""",
                (url, title, description, site_url, folder_id)
            )
            return cursor.lastrowid

    def get(self, feed_id: int) -> DBFeed | None:
        """Get single feed by ID with its unread count."""
        with self._db.conn() as conn:
            row = conn.execute(
                _SELECT_WITH_UNREAD + " WHERE f.id = ? GROUP BY f.id",
                (feed_id,)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_by_url(self, url: str) -> DBFeed | None:
        """Get feed by its URL."""
        with self._db.conn() as conn:
            row = conn.execute(
                _SELECT_WITH_UNREAD + " WHERE f.url = ? GROUP BY f.id",
                (url,)
            ).fetchone()
            return row_to_feed(row) if row else None

    def get_all(self, folder_id: int | None = None) -> list[DBFeed]:
        """Get all feeds (optionally one folder's) with unread counts."""
        query = _SELECT_WITH_UNREAD
        params: list = []
        if folder_id is not None:
            query += " WHERE f.folder_id = ?"
            params.append(folder_id)
        query += " GROUP BY f.id ORDER BY COALESCE(f.custom_title, f.title) COLLATE NOCASE, f.id"

        with self._db.conn() as conn:
            rows = conn.execute(query, params).fetchall()
            return [row_to_feed(row) for row in rows]

    def update_fetch_success(
        self,
        feed_id: int,
        title: str,
        description: str,
        site_url: str
    ):
        """Record a successful refresh: new metadata, timestamp, error cleared."""
        with self._db.conn() as conn:
            conn.execute(
                """UPDATE feeds SET
                   title = ?, description = ?, site_url = ?,
                   last_fetched_at = ?, error_message = NULL
                   WHERE id = ?""",
                (title, description, site_url,
                 datetime.now(timezone.utc).isoformat(), feed_id)
            )

    def update_fetch_error(self, feed_id: int, error: str):
        """Record a failed refresh. Metadata and articles are left as they were."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET error_message = ? WHERE id = ?",
                (error, feed_id)
            )

    def rename(self, feed_id: int, title: str | None):
        """Set a user title for the feed; None or "" restores the published title."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET custom_title = ? WHERE id = ?",
                (title or None, feed_id)
            )

    def move(self, feed_id: int, folder_id: int | None):
        """Move the feed into a folder (None for no folder)."""
        with self._db.conn() as conn:
            conn.execute(
                "UPDATE feeds SET folder_id = ? WHERE id = ?",
                (folder_id, feed_id)
            )

    def delete(self, feed_id: int) -> bool:
        """Delete feed and (by cascade) its articles. Returns True if it existed."""
        with self._db.conn() as conn:
            cursor = conn.execute("DELETE FROM feeds WHERE id = ?", (feed_id,))
            return cursor.rowcount > 0
