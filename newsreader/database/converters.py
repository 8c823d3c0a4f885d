"""
Database row converters - convert SQLite rows to dataclasses.
"""

import sqlite3
from datetime import datetime, timezone

from .models import DBArticle, DBFeed, DBFolder


def _parse_timestamp(value: str | None) -> datetime | None:
    """Parse a stored timestamp; naive values (SQLite CURRENT_TIMESTAMP) are UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def row_to_article(row: sqlite3.Row) -> DBArticle:
    """Convert a database row to a DBArticle."""
    fetched_at = _parse_timestamp(row["fetched_at"]) or datetime.now(timezone.utc)

    return DBArticle(
        id=row["id"],
        feed_id=row["feed_id"],
        guid=row["guid"],
        title=row["title"],
        link=row["link"],
        author=row["author"],
        summary=row["summary"],
        content=row["content"],
        published_at=_parse_timestamp(row["published_at"]) or fetched_at,
        is_read=bool(row["is_read"]),
        is_starred=bool(row["is_starred"]),
        fetched_at=fetched_at,
    )


def row_to_feed(row: sqlite3.Row) -> DBFeed:
    """Convert a database row to a DBFeed."""
    # Handle unread_count - may not be present in all queries
    try:
        unread_count = row["unread_count"] or 0
    except (IndexError, KeyError):
        unread_count = 0

    return DBFeed(
        id=row["id"],
        url=row["url"],
        title=row["title"],
        description=row["description"],
        site_url=row["site_url"],
        folder_id=row["folder_id"],
        last_fetched_at=_parse_timestamp(row["last_fetched_at"]),
        error_message=row["error_message"],
        custom_title=row["custom_title"],
        created_at=_parse_timestamp(row["created_at"]),
        unread_count=unread_count,
    )


def row_to_folder(row: sqlite3.Row) -> DBFolder:
    """Convert a database row to a DBFolder."""
    return DBFolder(
        id=row["id"],
        name=row["name"],
        position=row["position"],
    )
