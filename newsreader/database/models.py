"""
Database models - dataclasses for database entities.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class DBFolder:
    id: int
    name: str
    position: int = 0


@dataclass
class DBFeed:
    id: int
    url: str
    title: str  # As published by the feed, refreshed on every fetch
    description: str
    site_url: str
    folder_id: int | None
    last_fetched_at: datetime | None
    error_message: str | None = None
    custom_title: str | None = None  # Set by the user, never overwritten by a refresh
    created_at: datetime | None = None
    unread_count: int = 0

    @property
    def display_title(self) -> str:
        return self.custom_title or self.title or self.url


@dataclass
class DBArticle:
    id: int
    feed_id: int
    guid: str  # Item identity: guid, else link, else title
    title: str
    link: str
    author: str
    summary: str  # Escaped plain-text snippet (HTML)
    content: str  # Raw HTML as published; sanitize before display
    published_at: datetime
    is_read: bool
    is_starred: bool
    fetched_at: datetime
