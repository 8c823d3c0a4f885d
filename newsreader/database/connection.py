"""
Database connection management and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

MEMORY = ":memory:"


class DatabaseConnection:
    """Manages database connection and schema."""

    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        # An in-memory database only lives as long as its connection, so
        # one connection is kept open and shared.
        self._shared: sqlite3.Connection | None = None

        if str(db_path) == MEMORY:
            self._shared = self._connect()
        else:
            self.db_path = Path(db_path)
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        connection.execute("PRAGMA busy_timeout = 5000")
        return connection

    @contextmanager
    def conn(self) -> Iterator[sqlite3.Connection]:
        """
        Get database connection with row factory.

        Everything executed inside one `with` block is one transaction:
        committed on success, rolled back if the block raises.
        """
        if self._shared is not None:
            try:
                yield self._shared
                self._shared.commit()
            except BaseException:
                self._shared.rollback()
                raise
            return

        connection = self._connect()
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def close(self):
        """Close the shared in-memory connection, if any."""
        if self._shared is not None:
            self._shared.close()
            self._shared = None

    def _init_schema(self):
        """Initialize database schema."""
        with self.conn() as connection:
            if self._shared is None:
                connection.execute("PRAGMA journal_mode = WAL")

            connection.executescript("""
                CREATE TABLE IF NOT EXISTS folders (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0
                );

                CREATE TABLE IF NOT EXISTS feeds (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT UNIQUE NOT NULL,
                    title TEXT NOT NULL DEFAULT '',
                    custom_title TEXT,
                    description TEXT NOT NULL DEFAULT '',
                    site_url TEXT NOT NULL DEFAULT '',
                    folder_id INTEGER REFERENCES folders(id) ON DELETE SET NULL,
                    last_fetched_at TIMESTAMP,
                    error_message TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    feed_id INTEGER NOT NULL REFERENCES feeds(id) ON DELETE CASCADE,
                    guid TEXT NOT NULL,
                    title TEXT NOT NULL DEFAULT '',
                    link TEXT NOT NULL DEFAULT '',
                    author TEXT NOT NULL DEFAULT '',
                    summary TEXT NOT NULL DEFAULT '',
                    content TEXT NOT NULL DEFAULT '',
                    published_at TIMESTAMP NOT NULL,
                    is_read BOOLEAN NOT NULL DEFAULT FALSE,
                    is_starred BOOLEAN NOT NULL DEFAULT FALSE,
                    fetched_at TIMESTAMP NOT NULL,
                    UNIQUE(feed_id, guid)
                );

                CREATE INDEX IF NOT EXISTS idx_articles_feed ON articles(feed_id);
                CREATE INDEX IF NOT EXISTS idx_articles_published ON articles(published_at DESC);
                CREATE INDEX IF NOT EXISTS idx_articles_unread ON articles(is_read);
                CREATE INDEX IF NOT EXISTS idx_articles_starred ON articles(is_starred);
                CREATE INDEX IF NOT EXISTS idx_feeds_folder ON feeds(folder_id);
            """)
