"""
Feed service: business logic for feed management operations.

Handles subscription, renaming, folders and refresh.
"""

from fastapi import HTTPException

from ..database import Database
from ..database.models import DBArticle, DBFeed
from ..exceptions import SubscriptionError, require_feed, require_folder
from ..refresh import RefreshOrchestrator


class FeedService:
    """Service for feed-related business logic."""

    def __init__(self, db: Database, orchestrator: RefreshOrchestrator):
        self.db = db
        self.orchestrator = orchestrator

    # ─────────────────────────────────────────────────────────────
    # Feed Management
    # ─────────────────────────────────────────────────────────────

    def list_feeds(self, folder_id: int | None = None) -> list[DBFeed]:
        """List subscribed feeds, optionally only those in one folder."""
        return self.db.get_feeds(folder_id)

    async def subscribe(self, url: str, folder_id: int | None = None) -> DBFeed:
        """
        Subscribe to a new feed.

        The feed is fetched and parsed first; nothing is stored if that fails.

        Raises:
            HTTPException: If the folder does not exist or the feed cannot be added
        """
        if folder_id is not None:
            require_folder(self.db.get_folder(folder_id))

        try:
            return await self.orchestrator.subscribe(url, folder_id=folder_id)
        except SubscriptionError as e:
            raise HTTPException(status_code=400, detail=f"Could not add feed: {e}")

    def unsubscribe(self, feed_id: int) -> None:
        """
        Unsubscribe from a feed and drop its articles.

        Raises:
            HTTPException: If feed not found
        """
        require_feed(self.db.get_feed(feed_id))
        self.db.delete_feed(feed_id)

    def update_feed(
        self,
        feed_id: int,
        title: str | None = None,
        folder_id: int | None = None,
        clear_folder: bool = False,
    ) -> DBFeed:
        """
        Rename a feed and/or move it to a folder.

        Args:
            feed_id: ID of feed to update
            title: New title; "" restores the title the feed publishes, None keeps it
            folder_id: Folder to move into (None to keep)
            clear_folder: Take the feed out of its folder

        Raises:
            HTTPException: If feed or folder not found
        """
        require_feed(self.db.get_feed(feed_id))

        if title is not None:
            self.db.rename_feed(feed_id, title.strip())

        if clear_folder:
            self.db.move_feed(feed_id, None)
        elif folder_id is not None:
            require_folder(self.db.get_folder(folder_id))
            self.db.move_feed(feed_id, folder_id)

        updated_feed = self.db.get_feed(feed_id)
        if not updated_feed:
            raise HTTPException(status_code=500, detail="Failed to retrieve updated feed")

        return updated_feed

    # ─────────────────────────────────────────────────────────────
    # Refresh
    # ─────────────────────────────────────────────────────────────

    async def refresh_all(self) -> list[DBArticle]:
        """Refresh every feed; returns the articles of the feeds that succeeded."""
        return await self.orchestrator.refresh_all()

    async def refresh_feed(self, feed_id: int) -> list[DBArticle]:
        """
        Refresh a single feed and return its articles.

        Raises:
            HTTPException: If feed not found
        """
        require_feed(self.db.get_feed(feed_id))
        return await self.orchestrator.refresh_one(feed_id)
