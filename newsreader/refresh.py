"""
Feed refresh: fetch, parse, normalize and store articles for each feed.

A failure in any stage is recorded on the feed and never leaves this
module, so one broken feed cannot stop the others from refreshing.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from .database import Database
from .database.models import DBArticle, DBFeed
from .exceptions import FeedError, SubscriptionError
from .feeds import FeedDocument, parse_feed
from .fetcher import Fetcher
from .normalizer import normalize_entries

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """Outcome of refreshing one feed."""
    feed_id: int
    ok: bool
    error: str | None = None
    inserted: int = 0
    articles: list[DBArticle] = field(default_factory=list)


class RefreshOrchestrator:
    """
    Drives refreshes for one feed or for all of them concurrently.

    Only the network fetch suspends; parsing, normalizing and storing run
    synchronously between awaits.
    """

    def __init__(self, db: Database, fetcher: Fetcher):
        self.db = db
        self.fetcher = fetcher
        self._locks: dict[int, asyncio.Lock] = {}

    def _lock_for(self, feed_id: int) -> asyncio.Lock:
        lock = self._locks.get(feed_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[feed_id] = lock
        return lock

    async def _load(self, url: str) -> FeedDocument:
        """
        Fetch and parse a feed URL.

        Raises:
            FeedError: If the fetch fails or the body is not a feed
        """
        outcome = await self.fetcher.fetch(url)
        if not outcome.ok:
            raise FeedError(outcome.message)
        return parse_feed(outcome.body)

    def _store(self, feed_id: int, document: FeedDocument) -> int:
        items = normalize_entries(document.items)
        inserted = self.db.insert_many_if_absent(feed_id, items)
        self.db.update_feed_success(
            feed_id,
            title=document.title,
            description=document.description,
            site_url=document.site_link,
        )
        return inserted

    async def refresh_feed(self, feed: DBFeed) -> RefreshResult:
        """Refresh one feed and report what happened."""
        async with self._lock_for(feed.id):
            try:
                document = await self._load(feed.url)
                inserted = self._store(feed.id, document)
            except FeedError as e:
                error = str(e)
                logger.warning(f"Refresh failed for feed {feed.id} ({feed.url}): {error}")
                self.db.update_feed_error(feed.id, error)
                return RefreshResult(
                    feed_id=feed.id,
                    ok=False,
                    error=error,
                    articles=self.db.get_articles(feed_id=feed.id),
                )

        logger.info(f"Refreshed feed {feed.id} ({feed.url}): {inserted} new articles")
        return RefreshResult(
            feed_id=feed.id,
            ok=True,
            inserted=inserted,
            articles=self.db.get_articles(feed_id=feed.id),
        )

    async def refresh_one(self, feed_id: int) -> list[DBArticle]:
        """
        Refresh a single feed.

        Returns the feed's stored articles, whether or not this refresh
        succeeded. An unknown feed ID yields an empty list.
        """
        feed = self.db.get_feed(feed_id)
        if not feed:
            logger.warning(f"Refresh requested for unknown feed {feed_id}")
            return []

        try:
            result = await self.refresh_feed(feed)
        except Exception as e:
            logger.exception(f"Unexpected error refreshing feed {feed_id}: {e}")
            self.db.update_feed_error(feed_id, f"Unexpected error: {e}")
            return self.db.get_articles(feed_id=feed_id)
        return result.articles

    async def refresh_all(self) -> list[DBArticle]:
        """
        Refresh every feed concurrently.

        Returns the articles of the feeds that refreshed successfully.
        Failed feeds have their error recorded and are left out.
        """
        feeds = self.db.get_feeds()
        if not feeds:
            return []

        results = await asyncio.gather(
            *(self.refresh_feed(feed) for feed in feeds),
            return_exceptions=True,
        )

        articles: list[DBArticle] = []
        failed = 0
        for feed, result in zip(feeds, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.error(f"Unexpected error refreshing feed {feed.id}: {result!r}")
                self.db.update_feed_error(feed.id, f"Unexpected error: {result}")
                continue
            if not result.ok:
                failed += 1
                continue
            articles.extend(result.articles)

        logger.info(f"Refreshed {len(feeds) - failed}/{len(feeds)} feeds")
        articles.sort(key=lambda a: (a.published_at, a.id), reverse=True)
        return articles

    async def subscribe(self, url: str, folder_id: int | None = None) -> DBFeed:
        """
        Add a feed after checking that it can be fetched and parsed.

        Nothing is stored unless the first fetch succeeds. The articles of
        that first fetch are stored right away.

        Raises:
            SubscriptionError: If the feed is already present or cannot be loaded
        """
        url = url.strip()
        if self.db.get_feed_by_url(url):
            raise SubscriptionError(f"Already subscribed to {url}")

        try:
            document = await self._load(url)
        except FeedError as e:
            raise SubscriptionError(str(e)) from e

        feed_id = self.db.add_feed(
            url,
            document.title,
            description=document.description,
            site_url=document.site_link,
            folder_id=folder_id,
        )
        inserted = self._store(feed_id, document)
        logger.info(f"Subscribed to {url} (feed {feed_id}, {inserted} articles)")

        feed = self.db.get_feed(feed_id)
        if not feed:
            raise SubscriptionError(f"Failed to retrieve feed {feed_id}")
        return feed
