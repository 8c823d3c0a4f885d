"""
Refresh Scheduler.

Background task that periodically refreshes every feed.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .database.models import DBArticle
    from .refresh import RefreshOrchestrator


logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Background scheduler for feed refreshes.

    Runs a full refresh every `interval_seconds`. A failing cycle is logged
    and the loop carries on.
    """

    def __init__(
        self,
        orchestrator: "RefreshOrchestrator",
        interval_seconds: int = 300,
        initial_delay: float = 0,
    ):
        self.orchestrator = orchestrator
        self.interval_seconds = interval_seconds
        self.initial_delay = initial_delay
        self._task: asyncio.Task | None = None
        self._running = False
        self.last_refresh_at: datetime | None = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self):
        """Start the refresh loop."""
        if self.interval_seconds <= 0:
            logger.info("Scheduled refresh disabled, scheduler not started")
            return
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._refresh_loop())
        logger.info(f"Refresh scheduler started (interval: {self.interval_seconds} seconds)")

    async def stop(self):
        """Stop the refresh loop."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Refresh scheduler stopped")

    async def refresh_now(self) -> list["DBArticle"]:
        """Trigger an immediate refresh of every feed."""
        logger.info("Triggering immediate refresh")
        return await self._do_refresh()

    async def _refresh_loop(self):
        """Main refresh loop."""
        if self.initial_delay:
            await asyncio.sleep(self.initial_delay)

        while self._running:
            try:
                await self._do_refresh()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Error in refresh loop: {e}")

            await asyncio.sleep(self.interval_seconds)

    async def _do_refresh(self) -> list["DBArticle"]:
        """Perform a single refresh cycle."""
        logger.info(f"Refreshing all feeds at {datetime.now(timezone.utc).isoformat()}")
        articles = await self.orchestrator.refresh_all()
        self.last_refresh_at = datetime.now(timezone.utc)
        return articles
