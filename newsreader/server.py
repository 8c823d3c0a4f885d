"""
News Reader API Server

FastAPI application providing endpoints for:
- Feed management (subscribe, rename, folders, refresh)
- Article reading (list, detail, read/star state)

Run with: python -m uvicorn newsreader.server:app --port 5005
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import config, state
from .database import Database
from .fetcher import Fetcher
from .refresh import RefreshOrchestrator
from .scheduler import RefreshScheduler
from .routes import (
    articles_router,
    feeds_router,
    folders_router,
    misc_router,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.db is None:
        state.db = Database(config.DB_PATH)
        state.fetcher = Fetcher(
            timeout=config.FETCH_TIMEOUT,
            user_agent=config.USER_AGENT or None,
            max_redirects=config.MAX_REDIRECTS,
            max_bytes=config.MAX_FEED_BYTES,
            block_private_networks=config.BLOCK_PRIVATE_NETWORKS,
        )
        state.orchestrator = RefreshOrchestrator(state.db, state.fetcher)
        state.scheduler = RefreshScheduler(
            state.orchestrator,
            interval_seconds=config.REFRESH_INTERVAL,
            initial_delay=10,
        )
        await state.scheduler.start()
        logger.info(f"Database at {config.DB_PATH}")

        if not config.BLOCK_PRIVATE_NETWORKS:
            logger.warning("BLOCK_PRIVATE_NETWORKS is off: feeds on private addresses are allowed")

    yield

    # Shutdown
    if state.scheduler:
        await state.scheduler.stop()


app = FastAPI(
    title="News Reader API",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
app.include_router(misc_router)
app.include_router(articles_router)
app.include_router(feeds_router)
app.include_router(folders_router)


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="127.0.0.1", port=config.PORT)


if __name__ == "__main__":
    main()
