"""
Configuration and application state management.
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv
from fastapi import HTTPException

if TYPE_CHECKING:
    from .database import Database
    from .fetcher import Fetcher
    from .refresh import RefreshOrchestrator
    from .scheduler import RefreshScheduler

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


class Config:
    """Application configuration from environment."""
    DB_PATH: Path = Path(os.getenv("DB_PATH", "./data/newsreader.db"))
    PORT: int = int(os.getenv("PORT", "5005"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Fetching
    FETCH_TIMEOUT: int = int(os.getenv("FETCH_TIMEOUT", "30"))  # seconds
    MAX_REDIRECTS: int = int(os.getenv("MAX_REDIRECTS", "5"))
    MAX_FEED_BYTES: int = int(os.getenv("MAX_FEED_BYTES", str(10 * 1024 * 1024)))
    USER_AGENT: str = os.getenv("USER_AGENT", "")

    # Refuse feeds on loopback/private addresses. Turn off to point the
    # reader at a local test server such as newsreader.xss_feed_server.
    BLOCK_PRIVATE_NETWORKS: bool = _parse_bool(
        os.getenv("BLOCK_PRIVATE_NETWORKS"), default=True
    )

    # Seconds between scheduled refreshes of every feed; 0 disables polling
    REFRESH_INTERVAL: int = int(os.getenv("REFRESH_INTERVAL", "300"))


config = Config()


class AppState:
    """Shared application state."""
    db: "Database | None" = None
    fetcher: "Fetcher | None" = None
    orchestrator: "RefreshOrchestrator | None" = None
    scheduler: "RefreshScheduler | None" = None


state = AppState()


def get_db() -> "Database":
    """Dependency to get database instance."""
    if not state.db:
        raise HTTPException(status_code=500, detail="Database not initialized")
    return state.db


def get_orchestrator() -> "RefreshOrchestrator":
    """Dependency to get the refresh orchestrator."""
    if not state.orchestrator:
        raise HTTPException(status_code=500, detail="Refresh orchestrator not initialized")
    return state.orchestrator
