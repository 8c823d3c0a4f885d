"""
Service layer for business logic.

Services encapsulate business logic, keeping routes as thin HTTP adapters.
Each service receives its dependencies via constructor injection.

Usage in routes:
    from ..services import ArticleServiceDep

    @router.get("/articles")
    async def list_articles(service: ArticleServiceDep):
        return service.list_articles()
"""

from typing import Annotated

from fastapi import Depends

from ..config import get_db, get_orchestrator
from ..database import Database
from ..refresh import RefreshOrchestrator

from .article_service import ArticleService
from .feed_service import FeedService

__all__ = [
    # Services
    "ArticleService",
    "FeedService",
    # Dependency factories
    "get_article_service",
    "get_feed_service",
    # Type aliases for dependency injection
    "ArticleServiceDep",
    "FeedServiceDep",
]


def get_article_service(db: Annotated[Database, Depends(get_db)]) -> ArticleService:
    """Dependency to get ArticleService instance."""
    return ArticleService(db=db)


def get_feed_service(
    db: Annotated[Database, Depends(get_db)],
    orchestrator: Annotated[RefreshOrchestrator, Depends(get_orchestrator)],
) -> FeedService:
    """Dependency to get FeedService instance."""
    return FeedService(db=db, orchestrator=orchestrator)


ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]
