"""
Article routes: list, detail, read/star operations.
"""

from fastapi import APIRouter, Query

from ..schemas import (
    ArticleResponse,
    ArticleDetailResponse,
    MarkReadRequest,
    MarkAllReadRequest,
)
from ..services import ArticleServiceDep

router = APIRouter(prefix="/articles", tags=["articles"])


# ─────────────────────────────────────────────────────────────
# List (static paths first)
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_articles(
    service: ArticleServiceDep,
    feed_id: int | None = None,
    folder_id: int | None = None,
    unread_only: bool = False,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0)
) -> list[ArticleResponse]:
    """Get articles, optionally for one feed or one folder."""
    articles = service.list_articles(
        feed_id=feed_id,
        folder_id=folder_id,
        unread_only=unread_only,
        limit=limit,
        offset=offset,
    )
    return [ArticleResponse.from_db(a) for a in articles]


@router.get("/starred")
async def list_starred(
    service: ArticleServiceDep,
    limit: int = Query(default=50, ge=1, le=200)
) -> list[ArticleResponse]:
    """Get starred articles."""
    return [ArticleResponse.from_db(a) for a in service.list_starred(limit=limit)]


@router.post("/mark-all-read")
async def mark_all_read(
    request: MarkAllReadRequest,
    service: ArticleServiceDep
) -> dict:
    """Mark every article (or one feed's) as read."""
    count = service.mark_all_read(request.feed_id)
    return {"success": True, "count": count}


# ─────────────────────────────────────────────────────────────
# Single Article
# ─────────────────────────────────────────────────────────────

@router.get("/{article_id}")
async def get_article(
    article_id: int,
    service: ArticleServiceDep
) -> ArticleDetailResponse:
    """Get a single article with its sanitized content."""
    return ArticleDetailResponse.from_db(service.get_article(article_id))


@router.post("/{article_id}/read")
async def mark_read(
    article_id: int,
    service: ArticleServiceDep,
    request: MarkReadRequest | None = None
) -> dict:
    """Mark article as read (or unread)."""
    is_read = request.is_read if request else True
    service.mark_read(article_id, is_read)
    return {"success": True, "is_read": is_read}


@router.post("/{article_id}/star")
async def toggle_star(
    article_id: int,
    service: ArticleServiceDep
) -> dict:
    """Toggle starred status."""
    is_starred = service.toggle_star(article_id)
    return {"success": True, "is_starred": is_starred}
