"""
Feed routes: subscription, management, refresh.
"""

from fastapi import APIRouter

from ..schemas import (
    ArticleResponse,
    FeedResponse,
    AddFeedRequest,
    UpdateFeedRequest,
)
from ..services import FeedServiceDep

router = APIRouter(prefix="/feeds", tags=["feeds"])


# ─────────────────────────────────────────────────────────────
# Feed Management
# ─────────────────────────────────────────────────────────────

@router.get("")
async def list_feeds(
    service: FeedServiceDep,
    folder_id: int | None = None
) -> list[FeedResponse]:
    """List subscribed feeds."""
    return [FeedResponse.from_db(f) for f in service.list_feeds(folder_id)]


@router.post("")
async def add_feed(
    request: AddFeedRequest,
    service: FeedServiceDep
) -> FeedResponse:
    """Subscribe to a new feed. The feed is only added if it can be fetched and parsed."""
    feed = await service.subscribe(request.url, folder_id=request.folder_id)
    return FeedResponse.from_db(feed)


@router.put("/{feed_id}")
async def update_feed(
    feed_id: int,
    request: UpdateFeedRequest,
    service: FeedServiceDep
) -> FeedResponse:
    """Rename a feed or move it between folders."""
    feed = service.update_feed(
        feed_id,
        title=request.title,
        folder_id=request.folder_id,
        clear_folder=request.clear_folder,
    )
    return FeedResponse.from_db(feed)


@router.delete("/{feed_id}")
async def remove_feed(
    feed_id: int,
    service: FeedServiceDep
) -> dict:
    """Unsubscribe from a feed."""
    service.unsubscribe(feed_id)
    return {"success": True}


# ─────────────────────────────────────────────────────────────
# Refresh
# ─────────────────────────────────────────────────────────────

@router.post("/refresh")
async def refresh_feeds(service: FeedServiceDep) -> list[ArticleResponse]:
    """Refresh every feed. Returns the articles of the feeds that refreshed."""
    articles = await service.refresh_all()
    return [ArticleResponse.from_db(a) for a in articles]


@router.post("/{feed_id}/refresh")
async def refresh_feed(
    feed_id: int,
    service: FeedServiceDep
) -> list[ArticleResponse]:
    """Refresh a specific feed. A failed refresh still returns its stored articles."""
    articles = await service.refresh_feed(feed_id)
    return [ArticleResponse.from_db(a) for a in articles]
