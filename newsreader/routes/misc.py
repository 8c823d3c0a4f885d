"""
Miscellaneous routes: health check.
"""

from fastapi import APIRouter

from ..config import state

router = APIRouter(tags=["misc"])


@router.get("/health")
async def health_check() -> dict:
    """API health check."""
    scheduler = state.scheduler
    return {
        "status": "ok",
        "version": "1.0.0",
        "scheduler_running": bool(scheduler and scheduler.running),
        "last_refresh": (
            scheduler.last_refresh_at.isoformat()
            if scheduler and scheduler.last_refresh_at else None
        ),
    }
