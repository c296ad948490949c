"""Social media feeds under /api/social-media."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.dependencies import get_disaster_service, get_social_media_service
from services.disaster_service import DisasterService
from services.social_media_service import SocialMediaService

router = APIRouter(prefix="/social-media", tags=["social-media"])


@router.get("/disasters/{disaster_id}/social-media", summary="Sample social feed for a disaster")
async def get_social_media_posts(
    disaster_id: str,
    keywords: Optional[str] = Query(None, description="Comma-separated keywords"),
    limit: int = Query(10, ge=1, le=100),
    priority: Optional[str] = Query(None, description="critical | high | medium | low"),
    disasters: DisasterService = Depends(get_disaster_service),
    feed: SocialMediaService = Depends(get_social_media_service),
) -> dict:
    await disasters.get(disaster_id)
    data = await feed.disaster_feed(disaster_id, keywords=keywords, limit=limit, priority=priority)
    return {"success": True, "data": data}


@router.get("/mock-social-media", summary="Raw sample feed")
async def get_mock_social_media(
    keywords: Optional[str] = Query(None),
    urgent_only: bool = Query(False),
    feed: SocialMediaService = Depends(get_social_media_service),
) -> dict:
    posts = feed.mock_feed(keywords=keywords, urgent_only=urgent_only)
    return {"success": True, "data": posts, "count": len(posts)}


@router.get("/{disaster_id}/social-media", summary="Recent tweets about a disaster")
async def get_twitter_posts(
    disaster_id: str,
    disasters: DisasterService = Depends(get_disaster_service),
    feed: SocialMediaService = Depends(get_social_media_service),
) -> dict:
    disaster = await disasters.get(disaster_id)
    outcome = await feed.recent_tweets(disaster)
    return {
        "success": True,
        "data": outcome.value,
        "count": len(outcome.value),
        "cached": outcome.from_cache,
        "fallback_used": outcome.degraded,
        "fallback_reason": outcome.reason,
    }
