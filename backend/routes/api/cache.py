"""POST /api/cache/cleanup: on-demand sweep of expired cache rows (admin)."""

from fastapi import APIRouter, Depends

from core.auth import Principal
from core.dependencies import get_cache, get_current_principal
from core.errors import AppError, Forbidden
from services.cache_service import KeyValueCache

router = APIRouter(prefix="/cache", tags=["cache"])


@router.post("/cleanup", summary="Remove expired cache entries")
async def cleanup_cache(
    principal: Principal = Depends(get_current_principal),
    cache: KeyValueCache = Depends(get_cache),
) -> dict:
    if not principal.is_admin:
        raise Forbidden("Admin access required")
    removed = await cache.cleanup()
    if removed is None:
        raise AppError("Cache cleanup failed")
    return {"success": True, "data": {"removed": removed}}
