"""JSON API: disasters, resources, reports, geocoding, verification, social media, cache."""

from fastapi import APIRouter

from .cache import router as cache_router
from .disasters import router as disasters_router
from .geocode import router as geocode_router
from .reports import router as reports_router
from .resources import router as resources_router
from .social_media import router as social_media_router
from .verification import router as verification_router

router = APIRouter(prefix="/api")
router.include_router(disasters_router)
router.include_router(resources_router)
router.include_router(reports_router)
router.include_router(geocode_router)
router.include_router(verification_router)
router.include_router(social_media_router)
router.include_router(cache_router)

api_router = router
