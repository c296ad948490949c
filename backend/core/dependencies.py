"""
FastAPI dependency providers.

Adapters and services are built per request from Settings and the request's
session. Tests replace any provider through ``app.dependency_overrides``.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from clients.gemini_client import GeminiClient
from services.cache_service import KeyValueCache
from services.disaster_service import DisasterService
from services.geocoding_service import GeocodingService
from services.image_verification_service import ImageVerificationService
from services.location_extraction_service import LocationExtractionService
from services.notifier import BroadcastNotifier, get_broadcast_notifier
from services.official_updates_service import OfficialUpdatesService
from services.report_service import ReportService
from services.resource_service import ResourceService
from services.social_media_service import SocialMediaService

from .auth import DEFAULT_USERS, Authenticator, Principal, StaticRoleAuthenticator
from .config import Settings, get_settings
from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an AsyncSession from the DatabaseManager."""
    manager = get_database_manager()
    async with manager.session() as session:
        yield session


def get_authenticator(settings: Settings = Depends(get_settings)) -> Authenticator:
    return StaticRoleAuthenticator(DEFAULT_USERS, settings.default_user_id)


def get_current_principal(
    x_user_id: Optional[str] = Header(None, alias="X-User-ID"),
    authenticator: Authenticator = Depends(get_authenticator),
) -> Principal:
    return authenticator.resolve(x_user_id)


def get_cache(session: AsyncSession = Depends(get_db_session)) -> KeyValueCache:
    return KeyValueCache(session)


def get_gemini_client(settings: Settings = Depends(get_settings)) -> GeminiClient:
    return GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout=settings.http_timeout_seconds,
    )


def get_geocoder(
    cache: KeyValueCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> GeocodingService:
    return GeocodingService(
        cache,
        url=settings.geocoding_url,
        user_agent=settings.geocoding_user_agent,
        timeout=settings.http_timeout_seconds,
    )


def get_location_extractor(
    cache: KeyValueCache = Depends(get_cache),
    client: GeminiClient = Depends(get_gemini_client),
) -> LocationExtractionService:
    return LocationExtractionService(cache, client)


def get_image_verifier(
    cache: KeyValueCache = Depends(get_cache),
    client: GeminiClient = Depends(get_gemini_client),
    settings: Settings = Depends(get_settings),
) -> ImageVerificationService:
    return ImageVerificationService(cache, client, timeout=settings.http_timeout_seconds)


def get_updates_aggregator(settings: Settings = Depends(get_settings)) -> OfficialUpdatesService:
    return OfficialUpdatesService(timeout=settings.scrape_timeout_seconds)


def get_notifier() -> BroadcastNotifier:
    return get_broadcast_notifier()


def get_social_media_service(
    cache: KeyValueCache = Depends(get_cache),
    settings: Settings = Depends(get_settings),
) -> SocialMediaService:
    return SocialMediaService(
        cache,
        bearer_token=settings.twitter_bearer_token,
        timeout=settings.http_timeout_seconds,
    )


def get_disaster_service(
    session: AsyncSession = Depends(get_db_session),
    extractor: LocationExtractionService = Depends(get_location_extractor),
    geocoder: GeocodingService = Depends(get_geocoder),
    notifier: BroadcastNotifier = Depends(get_notifier),
) -> DisasterService:
    return DisasterService(session, extractor, geocoder, notifier)


def get_resource_service(
    session: AsyncSession = Depends(get_db_session),
    extractor: LocationExtractionService = Depends(get_location_extractor),
    geocoder: GeocodingService = Depends(get_geocoder),
) -> ResourceService:
    return ResourceService(session, extractor, geocoder)


def get_report_service(session: AsyncSession = Depends(get_db_session)) -> ReportService:
    return ReportService(session)
