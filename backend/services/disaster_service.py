"""Disaster CRUD: authorization, location derivation, audit trail, broadcast."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import Principal
from core.errors import Forbidden, NotFound, ValidationFailed
from models.disaster import Disaster
from repositories.disaster_repo import DisasterRepository
from schemas.records import DisasterOut
from services.cache_service import Clock, utc_clock
from services.location_derivation import Geocoder, LocationExtractor, derive_location
from services.notifier import DISASTER_UPDATED, Notifier

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 10_000
AUDITED_FIELDS = ("title", "description", "location_name", "tags")


def audit_entry(
    action: str, user_id: str, clock: Clock, changes: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    return {
        "action": action,
        "user_id": user_id,
        "timestamp": clock().isoformat(),
        "changes": changes,
    }


def diff_fields(before: Dict[str, Any], after: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """{field: {old, new}} for the audited fields whose value changed."""
    return {
        name: {"old": before.get(name), "new": after.get(name)}
        for name in AUDITED_FIELDS
        if name in after and after[name] != before.get(name)
    }


class DisasterService:
    def __init__(
        self,
        session: AsyncSession,
        extractor: LocationExtractor,
        geocoder: Geocoder,
        notifier: Notifier,
        clock: Clock = utc_clock,
    ) -> None:
        self.session = session
        self.repo = DisasterRepository(session)
        self.extractor = extractor
        self.geocoder = geocoder
        self.notifier = notifier
        self.clock = clock

    async def list(
        self,
        tag: Optional[str] = None,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius_meters: float = DEFAULT_RADIUS_METERS,
        limit: Optional[int] = None,
    ) -> List[Disaster]:
        near = (lat, lng, radius_meters) if lat is not None and lng is not None else None
        return await self.repo.list_recent(tag=tag, near=near, limit=limit)

    async def get(self, disaster_id: str) -> Disaster:
        disaster = await self.repo.get_by_id(disaster_id)
        if disaster is None:
            raise NotFound("Disaster not found")
        return disaster

    async def _get_for_write(self, principal: Principal, disaster_id: str) -> Disaster:
        disaster = await self.get(disaster_id)
        if not principal.can_modify(disaster.owner_id):
            raise Forbidden("Unauthorized")
        return disaster

    async def _publish(self, data: Dict[str, Any]) -> None:
        # commit first so clients that re-fetch on the event see the change
        await self.session.commit()
        await self.notifier.notify(DISASTER_UPDATED, data)

    async def create(
        self,
        principal: Principal,
        title: Optional[str],
        description: Optional[str],
        location_name: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Disaster:
        if not title or not title.strip() or not description or not description.strip():
            raise ValidationFailed("Title and description are required")

        derived = await derive_location(
            extractor=self.extractor,
            geocoder=self.geocoder,
            location_name=location_name,
            free_text=description,
        )
        now = self.clock()
        disaster = Disaster(
            title=title.strip(),
            description=description,
            location_name=derived.location_name,
            location_lat=derived.point.lat if derived.point else None,
            location_lng=derived.point.lng if derived.point else None,
            tags=list(tags or []),
            owner_id=principal.id,
            audit_trail=[audit_entry("create", principal.id, self.clock)],
            created_at=now,
            updated_at=now,
        )
        await self.repo.create(disaster)
        logger.info("Disaster %s created by %s (location=%r)", disaster.id, principal.id, disaster.location_name)
        await self._publish({"action": "create", "disaster": DisasterOut.from_model(disaster).model_dump(mode="json")})
        return disaster

    async def update(
        self,
        principal: Principal,
        disaster_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        location_name: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> Disaster:
        """Partial update; omitted (None or blank) fields keep their current value."""
        disaster = await self._get_for_write(principal, disaster_id)

        before = {
            "title": disaster.title,
            "description": disaster.description,
            "location_name": disaster.location_name,
            "tags": list(disaster.tags or []),
        }
        after: Dict[str, Any] = {}
        if title and title.strip():
            after["title"] = title.strip()
        if description and description.strip():
            after["description"] = description
        if location_name and location_name.strip():
            after["location_name"] = location_name.strip()
        if tags is not None:
            after["tags"] = list(tags)
        changes = diff_fields(before, after)

        if "location_name" in changes:
            derived = await derive_location(
                extractor=self.extractor,
                geocoder=self.geocoder,
                location_name=after["location_name"],
            )
            disaster.location_lat = derived.point.lat if derived.point else None
            disaster.location_lng = derived.point.lng if derived.point else None

        for name, change in changes.items():
            setattr(disaster, name, change["new"])
        disaster.updated_at = self.clock()
        disaster.audit_trail = [
            *(disaster.audit_trail or []),
            audit_entry("update", principal.id, self.clock, changes),
        ]
        await self.session.flush()
        logger.info("Disaster %s updated by %s: %s", disaster.id, principal.id, sorted(changes))
        await self._publish({"action": "update", "disaster": DisasterOut.from_model(disaster).model_dump(mode="json")})
        return disaster

    async def delete(self, principal: Principal, disaster_id: str) -> None:
        disaster = await self._get_for_write(principal, disaster_id)
        # The row (and its trail) is gone after this; the final entry is kept in the log.
        logger.info("Disaster %s deleted: %s", disaster.id, audit_entry("delete", principal.id, self.clock))
        await self.repo.delete(disaster)
        await self._publish({"action": "delete", "disaster_id": disaster_id})
