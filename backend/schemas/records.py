"""
Response shapes for persisted records.

Optional fields are always present in the output; ``None`` means absent.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from models.disaster import Disaster
from models.report import Report
from models.resource import Resource
from schemas.external import GeoPoint


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _point(lat: Optional[float], lng: Optional[float]) -> Optional[GeoPoint]:
    if lat is None or lng is None:
        return None
    return GeoPoint(lat=lat, lng=lng)


class FieldChange(BaseModel):
    old: Any = None
    new: Any = None


class AuditEntry(BaseModel):
    action: Literal["create", "update", "delete"]
    user_id: str
    timestamp: datetime
    changes: Optional[Dict[str, FieldChange]] = None


class DisasterOut(BaseModel):
    id: str
    title: str
    description: str
    location_name: Optional[str] = None
    location: Optional[GeoPoint] = None
    tags: List[str] = Field(default_factory=list)
    owner_id: str
    audit_trail: List[AuditEntry] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, d: Disaster) -> "DisasterOut":
        return cls(
            id=d.id,
            title=d.title,
            description=d.description,
            location_name=d.location_name,
            location=_point(d.location_lat, d.location_lng),
            tags=list(d.tags or []),
            owner_id=d.owner_id,
            audit_trail=[AuditEntry.model_validate(e) for e in (d.audit_trail or [])],
            created_at=_aware(d.created_at),
            updated_at=_aware(d.updated_at),
        )


class ResourceOut(BaseModel):
    id: str
    disaster_id: str
    name: str
    type: str
    location_name: Optional[str] = None
    location: Optional[GeoPoint] = None
    created_at: datetime
    distance_km: Optional[float] = None

    @classmethod
    def from_model(cls, r: Resource, distance_meters: Optional[float] = None) -> "ResourceOut":
        return cls(
            id=r.id,
            disaster_id=r.disaster_id,
            name=r.name,
            type=r.type,
            location_name=r.location_name,
            location=_point(r.location_lat, r.location_lng),
            created_at=_aware(r.created_at),
            distance_km=None if distance_meters is None else round(distance_meters / 1000, 2),
        )


class ReportOut(BaseModel):
    id: str
    disaster_id: str
    user_id: str
    content: str
    image_url: Optional[str] = None
    verification_status: str
    created_at: datetime

    @classmethod
    def from_model(cls, r: Report) -> "ReportOut":
        return cls(
            id=r.id,
            disaster_id=r.disaster_id,
            user_id=r.user_id,
            content=r.content,
            image_url=r.image_url,
            verification_status=r.verification_status,
            created_at=_aware(r.created_at),
        )
