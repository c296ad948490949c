"""
Normalized payloads produced by the external adapters (geocoder, model, scraper).

These are also the shapes stored in the cache table, so they round-trip
through ``model_dump(mode="json")`` / ``model_validate``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class GeoPoint(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GeoResult(BaseModel):
    """First geocoder match for a location name."""

    lat: float
    lng: float
    formatted_address: Optional[str] = None
    geocoded_at: datetime

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.lat, lng=self.lng)


class ExtractionResult(BaseModel):
    """Location name pulled out of free text; None when the model found none."""

    location_name: Optional[str] = None
    extracted_at: datetime


class VerificationResult(BaseModel):
    status: Literal["verified", "suspicious", "error"]
    confidence: int = Field(..., ge=0, le=100)
    analysis: str
    verified_at: datetime


class OfficialUpdate(BaseModel):
    """One news item from an agency page (or the static fallback list)."""

    source: str
    title: str
    date: Optional[str] = None
    summary: Optional[str] = None
    link: Optional[str] = None
    timestamp: datetime
