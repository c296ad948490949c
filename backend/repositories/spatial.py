"""
Radius queries over stored points.

On PostgreSQL the work is delegated to the stored functions created by
create_schema.py (PostGIS geography distance). Other dialects (SQLite for
local runs and tests) fall back to a great-circle filter in Python with the
same contract: ``{row_id: distance_meters}`` for rows inside the radius.
"""

from __future__ import annotations

import math
from typing import Dict, List

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from models.disaster import Disaster
from models.resource import Resource

EARTH_RADIUS_M = 6_371_008.8

POSTGIS_FUNCTIONS: List[str] = [
    "CREATE EXTENSION IF NOT EXISTS postgis",
    """
    CREATE OR REPLACE FUNCTION disasters_within_radius(
        center_lat double precision, center_lng double precision, radius_meters double precision
    )
    RETURNS TABLE (id varchar, distance_meters double precision) AS $$
        SELECT d.id,
               ST_Distance(ST_MakePoint(d.location_lng, d.location_lat)::geography,
                           ST_MakePoint(center_lng, center_lat)::geography)
        FROM disasters d
        WHERE d.location_lat IS NOT NULL AND d.location_lng IS NOT NULL
          AND ST_DWithin(ST_MakePoint(d.location_lng, d.location_lat)::geography,
                         ST_MakePoint(center_lng, center_lat)::geography, radius_meters)
    $$ LANGUAGE sql STABLE
    """,
    """
    CREATE OR REPLACE FUNCTION get_nearby_resources(
        target_disaster_id varchar, lat double precision, lon double precision, radius_meters double precision
    )
    RETURNS TABLE (id varchar, distance_meters double precision) AS $$
        SELECT r.id,
               ST_Distance(ST_MakePoint(r.location_lng, r.location_lat)::geography,
                           ST_MakePoint(lon, lat)::geography)
        FROM resources r
        WHERE r.disaster_id = target_disaster_id
          AND r.location_lat IS NOT NULL AND r.location_lng IS NOT NULL
          AND ST_DWithin(ST_MakePoint(r.location_lng, r.location_lat)::geography,
                         ST_MakePoint(lon, lat)::geography, radius_meters)
    $$ LANGUAGE sql STABLE
    """,
]


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def _is_postgres(session: AsyncSession) -> bool:
    return session.bind is not None and session.bind.dialect.name == "postgresql"


async def disasters_within_radius(
    session: AsyncSession, lat: float, lng: float, radius_meters: float
) -> Dict[str, float]:
    if _is_postgres(session):
        rows = await session.execute(
            text("SELECT id, distance_meters FROM disasters_within_radius(:lat, :lng, :radius)"),
            {"lat": lat, "lng": lng, "radius": radius_meters},
        )
        return {row.id: float(row.distance_meters) for row in rows}

    stmt = select(Disaster.id, Disaster.location_lat, Disaster.location_lng).where(
        Disaster.location_lat.is_not(None), Disaster.location_lng.is_not(None)
    )
    rows = await session.execute(stmt)
    return _filter_by_distance(rows, lat, lng, radius_meters)


async def nearby_resources(
    session: AsyncSession,
    disaster_id: str,
    lat: float,
    lng: float,
    radius_meters: float,
) -> Dict[str, float]:
    if _is_postgres(session):
        rows = await session.execute(
            text(
                "SELECT id, distance_meters FROM get_nearby_resources(:disaster_id, :lat, :lon, :radius)"
            ),
            {"disaster_id": disaster_id, "lat": lat, "lon": lng, "radius": radius_meters},
        )
        return {row.id: float(row.distance_meters) for row in rows}

    stmt = select(Resource.id, Resource.location_lat, Resource.location_lng).where(
        Resource.disaster_id == disaster_id,
        Resource.location_lat.is_not(None),
        Resource.location_lng.is_not(None),
    )
    rows = await session.execute(stmt)
    return _filter_by_distance(rows, lat, lng, radius_meters)


def _filter_by_distance(rows, lat: float, lng: float, radius_meters: float) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for row_id, row_lat, row_lng in rows:
        distance = haversine_m(lat, lng, row_lat, row_lng)
        if distance <= radius_meters:
            out[row_id] = distance
    return out
