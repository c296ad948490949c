"""
Deterministic sample data: one flood disaster in Manhattan with four mapped
resources. Idempotent: rows are keyed by fixed ids and skipped when present.
No network calls; coordinates are given explicitly.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from models.disaster import Disaster
from models.resource import Resource
from repositories.disaster_repo import DisasterRepository
from repositories.resource_repo import ResourceRepository

SAMPLE_DISASTER_ID = "7b05bd64-30f5-4b21-8a0b-e427741958d0"
SAMPLE_OWNER_ID = "netrunnerX"

SAMPLE_DISASTER: Dict[str, Any] = {
    "title": "NYC Flood",
    "description": "Heavy flooding in Manhattan after record rainfall. Lower Manhattan streets are under water.",
    "location_name": "Manhattan, NYC",
    "location_lat": 40.7831,
    "location_lng": -73.9712,
    "tags": ["flood", "urgent"],
}

SAMPLE_RESOURCES: List[Dict[str, Any]] = [
    {"id": "a1b2c3d4-0001-4000-8000-000000000001", "name": "Water Bottles", "location_name": "Community Center", "type": "water", "lat": 40.7128, "lng": -74.0060},
    {"id": "a1b2c3d4-0002-4000-8000-000000000002", "name": "Medical Kit", "location_name": "Red Cross Tent", "type": "medical", "lat": 40.7138, "lng": -74.0050},
    {"id": "a1b2c3d4-0003-4000-8000-000000000003", "name": "Blankets", "location_name": "School Gym", "type": "shelter", "lat": 40.7148, "lng": -74.0040},
    {"id": "a1b2c3d4-0004-4000-8000-000000000004", "name": "Canned Food", "location_name": "Food Bank", "type": "food", "lat": 40.7158, "lng": -74.0030},
]


async def seed_sample(session: AsyncSession) -> Dict[str, int]:
    """Insert the sample disaster and its resources. Returns inserted counts."""
    disasters = DisasterRepository(session)
    resources = ResourceRepository(session)
    counts = {"disasters": 0, "resources": 0}

    if not await disasters.exists(SAMPLE_DISASTER_ID):
        now = datetime.now(timezone.utc)
        await disasters.create(
            Disaster(
                id=SAMPLE_DISASTER_ID,
                owner_id=SAMPLE_OWNER_ID,
                audit_trail=[
                    {"action": "create", "user_id": SAMPLE_OWNER_ID, "timestamp": now.isoformat(), "changes": None}
                ],
                created_at=now,
                updated_at=now,
                **SAMPLE_DISASTER,
            )
        )
        counts["disasters"] += 1

    for row in SAMPLE_RESOURCES:
        if await resources.exists(row["id"]):
            continue
        await resources.create(
            Resource(
                id=row["id"],
                disaster_id=SAMPLE_DISASTER_ID,
                name=row["name"],
                type=row["type"],
                location_name=row["location_name"],
                location_lat=row["lat"],
                location_lng=row["lng"],
            )
        )
        counts["resources"] += 1
    return counts
