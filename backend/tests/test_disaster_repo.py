"""Disaster listing: tag filter and limit over a table larger than one page."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.database import get_database_manager
from models.disaster import Disaster
from repositories.disaster_repo import DisasterRepository

TOTAL = 520
START = datetime(2024, 1, 1, tzinfo=timezone.utc)


async def _fill(session) -> None:
    # the three oldest rows are the only wildfires
    for i in range(TOTAL):
        session.add(
            Disaster(
                title=f"Event {i}",
                description="Synthetic record",
                owner_id="netrunnerX",
                tags=["wildfire"] if i < 3 else ["flood"],
                created_at=START + timedelta(minutes=i),
            )
        )
    await session.flush()


@pytest.mark.asyncio
async def test_old_tagged_rows_are_found_past_the_newest_page(test_db):
    async with get_database_manager().session() as session:
        await _fill(session)
        repo = DisasterRepository(session)

        wildfires = await repo.list_recent(tag="wildfire")
        everything = await repo.list_recent()

    assert [d.title for d in wildfires] == ["Event 2", "Event 1", "Event 0"]
    assert len(everything) == TOTAL
    assert everything[0].title == f"Event {TOTAL - 1}"


@pytest.mark.asyncio
async def test_limit_applies_after_tag_filter(test_db):
    async with get_database_manager().session() as session:
        await _fill(session)
        repo = DisasterRepository(session)

        wildfires = await repo.list_recent(tag="wildfire", limit=2)
        newest = await repo.list_recent(limit=5)

    assert [d.title for d in wildfires] == ["Event 2", "Event 1"]
    assert [d.title for d in newest] == [f"Event {TOTAL - i}" for i in range(1, 6)]
