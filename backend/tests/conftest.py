# Ensure backend is at sys.path[0] when pytest runs (from repo root or from backend dir)
import sys
from pathlib import Path

_tests_dir = Path(__file__).resolve().parent
_backend = _tests_dir.parent
_str_backend = str(_backend)
if sys.path[0:1] != [_str_backend]:
    sys.path.insert(0, _str_backend)

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from core.database import dispose_database, get_database_manager, init_database
from core.result import Degraded, Ok
from models.base import Base
from schemas.external import ExtractionResult, GeoResult


@pytest.fixture
def test_db():
    """In-memory SQLite with every table created."""
    async def _setup():
        await init_database("sqlite+aiosqlite:///:memory:")
        engine = get_database_manager().engine
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def _teardown():
        await dispose_database()

    asyncio.run(_setup())
    yield
    asyncio.run(_teardown())


class FakeClock:
    """Settable clock for TTL tests."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.current = start or datetime(2024, 6, 21, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class FakeExtractor:
    """Location extractor answering from a fixed table; counts calls."""

    def __init__(self, answers: Optional[Dict[str, str]] = None, fail: bool = False) -> None:
        self.answers = answers or {}
        self.fail = fail
        self.calls: List[str] = []

    async def extract(self, description: str):
        self.calls.append(description)
        now = datetime.now(timezone.utc)
        if self.fail:
            return Degraded(ExtractionResult(location_name=None, extracted_at=now), "model unavailable")
        name = next((v for k, v in self.answers.items() if k in description), None)
        return Ok(ExtractionResult(location_name=name, extracted_at=now))


class FakeGeocoder:
    """Geocoder answering from a fixed table of name -> (lat, lng); counts calls."""

    def __init__(self, places: Optional[Dict[str, tuple]] = None, fail: bool = False) -> None:
        self.places = places or {}
        self.fail = fail
        self.calls: List[str] = []

    async def geocode(self, location_name):
        self.calls.append(location_name)
        if self.fail:
            return Degraded(None, "geocoder unavailable")
        hit = self.places.get(location_name)
        if hit is None:
            return Ok(None)
        return Ok(
            GeoResult(
                lat=hit[0],
                lng=hit[1],
                formatted_address=f"{location_name} (test)",
                geocoded_at=datetime.now(timezone.utc),
            )
        )


class RecordingNotifier:
    def __init__(self) -> None:
        self.events: List[tuple] = []

    async def notify(self, event, data) -> int:
        self.events.append((event, data))
        return 0


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


class ApiFakes:
    def __init__(self) -> None:
        self.extractor = FakeExtractor(
            {"Tokyo": "Tokyo, Japan", "Manhattan": "Manhattan, NYC", "Community Center": "Community Center"}
        )
        self.geocoder = FakeGeocoder(
            {
                "Tokyo, Japan": (35.6768601, 139.7638947),
                "Manhattan, NYC": (40.7831, -73.9712),
                "Brooklyn, NYC": (40.6782, -73.9442),
            }
        )
        self.notifier = RecordingNotifier()


@pytest.fixture
def api(test_db):
    """Route the app at the in-memory database with fake adapters; yields the fakes."""
    from core.dependencies import get_db_session, get_geocoder, get_location_extractor, get_notifier
    from main import app

    fakes = ApiFakes()

    async def override_session():
        async with get_database_manager().session() as s:
            yield s

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_location_extractor] = lambda: fakes.extractor
    app.dependency_overrides[get_geocoder] = lambda: fakes.geocoder
    app.dependency_overrides[get_notifier] = lambda: fakes.notifier
    yield fakes
    app.dependency_overrides.clear()


def client_for_app():
    from httpx import ASGITransport, AsyncClient
    from main import app

    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
