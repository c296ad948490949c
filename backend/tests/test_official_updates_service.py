"""Official updates aggregator: parsing, merging, fallbacks, type filter."""

from __future__ import annotations

from datetime import timedelta

import httpx
import pytest

from conftest import FakeClock
from services.official_updates_service import (
    SOURCES,
    OfficialUpdatesService,
    infer_disaster_type,
    mock_updates,
    parse_articles,
)

FEMA = SOURCES[0]

FEMA_HTML = """
<html><body>
  <div class="news-release-item">
    <h3 class="news-release-title"><a href="/news-release/2024/hurricane-aid">Hurricane Beryl assistance approved</a></h3>
    <span class="news-release-date">June 20, 2024</span>
    <p class="news-release-summary">Federal aid for tropical storm damage.</p>
  </div>
  <div class="news-release-item">
    <h3 class="news-release-title"><a href="https://www.fema.gov/x"></a></h3>
  </div>
  <div class="news-release-item">
    <h3 class="news-release-title"><a href="/news-release/2024/flood">Flood recovery centers open</a></h3>
  </div>
</body></html>
"""


def test_parse_articles_skips_untitled_and_resolves_links():
    clock = FakeClock()
    updates = parse_articles(FEMA, FEMA_HTML, limit=10, now=clock())

    assert [u.title for u in updates] == [
        "Hurricane Beryl assistance approved",
        "Flood recovery centers open",
    ]
    assert updates[0].source == "FEMA"
    assert updates[0].link == "https://www.fema.gov/news-release/2024/hurricane-aid"
    assert updates[0].date == "June 20, 2024"
    assert updates[0].summary == "Federal aid for tropical storm damage."
    assert updates[1].summary == ""


def test_parse_articles_honours_per_source_limit():
    updates = parse_articles(FEMA, FEMA_HTML, limit=1, now=FakeClock()())
    assert len(updates) == 1


def test_mock_updates_are_newest_first_and_filterable():
    clock = FakeClock()
    updates = mock_updates(now=clock())
    assert len(updates) == 5
    assert updates[0].timestamp == clock()
    assert updates[-1].timestamp == clock() - timedelta(days=4)

    floods = mock_updates("flood", now=clock())
    assert floods and all("flood" in (u.title + u.summary).lower() for u in floods)


def test_infer_disaster_type():
    assert infer_disaster_type("Major Earthquake hits the coast") == "earthquake"
    assert infer_disaster_type("Power outage downtown") is None


def _service(handler, clock=None):
    return OfficialUpdatesService(transport=httpx.MockTransport(handler), clock=clock or FakeClock())


@pytest.mark.asyncio
async def test_all_sources_failing_falls_back_to_mock():
    def handler(request):
        return httpx.Response(503)

    outcome = await _service(handler).fetch_all(limit=10)

    assert outcome.degraded
    assert len(outcome.value) == 5
    assert {u.source for u in outcome.value} == {"FEMA", "Red Cross", "NOAA"}


@pytest.mark.asyncio
async def test_one_failing_source_only_drops_its_items():
    seen = []

    def handler(request):
        seen.append(request.headers["User-Agent"])
        if request.url.host == "www.fema.gov":
            return httpx.Response(200, text=FEMA_HTML)
        if request.url.host == "www.noaa.gov":
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, text="<html><body>nothing here</body></html>")

    outcome = await _service(handler).fetch_all(limit=10)

    assert not outcome.degraded
    assert [u.source for u in outcome.value] == ["FEMA", "FEMA"]
    assert len(seen) == 3
    assert all("Mozilla" in ua for ua in seen)


@pytest.mark.asyncio
async def test_fetch_by_type_filters_by_keywords():
    def handler(request):
        if request.url.host == "www.fema.gov":
            return httpx.Response(200, text=FEMA_HTML)
        return httpx.Response(404)

    outcome = await _service(handler).fetch_by_type("hurricane", limit=10)

    assert not outcome.degraded
    assert [u.title for u in outcome.value] == ["Hurricane Beryl assistance approved"]


@pytest.mark.asyncio
async def test_fetch_by_type_without_matches_uses_typed_mock():
    def handler(request):
        if request.url.host == "www.fema.gov":
            return httpx.Response(200, text=FEMA_HTML)
        return httpx.Response(404)

    outcome = await _service(handler).fetch_by_type("earthquake", limit=10)

    assert outcome.degraded
    assert outcome.value
    assert all("earthquake" in (u.title + u.summary).lower() for u in outcome.value)


@pytest.mark.asyncio
async def test_unknown_type_returns_unfiltered_items():
    def handler(request):
        if request.url.host == "www.fema.gov":
            return httpx.Response(200, text=FEMA_HTML)
        return httpx.Response(404)

    outcome = await _service(handler).fetch_by_type("meteor", limit=1)

    assert not outcome.degraded
    assert len(outcome.value) == 1
