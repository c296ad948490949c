"""
Official updates aggregator: scrapes agency news pages (FEMA, Red Cross, NOAA).

Each source is fetched concurrently and parsed with its own CSS selectors. A
failing source only drops its own items. When nothing can be scraped the
caller gets a fixed list of sample updates as a Degraded outcome, so the UI
is never left empty by a scraping outage.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from core.result import Degraded, Ok, Outcome
from models.disaster import Disaster
from schemas.external import OfficialUpdate
from services.cache_service import Clock, KeyValueCache, utc_clock

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


@dataclass(frozen=True)
class NewsSource:
    name: str
    base_url: str
    news_url: str
    articles: str
    title: str
    date: str
    summary: str
    link: str


SOURCES: Tuple[NewsSource, ...] = (
    NewsSource(
        name="FEMA",
        base_url="https://www.fema.gov",
        news_url="https://www.fema.gov/news-releases",
        articles=".news-release-item",
        title=".news-release-title a",
        date=".news-release-date",
        summary=".news-release-summary",
        link=".news-release-title a",
    ),
    NewsSource(
        name="Red Cross",
        base_url="https://www.redcross.org",
        news_url="https://www.redcross.org/about-us/news-and-events/news.html",
        articles=".news-item",
        title=".news-title a",
        date=".news-date",
        summary=".news-summary",
        link=".news-title a",
    ),
    NewsSource(
        name="NOAA",
        base_url="https://www.noaa.gov",
        news_url="https://www.noaa.gov/news",
        articles=".news-item",
        title=".news-title a",
        date=".news-date",
        summary=".news-summary",
        link=".news-title a",
    ),
)

DISASTER_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "hurricane": ("hurricane", "tropical storm", "cyclone", "typhoon"),
    "earthquake": ("earthquake", "seismic", "quake"),
    "flood": ("flood", "flooding", "water", "rain"),
    "wildfire": ("wildfire", "fire", "burn", "blaze"),
    "tornado": ("tornado", "twister", "storm"),
    "tsunami": ("tsunami", "tidal wave"),
    "volcano": ("volcano", "volcanic", "eruption"),
    "drought": ("drought", "dry", "water shortage"),
}

DISASTER_TYPES: Tuple[str, ...] = tuple(DISASTER_KEYWORDS)


def keywords_for(disaster_type: Optional[str]) -> Tuple[str, ...]:
    if not disaster_type:
        return ()
    return DISASTER_KEYWORDS.get(disaster_type.strip().lower(), ())


def matches_keywords(update: OfficialUpdate, keywords: Sequence[str]) -> bool:
    text = f"{update.title} {update.summary or ''}".lower()
    return any(k in text for k in keywords)


def infer_disaster_type(text: str) -> Optional[str]:
    """First known disaster type mentioned in text, if any."""
    lowered = text.lower()
    return next((t for t in DISASTER_TYPES if t in lowered), None)


def mock_updates(
    disaster_type: Optional[str] = None, limit: int = 10, now: Optional[datetime] = None
) -> List[OfficialUpdate]:
    """Static sample updates, newest first, optionally filtered by disaster type."""
    now = now or utc_clock()
    day = timedelta(days=1)
    samples = [
        OfficialUpdate(
            source="FEMA",
            title="FEMA Announces Disaster Assistance for New York",
            date="June 21, 2024",
            summary="Federal assistance available for flood-affected areas in New York City. "
            "Emergency shelters and financial aid programs have been activated.",
            link="https://www.fema.gov/news-release/2024/06/21/fema-announces-disaster-assistance-new-york",
            timestamp=now,
        ),
        OfficialUpdate(
            source="Red Cross",
            title="Red Cross Opens Emergency Shelters in Manhattan",
            date="June 20, 2024",
            summary="American Red Cross has opened multiple emergency shelters to assist "
            "residents affected by flooding in Manhattan.",
            link="https://www.redcross.org/about-us/news-and-events/news/2024/emergency-shelters-manhattan.html",
            timestamp=now - day,
        ),
        OfficialUpdate(
            source="NOAA",
            title="NOAA Issues Flood Warning for New York Area",
            date="June 19, 2024",
            summary="National Weather Service has issued flood warnings for the New York "
            "metropolitan area due to heavy rainfall.",
            link="https://www.noaa.gov/news/2024/06/19/flood-warning-new-york",
            timestamp=now - 2 * day,
        ),
        OfficialUpdate(
            source="FEMA",
            title="FEMA Deploys Response Teams to Hurricane-Affected Areas",
            date="June 18, 2024",
            summary="Federal Emergency Management Agency has deployed response teams to "
            "areas affected by recent hurricane activity.",
            link="https://www.fema.gov/news-release/2024/06/18/fema-deploys-response-teams-hurricane",
            timestamp=now - 3 * day,
        ),
        OfficialUpdate(
            source="Red Cross",
            title="Red Cross Provides Aid to Earthquake Victims",
            date="June 17, 2024",
            summary="American Red Cross is providing emergency assistance to communities "
            "affected by recent earthquake activity.",
            link="https://www.redcross.org/about-us/news-and-events/news/2024/earthquake-aid.html",
            timestamp=now - 4 * day,
        ),
    ]
    keywords = keywords_for(disaster_type)
    if keywords:
        samples = [u for u in samples if matches_keywords(u, keywords)]
    return samples[:limit]


def parse_articles(
    source: NewsSource, html: str, limit: int, now: datetime
) -> List[OfficialUpdate]:
    """Apply the source's selectors; articles without a title are skipped."""
    soup = BeautifulSoup(html, "html.parser")
    updates: List[OfficialUpdate] = []
    for article in soup.select(source.articles)[:limit]:
        title_el = article.select_one(source.title)
        title = title_el.get_text(strip=True) if title_el else ""
        if not title:
            continue
        date_el = article.select_one(source.date)
        summary_el = article.select_one(source.summary)
        link_el = article.select_one(source.link)
        href = link_el.get("href") if link_el else None
        updates.append(
            OfficialUpdate(
                source=source.name,
                title=title,
                date=date_el.get_text(strip=True) if date_el else "",
                summary=summary_el.get_text(strip=True) if summary_el else "",
                link=urljoin(source.base_url, href) if href else None,
                timestamp=now,
            )
        )
    return updates


class OfficialUpdatesService:
    def __init__(
        self,
        sources: Sequence[NewsSource] = SOURCES,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = utc_clock,
    ) -> None:
        self.sources = tuple(sources)
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

    async def _scrape(
        self, client: httpx.AsyncClient, source: NewsSource, limit: int
    ) -> List[OfficialUpdate]:
        try:
            response = await client.get(source.news_url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error scraping %s updates: %s", source.name, e)
            return []
        return parse_articles(source, response.text, limit, self._clock())

    async def fetch_all(self, limit: int = 10) -> Outcome[List[OfficialUpdate]]:
        """Merged updates from every source, newest first, at most limit per source."""
        async with httpx.AsyncClient(
            transport=self._transport,
            headers={"User-Agent": BROWSER_USER_AGENT},
            follow_redirects=True,
        ) as client:
            results = await asyncio.gather(
                *(self._scrape(client, source, limit) for source in self.sources),
                return_exceptions=True,
            )

        merged: List[OfficialUpdate] = []
        for source, result in zip(self.sources, results):
            if isinstance(result, BaseException):
                logger.error("Parsing %s updates failed: %r", source.name, result)
                continue
            merged.extend(result)

        if not merged:
            logger.info("No live official updates scraped, using sample updates")
            return Degraded(
                mock_updates(None, limit, now=self._clock()),
                "no updates could be scraped from any source",
            )

        merged.sort(key=lambda u: u.timestamp, reverse=True)
        return Ok(merged[: limit * len(self.sources)])

    async def fetch_by_type(
        self, disaster_type: str, limit: int = 10
    ) -> Outcome[List[OfficialUpdate]]:
        """Updates whose title or summary mention the type's keywords."""
        outcome = await self.fetch_all(limit * 3)
        keywords = keywords_for(disaster_type)
        if not keywords:
            if outcome.degraded:
                return Degraded(outcome.value[:limit], outcome.reason or "")
            return Ok(outcome.value[:limit])

        filtered = [u for u in outcome.value if matches_keywords(u, keywords)]
        if not filtered:
            logger.info("No official updates found for %s, using sample updates", disaster_type)
            return Degraded(
                mock_updates(disaster_type, limit, now=self._clock()),
                f"no updates matched disaster type {disaster_type!r}",
            )
        if outcome.degraded:
            return Degraded(filtered[:limit], outcome.reason or "")
        return Ok(filtered[:limit])


UPDATES_CACHE_TTL_MINUTES = 60


def updates_cache_key(disaster_id: str, limit: int, disaster_type: Optional[str]) -> str:
    return f"official_updates_{disaster_id}_{limit}_{disaster_type or 'all'}"


async def updates_for_disaster(
    aggregator: OfficialUpdatesService,
    cache: KeyValueCache,
    disaster: Disaster,
    limit: int = 10,
    disaster_type: Optional[str] = None,
) -> Tuple[Dict[str, Any], bool, str]:
    """
    Official updates payload for a disaster, cached for an hour.

    Returns (payload, from_cache, cache_key). Without an explicit type the
    type is inferred from the disaster's title, description and tags; with
    no match the unfiltered feed is used.
    """
    key = updates_cache_key(disaster.id, limit, disaster_type)
    cached = await cache.get(key)
    if cached:
        return cached, True, key

    effective_type = disaster_type or infer_disaster_type(
        " ".join([disaster.title, disaster.description, *(disaster.tags or [])])
    )
    if effective_type:
        outcome = await aggregator.fetch_by_type(effective_type, limit)
    else:
        outcome = await aggregator.fetch_all(limit)

    updates = outcome.value
    payload = {
        "disaster": {
            "id": disaster.id,
            "title": disaster.title,
            "location_name": disaster.location_name,
            "tags": list(disaster.tags or []),
        },
        "official_updates": [u.model_dump(mode="json") for u in updates],
        "total_updates": len(updates),
        "sources": sorted({u.source for u in updates}),
        "last_updated": cache.now().isoformat(),
        "fallback_used": outcome.degraded,
        "fallback_reason": outcome.reason,
    }
    await cache.set(key, payload, UPDATES_CACHE_TTL_MINUTES)
    return payload, False, key
