"""
Social media feed for a disaster.

The default feed is a fixed set of sample posts, filtered and decorated with
engagement figures, cached for an hour. A live path queries the Twitter v2
recent-search API when a bearer token is configured.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx

from core.result import Degraded, Ok, Outcome
from models.disaster import Disaster
from services.cache_service import KeyValueCache

logger = logging.getLogger(__name__)

CACHE_TTL_MINUTES = 60
TWITTER_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"
URGENT_LEVELS = ("critical", "high")


def sample_posts(now: datetime) -> List[Dict[str, Any]]:
    def ago(minutes: int) -> str:
        return (now - timedelta(minutes=minutes)).isoformat()

    return [
        {
            "id": "1",
            "post": "#floodrelief Need food and water in Lower Manhattan. Urgent help needed!",
            "user": "citizen1",
            "timestamp": ago(30),
            "platform": "twitter",
            "urgency": "high",
            "keywords": ["food", "water", "urgent"],
        },
        {
            "id": "2",
            "post": "Red Cross shelter available at 123 Main St. #disasterrelief",
            "user": "redcross_ny",
            "timestamp": ago(45),
            "platform": "twitter",
            "urgency": "medium",
            "keywords": ["shelter", "available"],
        },
        {
            "id": "3",
            "post": "SOS! Trapped in building on 5th Avenue. Need immediate rescue! #emergency",
            "user": "emergency_user",
            "timestamp": ago(10),
            "platform": "twitter",
            "urgency": "critical",
            "keywords": ["SOS", "trapped", "rescue", "emergency"],
        },
    ]


def split_keywords(keywords: Optional[str]) -> List[str]:
    if not keywords:
        return []
    return [k.strip().lower() for k in keywords.split(",") if k.strip()]


def build_search_query(disaster: Disaster) -> str:
    terms = [*(disaster.tags or []), disaster.location_name or ""]
    return " OR ".join(f'"{t}"' for t in terms if t)


class SocialMediaService:
    def __init__(
        self,
        cache: KeyValueCache,
        bearer_token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.cache = cache
        self.bearer_token = bearer_token
        self.timeout = timeout
        self._transport = transport
        self._rng = rng or random.Random()

    @staticmethod
    def feed_cache_key(disaster_id: str, keywords: Optional[str], priority: Optional[str]) -> str:
        return f"social_media_{disaster_id}_{keywords or 'all'}_{priority or 'all'}"

    async def disaster_feed(
        self,
        disaster_id: str,
        keywords: Optional[str] = None,
        limit: int = 10,
        priority: Optional[str] = None,
    ) -> Dict[str, Any]:
        """{posts, last_updated, total_count, cached} for a disaster, cached for an hour."""
        key = self.feed_cache_key(disaster_id, keywords, priority)
        cached = await self.cache.get(key)
        if cached:
            return {**cached, "cached": True}

        posts = sample_posts(self.cache.now())
        wanted = split_keywords(keywords)
        if wanted:
            posts = [
                p
                for p in posts
                if any(
                    k in p["post"].lower() or any(k in kw.lower() for kw in p["keywords"])
                    for k in wanted
                )
            ]
        if priority:
            posts = [p for p in posts if p["urgency"] == priority]
        posts = [
            {
                **p,
                "engagement": self._rng.randint(10, 109),
                "retweets": self._rng.randint(0, 49),
                "location_mentioned": self._rng.random() > 0.5,
            }
            for p in posts[: max(limit, 0)]
        ]

        result = {
            "posts": posts,
            "last_updated": self.cache.now().isoformat(),
            "total_count": len(posts),
        }
        await self.cache.set(key, result, CACHE_TTL_MINUTES)
        return {**result, "cached": False}

    def mock_feed(self, keywords: Optional[str] = None, urgent_only: bool = False) -> List[Dict[str, Any]]:
        posts = sample_posts(self.cache.now())
        if urgent_only:
            posts = [p for p in posts if p["urgency"] in URGENT_LEVELS]
        wanted = split_keywords(keywords)
        if wanted:
            posts = [p for p in posts if any(k in p["post"].lower() for k in wanted)]
        return posts

    async def recent_tweets(self, disaster: Disaster) -> Outcome[List[Dict[str, Any]]]:
        """Recent tweets mentioning the disaster's tags or place, cached for an hour."""
        key = f"social-media:{disaster.id}"
        cached = await self.cache.get(key)
        if cached is not None:
            return Ok(list(cached), from_cache=True)

        if not self.bearer_token:
            return Degraded([], "TWITTER_BEARER_TOKEN is not configured")
        query = build_search_query(disaster)
        if not query:
            return Degraded([], "disaster has no tags or location to search for")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    TWITTER_SEARCH_URL,
                    headers={"Authorization": f"Bearer {self.bearer_token}"},
                    params={
                        "query": query,
                        "max_results": 10,
                        "tweet.fields": "created_at,author_id,text",
                    },
                )
                response.raise_for_status()
                tweets = response.json().get("data") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Twitter API error for disaster %s: %s", disaster.id, e)
            return Degraded([], f"twitter request failed: {e}")

        await self.cache.set(key, tweets, CACHE_TTL_MINUTES)
        return Ok(tweets)
