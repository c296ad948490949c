import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List


def _default_database_url() -> str:
    """Default DB path: local SQLite file next to the working directory."""
    return "sqlite+aiosqlite:///./disaster_response.db"


def _env_bool(name: str, default: bool) -> bool:
    v = (os.environ.get(name) or "").strip().lower()
    if not v:
        return default
    return v in ("true", "1", "yes", "on")


def _env_float(name: str, default: float) -> float:
    v = (os.environ.get(name) or "").strip()
    if not v:
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    v = (os.environ.get(name) or "").strip()
    if not v:
        return list(default)
    return [item.strip() for item in v.split(",") if item.strip()]


@dataclass
class Settings:
    """Application settings loaded from environment variables with safe defaults."""

    app_name: str = "Disaster Response Coordination API"
    env: str = "dev"
    database_url: str = ""  # set from from_env
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    auto_create_schema: bool = True
    default_user_id: str = "netrunnerX"

    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    geocoding_user_agent: str = "DisasterResponsePlatform/1.0"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    twitter_bearer_token: str = ""

    http_timeout_seconds: float = 30.0
    scrape_timeout_seconds: float = 10.0
    cache_cleanup_interval_seconds: float = 600.0

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        db_url = os.getenv("DATABASE_URL") or _default_database_url()
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            env=os.getenv("ENV", cls.env),
            database_url=db_url,
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            cors_origins=_env_list("CORS_ORIGINS", ["http://localhost:3000", "http://127.0.0.1:3000"]),
            auto_create_schema=_env_bool("AUTO_CREATE_SCHEMA", cls.auto_create_schema),
            default_user_id=os.getenv("DEFAULT_USER_ID", cls.default_user_id),
            geocoding_url=os.getenv("GEOCODING_URL", cls.geocoding_url),
            geocoding_user_agent=os.getenv("GEOCODING_USER_AGENT", cls.geocoding_user_agent),
            gemini_api_key=(os.getenv("GEMINI_API_KEY") or "").strip(),
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", cls.gemini_base_url),
            twitter_bearer_token=(os.getenv("TWITTER_BEARER_TOKEN") or "").strip(),
            http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", cls.http_timeout_seconds),
            scrape_timeout_seconds=_env_float("SCRAPE_TIMEOUT_SECONDS", cls.scrape_timeout_seconds),
            cache_cleanup_interval_seconds=_env_float(
                "CACHE_CLEANUP_INTERVAL_SECONDS", cls.cache_cleanup_interval_seconds
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings.from_env()
