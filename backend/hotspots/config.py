"""Runtime configuration read from the environment.

Values come from process environment variables, with a ``.env`` file loaded
first when present. The places API key is optional at startup: its absence
surfaces as a ``ConfigurationError`` on the first places lookup.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = ("tourist_attraction", "park", "point_of_interest")


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _get_list(name: str, default: tuple[str, ...]) -> list[str]:
    raw = os.getenv(name)
    if raw is None:
        return list(default)
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or list(default)


@dataclass
class Settings:
    """Service settings. See ``Settings.from_env`` for the variable names."""

    google_places_api_key: str | None = None
    redis_url: str | None = "redis://localhost:6379"
    cache_ttl_seconds: int = 86400  # 24h
    max_results: int = 60  # up to 20 per category from the provider
    categories: list[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    timeout_seconds: float = 5.0
    max_retries: int = 0
    isolate_category_failures: bool = False
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        redis_url = os.getenv("REDIS_URL", "redis://localhost:6379").strip()
        return cls(
            google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY") or None,
            redis_url=redis_url or None,
            cache_ttl_seconds=int(os.getenv("PLACES_CACHE_TTL_SECONDS", "86400")),
            max_results=int(os.getenv("PLACES_MAX_RESULTS", "60")),
            categories=_get_list("PLACES_CATEGORIES", DEFAULT_CATEGORIES),
            timeout_seconds=float(os.getenv("PLACES_TIMEOUT_SECONDS", "5.0")),
            max_retries=int(os.getenv("PLACES_MAX_RETRIES", "0")),
            isolate_category_failures=_get_bool("PLACES_ISOLATE_CATEGORY_FAILURES", False),
            cors_origins=_get_list("CORS_ORIGINS", ("http://localhost:3000",)),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        if not _settings.google_places_api_key:
            logger.warning("GOOGLE_PLACES_API_KEY is not set; places lookups will fail")
    return _settings
