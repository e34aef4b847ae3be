"""Runtime configuration.

Values come from environment variables; a local ``.env`` file is loaded
first so development setups don't need to export anything.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring non-integer {name}={raw!r}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[CONFIG] Ignoring non-numeric {name}={raw!r}")
        return default


@dataclass
class Settings:
    """Process-wide settings for providers, cache and HTTP surface."""

    osrm_url: str = "https://router.project-osrm.org"
    google_places_api_key: str | None = None
    places_search_radius_m: int = 3000
    places_max_pages: int = 3
    http_timeout_seconds: float = 15.0
    travel_cache_redis_url: str | None = None
    travel_cache_ttl_seconds: int | None = None
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            osrm_url=os.getenv("OSRM_URL", cls.osrm_url).rstrip("/"),
            google_places_api_key=os.getenv("GOOGLE_PLACES_API_KEY") or None,
            places_search_radius_m=_env_int("PLACES_SEARCH_RADIUS_M", 3000),
            places_max_pages=_env_int("PLACES_MAX_PAGES", 3),
            http_timeout_seconds=_env_float("HTTP_TIMEOUT_SECONDS", 15.0),
            travel_cache_redis_url=os.getenv("TRAVEL_CACHE_REDIS_URL") or None,
            travel_cache_ttl_seconds=_env_int("TRAVEL_CACHE_TTL_SECONDS", None),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else list(DEFAULT_CORS_ORIGINS)
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
