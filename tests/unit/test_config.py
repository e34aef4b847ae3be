"""Unit tests for environment-driven settings."""

import pytest

from scenic_routes.config import DEFAULT_CORS_ORIGINS, Settings

ENV_VARS = (
    "OSRM_URL",
    "GOOGLE_PLACES_API_KEY",
    "PLACES_SEARCH_RADIUS_M",
    "PLACES_MAX_PAGES",
    "HTTP_TIMEOUT_SECONDS",
    "TRAVEL_CACHE_REDIS_URL",
    "TRAVEL_CACHE_TTL_SECONDS",
    "CORS_ORIGINS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings.from_env()

        assert settings.osrm_url == "https://router.project-osrm.org"
        assert settings.google_places_api_key is None
        assert settings.places_search_radius_m == 3000
        assert settings.travel_cache_redis_url is None
        assert settings.travel_cache_ttl_seconds is None
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS
        assert settings.log_level == "INFO"

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OSRM_URL", "http://localhost:5000/")
        monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "secret")
        monkeypatch.setenv("PLACES_MAX_PAGES", "1")
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("TRAVEL_CACHE_REDIS_URL", "redis://localhost:6379/0")
        monkeypatch.setenv("TRAVEL_CACHE_TTL_SECONDS", "3600")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.osrm_url == "http://localhost:5000"
        assert settings.google_places_api_key == "secret"
        assert settings.places_max_pages == 1
        assert settings.http_timeout_seconds == 2.5
        assert settings.travel_cache_redis_url == "redis://localhost:6379/0"
        assert settings.travel_cache_ttl_seconds == 3600
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert settings.log_level == "DEBUG"

    def test_bad_numbers_fall_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PLACES_SEARCH_RADIUS_M", "wide")
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "soon")

        settings = Settings.from_env()

        assert settings.places_search_radius_m == 3000
        assert settings.http_timeout_seconds == 15.0
