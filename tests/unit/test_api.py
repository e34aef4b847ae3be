"""Tests for the HTTP layer, using FastAPI's TestClient with in-memory providers."""

import pytest
from fastapi.testclient import TestClient

from scenic_routes.api import routes
from scenic_routes.api.routes import parse_category_weights, parse_route_shape
from scenic_routes.main import app, status_for
from scenic_routes.models import ErrorCode, ExternalServiceUnavailableError, POICategory, RouteShape
from scenic_routes.services.metrics import MetricsService
from scenic_routes.services.route_planner import RoutePlanner
from scenic_routes.services.travel_cache import TravelCostCache
from tests.conftest import START, FakePlacesProvider, FakeTravelProvider, make_poi


def sightseeing_pois():
    return [
        make_poi("City Museum", north_m=600, types=["museum"], review_count=60000, rating=4.8),
        make_poi("Riverside Green", north_m=500, types=["park"], review_count=60000, rating=4.8),
    ]


@pytest.fixture
def places() -> FakePlacesProvider:
    return FakePlacesProvider([
        make_poi("Near", north_m=50, score=100.0),
        make_poi("Far", north_m=3000, score=80.0),
    ])


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, places: FakePlacesProvider) -> TestClient:
    planner = RoutePlanner(places, TravelCostCache(FakeTravelProvider()), MetricsService())
    monkeypatch.setattr(routes, "_route_planner", planner)
    return TestClient(app)


def route_body(**overrides) -> dict:
    body = {"start_lat": START.lat, "start_lng": START.lng, "minutes": 60}
    body.update(overrides)
    return body


class TestParsing:
    """Tests for request value parsing."""

    @pytest.mark.parametrize("value,expected", [
        (None, RouteShape.LOOP),
        ("", RouteShape.LOOP),
        ("loop", RouteShape.LOOP),
        ("ONE_WAY", RouteShape.ONE_WAY),
        ("point-to-point", RouteShape.POINT_TO_POINT),
        ("zigzag", RouteShape.LOOP),
    ])
    def test_route_shape(self, value, expected) -> None:
        assert parse_route_shape(value) == expected

    def test_category_weights(self) -> None:
        weights = parse_category_weights({"park": 2.0, "MUSEUM": 0, "unicorns": 5.0})
        assert weights == {POICategory.PARK: 2.0, POICategory.MUSEUM: 0.0}

    def test_no_weights(self) -> None:
        assert parse_category_weights(None) == {}

    def test_status_codes(self) -> None:
        assert status_for(ErrorCode.TIME_LIMIT_OUT_OF_RANGE) == 400
        assert status_for(ErrorCode.NO_SUITABLE_POIS) == 400
        assert status_for(ErrorCode.EXTERNAL_SERVICE_UNAVAILABLE) == 503
        assert status_for(ErrorCode.UNEXPECTED_ERROR) == 500


class TestOptimizedRoute:
    """Tests for POST /api/routes/optimized."""

    def test_loop(self, client: TestClient) -> None:
        response = client.post("/api/routes/optimized", json=route_body())

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["error"] is None
        assert [p["name"] for p in data["route"]["points"]] == ["Near"]
        assert data["route"]["total_time"] == 7
        assert data["route"]["polyline"]

    def test_excluded_category(self, client: TestClient, places: FakePlacesProvider) -> None:
        places.pois = [make_poi("Green", north_m=100, types=["park"])]

        response = client.post("/api/routes/optimized", json=route_body(preferences={"park": 0}))

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "NO_SUITABLE_POIS"
        assert error["user_message"]

    def test_time_limit_out_of_range(self, client: TestClient) -> None:
        response = client.post("/api/routes/optimized", json=route_body(minutes=5))

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["error"]["code"] == "TIME_LIMIT_OUT_OF_RANGE"

    def test_missing_end_point(self, client: TestClient) -> None:
        response = client.post(
            "/api/routes/optimized", json=route_body(route_shape="point_to_point")
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "MISSING_END_POINT"

    def test_malformed_body(self, client: TestClient) -> None:
        response = client.post("/api/routes/optimized", json={"start_lat": "north", "minutes": 60})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_provider_outage(self, client: TestClient, places: FakePlacesProvider) -> None:
        places.error = ExternalServiceUnavailableError("places down")

        response = client.post("/api/routes/optimized", json=route_body())

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "EXTERNAL_SERVICE_UNAVAILABLE"

    def test_unexpected_failure(self, client: TestClient, places: FakePlacesProvider) -> None:
        places.error = RuntimeError("bug")

        response = client.post("/api/routes/optimized", json=route_body())

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "UNEXPECTED_ERROR"


class TestSightseeing:
    """Tests for POST /api/routes/sightseeing."""

    def test_day(self, client: TestClient, places: FakePlacesProvider) -> None:
        places.pois = sightseeing_pois()

        response = client.post("/api/routes/sightseeing", json={
            "start_lat": START.lat,
            "start_lng": START.lng,
            "start_time": "09:00",
            "end_time": "17:00",
        })

        assert response.status_code == 200
        schedule = response.json()["schedule"]
        names = [s["attraction"]["poi"]["name"] for s in schedule["stops"]]
        assert "City Museum" in names
        assert "Riverside Green" in names
        assert schedule["breaks"][0]["kind"] == "LUNCH"

    def test_invalid_window(self, client: TestClient) -> None:
        response = client.post("/api/routes/sightseeing", json={
            "start_lat": START.lat,
            "start_lng": START.lng,
            "start_time": "18:00",
            "end_time": "09:00",
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_TIME_WINDOW"


class TestInspection:
    """Tests for cache and metrics endpoints."""

    def test_cache_stats(self, client: TestClient) -> None:
        client.post("/api/routes/optimized", json=route_body())

        for path in ("/api/cache/stats", "/api/metrics/cache"):
            response = client.get(path)
            assert response.status_code == 200
            stats = response.json()
            assert stats["total_requests"] > 0
            assert stats["time_entries"] > 0

    def test_metrics_and_reset(self, client: TestClient) -> None:
        client.post("/api/routes/optimized", json=route_body())
        client.post("/api/routes/optimized", json=route_body(minutes=5))

        metrics = client.get("/api/metrics").json()
        assert metrics["total_requests"] == 2
        assert metrics["successful_requests"] == 1
        assert metrics["error_breakdown"] == {"TIME_LIMIT_OUT_OF_RANGE": 1}

        response = client.post("/api/metrics/reset")
        assert response.json() == {"status": "Metrics reset successfully"}
        assert client.get("/api/metrics").json()["total_requests"] == 0

    def test_dashboard(self, client: TestClient) -> None:
        client.post("/api/routes/optimized", json=route_body())

        data = client.get("/api/metrics/dashboard").json()

        assert data["application_metrics"]["route_type_breakdown"]["LOOP"] == 1
        assert data["cache_metrics"]["total_size"] > 0

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
