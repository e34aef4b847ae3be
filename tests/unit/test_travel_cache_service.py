"""Unit tests for the travel-cost cache and its stores."""

import fnmatch
import math
from concurrent.futures import ThreadPoolExecutor

from scenic_routes.models import Coordinates, PolylineShape
from scenic_routes.services.travel_cache import (
    InMemoryTravelCostStore,
    RedisTravelCostStore,
    TravelCostCache,
    build_travel_cache,
    polyline_key,
    time_key,
)
from tests.conftest import START, FakeTravelProvider, offset


class FakeRedis:
    """Just enough of redis.Redis for the store: string get/set plus key scans."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.expiries: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value
        self.expiries[key] = ttl

    def scan_iter(self, match: str):
        return iter([k for k in list(self.data) if fnmatch.fnmatchcase(k, match)])

    def delete(self, *keys: str) -> int:
        for key in keys:
            self.data.pop(key, None)
        return len(keys)


class TestKeys:
    """Tests for cache key formats."""

    def test_time_key_rounds_to_six_decimals(self) -> None:
        assert time_key(40.71280001, -74.006, 40.7, -74.0) == "40.712800,-74.006000->40.700000,-74.000000"

    def test_polyline_key_formats(self) -> None:
        a = Coordinates(lat=1.0, lng=2.0)
        b = Coordinates(lat=3.0, lng=4.0)
        end = Coordinates(lat=5.0, lng=6.0)

        assert polyline_key(START, [a, b], PolylineShape.LOOP) == (
            "40.712800,-74.006000|LOOP|1.000000,2.000000;3.000000,4.000000;"
        )
        assert polyline_key(START, [a], PolylineShape.WAYPOINTS) == (
            "40.712800,-74.006000|WAYPOINTS|1.000000,2.000000;"
        )
        assert polyline_key(START, [], PolylineShape.POINT_TO_POINT, end) == (
            "40.712800,-74.006000->5.000000,6.000000|P2P|"
        )


class TestTravelCostCacheTimes:
    """Tests for cached walking times."""

    def test_miss_then_hit(self, cache: TravelCostCache, travel_provider: FakeTravelProvider) -> None:
        target = offset(START, north_m=820)

        first = cache.time_between(START, target)
        second = cache.time_between(START, target)

        assert first == second == 10
        assert isinstance(first, int)
        assert travel_provider.time_calls == 1

        stats = cache.stats()
        assert stats.total_requests == 2
        assert stats.hits == 1
        assert stats.misses == 1
        assert stats.hit_rate == 50.0
        assert stats.time_entries == 1

    def test_nearby_coordinates_share_an_entry(
        self, cache: TravelCostCache, travel_provider: FakeTravelProvider
    ) -> None:
        cache.time(40.7128, -74.006, 40.72, -74.0)
        cache.time(40.71280001, -74.00600001, 40.72, -74.0)
        assert travel_provider.time_calls == 1

    def test_directions_are_separate_entries(
        self, cache: TravelCostCache, travel_provider: FakeTravelProvider
    ) -> None:
        target = offset(START, north_m=500)
        cache.time_between(START, target)
        cache.time_between(target, START)
        assert travel_provider.time_calls == 2
        assert cache.stats().time_entries == 2

    def test_unreachable_is_cached(self) -> None:
        blocked = offset(START, north_m=500)
        provider = FakeTravelProvider(blocked=[blocked])
        cache = TravelCostCache(provider)

        assert math.isinf(cache.time_between(START, blocked))
        assert math.isinf(cache.time_between(START, blocked))
        assert provider.time_calls == 1

    def test_concurrent_requests_are_counted(self, cache: TravelCostCache) -> None:
        targets = [offset(START, north_m=100 * (i % 10 + 1)) for i in range(200)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda t: cache.time_between(START, t), targets))

        assert len(results) == 200
        stats = cache.stats()
        assert stats.total_requests == 200
        assert stats.hits + stats.misses == 200
        assert stats.time_entries == 10


class TestTravelCostCachePolylines:
    """Tests for cached polylines."""

    def test_same_order_is_cached(self, cache: TravelCostCache, travel_provider: FakeTravelProvider) -> None:
        a = offset(START, north_m=200)
        b = offset(START, east_m=200)

        first = cache.polyline(START, [a, b], PolylineShape.LOOP)
        second = cache.polyline(START, [a, b], PolylineShape.LOOP)

        assert first == second
        assert first != ""
        assert travel_provider.polyline_calls == 1

    def test_reordered_waypoints_are_distinct(
        self, cache: TravelCostCache, travel_provider: FakeTravelProvider
    ) -> None:
        a = offset(START, north_m=200)
        b = offset(START, east_m=200)

        cache.polyline(START, [a, b], PolylineShape.LOOP)
        cache.polyline(START, [b, a], PolylineShape.LOOP)

        assert travel_provider.polyline_calls == 2
        assert cache.stats().polyline_entries == 2

    def test_shape_is_part_of_the_key(
        self, cache: TravelCostCache, travel_provider: FakeTravelProvider
    ) -> None:
        a = offset(START, north_m=200)
        loop = cache.polyline(START, [a], PolylineShape.LOOP)
        open_path = cache.polyline(START, [a], PolylineShape.WAYPOINTS)

        assert loop != open_path
        assert travel_provider.polyline_calls == 2

    def test_polyline_requests_count_in_stats(self, cache: TravelCostCache) -> None:
        a = offset(START, north_m=200)
        cache.polyline(START, [a], PolylineShape.WAYPOINTS)
        cache.polyline(START, [a], PolylineShape.WAYPOINTS)

        stats = cache.stats()
        assert stats.total_requests == 2
        assert stats.hits == 1
        assert stats.total_size == 1


class TestClear:
    def test_clear_resets_entries_and_counters(
        self, cache: TravelCostCache, travel_provider: FakeTravelProvider
    ) -> None:
        target = offset(START, north_m=300)
        cache.time_between(START, target)
        cache.polyline(START, [target], PolylineShape.LOOP)

        cache.clear()

        stats = cache.stats()
        assert stats.total_requests == 0
        assert stats.hit_rate == 0.0
        assert stats.total_size == 0

        cache.time_between(START, target)
        assert travel_provider.time_calls == 2


class TestStores:
    """Tests for the backing stores."""

    def test_in_memory_store(self) -> None:
        store = InMemoryTravelCostStore()
        assert store.get("k") is None
        store.set("k", "1.0")
        assert store.get("k") == "1.0"
        assert store.size() == 1
        store.clear()
        assert store.size() == 0

    def test_redis_store_prefixes_keys(self) -> None:
        client = FakeRedis()
        client.set("unrelated", "x")
        store = RedisTravelCostStore(client, "travel:time:")

        store.set("a->b", "12.0")

        assert client.data["travel:time:a->b"] == "12.0"
        assert store.get("a->b") == "12.0"
        assert store.size() == 1

        store.clear()
        assert store.size() == 0
        assert client.data == {"unrelated": "x"}

    def test_redis_store_uses_ttl(self) -> None:
        client = FakeRedis()
        store = RedisTravelCostStore(client, "travel:time:", ttl_seconds=3600)
        store.set("a->b", "12.0")
        assert client.expiries == {"travel:time:a->b": 3600}

    def test_cache_over_redis_stores(self, travel_provider: FakeTravelProvider) -> None:
        client = FakeRedis()
        cache = TravelCostCache(
            travel_provider,
            time_store=RedisTravelCostStore(client, "travel:time:"),
            polyline_store=RedisTravelCostStore(client, "travel:polyline:"),
        )
        target = offset(START, north_m=820)

        assert cache.time_between(START, target) == 10
        assert cache.time_between(START, target) == 10
        assert travel_provider.time_calls == 1
        assert cache.stats().time_entries == 1
        assert cache.stats().polyline_entries == 0

    def test_build_without_redis_is_in_memory(self, travel_provider: FakeTravelProvider) -> None:
        cache = build_travel_cache(travel_provider)
        assert cache.provider is travel_provider
        assert cache.stats().total_size == 0
